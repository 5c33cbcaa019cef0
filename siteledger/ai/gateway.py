"""
LLM gateway.

Routes chat calls to a provider by model name:
    - gemini-*     Google Gemini via google-genai (needs GEMINI_API_KEY)
    - local-stub   deterministic offline responses for dev/testing

One attempt per call: failures propagate to the caller, which decides what
the user sees.

Usage:
    from siteledger.ai.gateway import LLMGateway
    gw = LLMGateway(model="gemini-2.5-flash", api_key="...")
    result = gw.chat([{"role": "user", "content": "Summarise progress"}])
    result["content"]
"""

import logging
import time
from abc import ABC, abstractmethod

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
LOCAL_MODEL = "local-stub"


class AIUnavailableError(RuntimeError):
    """No usable provider (typically: missing API key)."""


# ── Provider Abstract Base ────────────────────────────────────────────────────

class LLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    def chat(self, messages: list, model: str, **kwargs) -> dict:
        """
        Send a chat completion request.

        Args:
            messages: List of {"role": "...", "content": "..."} dicts.
            model: Model identifier string.
            **kwargs: temperature, max_tokens.

        Returns:
            dict with keys: content, prompt_tokens, completion_tokens, model
        """
        ...


# ── Gemini Provider ───────────────────────────────────────────────────────────

class GeminiProvider(LLMProvider):
    """
    Google Gemini API provider.

    Environment:
        GEMINI_API_KEY (surfaced through app config)
    """

    def __init__(self, api_key: str):
        self.api_key = api_key
        self._client = None

    def _get_client(self):
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def chat(self, messages: list, model: str = DEFAULT_MODEL, **kwargs) -> dict:
        client = self._get_client()

        system_parts = []
        contents = []
        for m in messages:
            if m["role"] == "system":
                system_parts.append(m["content"])
            else:
                role = "model" if m["role"] == "assistant" else "user"
                contents.append(types.Content(role=role, parts=[types.Part(text=m["content"])]))

        config = types.GenerateContentConfig(
            temperature=kwargs.get("temperature", 0.3),
            max_output_tokens=kwargs.get("max_tokens", 2048),
        )
        if system_parts:
            config.system_instruction = "\n\n".join(system_parts)

        response = client.models.generate_content(model=model, contents=contents, config=config)

        usage = response.usage_metadata
        return {
            "content": response.text or "",
            "prompt_tokens": getattr(usage, "prompt_token_count", 0) or 0,
            "completion_tokens": getattr(usage, "candidates_token_count", 0) or 0,
            "model": model,
        }


# ── Local Stub Provider ───────────────────────────────────────────────────────

class LocalStubProvider(LLMProvider):
    """
    Local stub that returns deterministic responses for dev/testing.
    No API key required.
    """

    def chat(self, messages: list, model: str = LOCAL_MODEL, **kwargs) -> dict:
        user_msg = ""
        for m in reversed(messages):
            if m["role"] == "user":
                user_msg = m["content"]
                break

        content = self._generate_stub_response(user_msg)
        return {
            "content": content,
            "prompt_tokens": len(user_msg.split()) * 2,
            "completion_tokens": len(content.split()) * 2,
            "model": LOCAL_MODEL,
        }

    @staticmethod
    def _generate_stub_response(user_msg: str) -> str:
        lower = user_msg.lower()
        if "correspondence letter" in lower:
            return (
                "[Date]\n[Ref No]\n\nSubject: Project correspondence\n\n"
                "Dear Sir/Madam,\n\nWe refer to the above subject and request your "
                "attention to the matters set out below.\n\nYours faithfully,\nProject Manager"
            )
        if "delayed" in lower:
            return (
                "Schedule shows delayed activities. Consider double shifts and parallel "
                "working fronts on the critical path."
            )
        return "Project is progressing; no critical issues detected in the sampled data."


# ── Gateway ───────────────────────────────────────────────────────────────────

class LLMGateway:
    """Central entry point for all LLM calls."""

    def __init__(self, model: str = DEFAULT_MODEL, api_key: str | None = None):
        self.model = model or DEFAULT_MODEL
        self.api_key = api_key or ""
        self._provider = None

    @classmethod
    def from_config(cls, config) -> "LLMGateway":
        return cls(model=config.get("AI_MODEL", DEFAULT_MODEL), api_key=config.get("GEMINI_API_KEY"))

    @property
    def is_local(self) -> bool:
        return self.model == LOCAL_MODEL

    @property
    def available(self) -> bool:
        return self.is_local or bool(self.api_key)

    def _get_provider(self) -> LLMProvider:
        if self._provider is None:
            if self.is_local:
                self._provider = LocalStubProvider()
            elif not self.api_key:
                raise AIUnavailableError("GEMINI_API_KEY is not configured")
            else:
                self._provider = GeminiProvider(self.api_key)
        return self._provider

    def chat(self, messages: list, **kwargs) -> dict:
        provider = self._get_provider()
        start = time.perf_counter()
        result = provider.chat(messages, model=self.model, **kwargs)
        logger.info(
            "LLM call model=%s prompt_tokens=%s completion_tokens=%s latency_ms=%.0f",
            result.get("model"), result.get("prompt_tokens"), result.get("completion_tokens"),
            (time.perf_counter() - start) * 1000,
        )
        return result
