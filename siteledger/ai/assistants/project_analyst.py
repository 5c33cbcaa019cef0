"""
Project Analyst assistant.

Two jobs:
    1. analyze(project, query)  answer a PM question from a sample of
                                open schedule tasks, recent RFIs and BOQ lines
    2. draft_letter(...)        formal contractual correspondence draft

Both always return display text. Provider failures are logged and turned
into a short placeholder message.
"""

import json
import logging

from siteledger.ai.gateway import LLMGateway
from siteledger.models.project import Project
from siteledger.models.schedule import TaskStatus

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 5

MSG_NO_KEY = "AI Service Unavailable: Missing API Key."
MSG_NO_ANALYSIS = "No analysis generated."
MSG_ANALYSIS_ERROR = "An error occurred while communicating with the AI service."
MSG_LETTER_NO_KEY = "AI Service Unavailable."
MSG_NO_DRAFT = "Could not generate draft."
MSG_LETTER_ERROR = "Error generating letter."

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert Senior Project Manager for a major Road Construction project."
)


def _sample(records, limit: int = SAMPLE_SIZE) -> str:
    return json.dumps([r.to_dict() for r in records[:limit]], ensure_ascii=False)


class ProjectAnalyst:
    """AI helper for project managers."""

    def __init__(self, gateway: LLMGateway):
        self.gateway = gateway

    def build_analysis_prompt(self, project: Project, query: str) -> str:
        open_tasks = [t for t in project.schedule if t.status != TaskStatus.COMPLETED]
        return (
            "Analyze the following project data and answer the user's query.\n\n"
            f'User Query: "{query}"\n\n'
            "Project Data:\n\n"
            f"1. Critical Schedule Items (Sample):\n{_sample(open_tasks)}\n\n"
            f"2. Recent RFIs (Request for Inspection):\n{_sample(project.rfis)}\n\n"
            f"3. BOQ Financial Progress (Sample):\n{_sample(project.boq)}\n\n"
            "Instructions:\n"
            "- Be concise and professional.\n"
            "- If the schedule shows delays, suggest mitigation strategies "
            "(e.g., double shifts, parallel working).\n"
            "- If RFIs are rejected, emphasize quality control.\n"
            "- Focus on actionable advice for a Project Manager."
        )

    def analyze(self, project: Project, query: str) -> str:
        if not self.gateway.available:
            logger.warning("AI analysis requested without an API key")
            return MSG_NO_KEY
        messages = [
            {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
            {"role": "user", "content": self.build_analysis_prompt(project, query)},
        ]
        try:
            result = self.gateway.chat(messages)
        except Exception:
            logger.exception("AI analysis failed for project %s", project.id)
            return MSG_ANALYSIS_ERROR
        return result.get("content") or MSG_NO_ANALYSIS

    @staticmethod
    def build_letter_prompt(topic: str, recipient: str, project_name: str) -> str:
        return (
            "Draft a formal construction project correspondence letter.\n\n"
            f"Topic: {topic}\n"
            f"Recipient Role: {recipient}\n"
            "Sender Role: Project Manager\n"
            f"Project: {project_name}\n\n"
            "Style: Formal, Contractual, Professional.\n"
            "Include placeholders for [Date], [Ref No], etc."
        )

    def draft_letter(self, topic: str, recipient: str, project_name: str) -> str:
        if not self.gateway.available:
            return MSG_LETTER_NO_KEY
        messages = [{"role": "user", "content": self.build_letter_prompt(topic, recipient, project_name)}]
        try:
            result = self.gateway.chat(messages)
        except Exception:
            logger.exception("AI letter drafting failed (topic=%r)", topic)
            return MSG_LETTER_ERROR
        return result.get("content") or MSG_NO_DRAFT
