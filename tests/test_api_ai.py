"""
SiteLedger
Tests: AI gateway, Project Analyst and the AI endpoints.

All tests run offline: the testing config routes to the local stub, and the
Gemini paths are exercised only up to the missing-key check.
"""

import pytest

from siteledger.ai.assistants.project_analyst import (
    MSG_ANALYSIS_ERROR,
    MSG_LETTER_ERROR,
    MSG_LETTER_NO_KEY,
    MSG_NO_ANALYSIS,
    MSG_NO_KEY,
    ProjectAnalyst,
)
from siteledger.ai.gateway import LOCAL_MODEL, AIUnavailableError, LLMGateway
from siteledger.models.store import load_seed_projects

PID = "proj-001"


class _FailingGateway:
    model = "gemini-2.5-flash"
    available = True

    def chat(self, messages, **kwargs):
        raise RuntimeError("upstream 503")


class _EmptyGateway:
    model = "gemini-2.5-flash"
    available = True

    def chat(self, messages, **kwargs):
        return {"content": ""}


@pytest.fixture()
def project():
    return load_seed_projects()[0]


# ═════════════════════════════════════════════════════════════════════════════
# GATEWAY
# ═════════════════════════════════════════════════════════════════════════════

class TestGateway:
    def test_local_stub_is_available(self):
        gw = LLMGateway(model=LOCAL_MODEL)
        assert gw.available
        result = gw.chat([{"role": "user", "content": "anything delayed?"}])
        assert result["model"] == LOCAL_MODEL
        assert "double shifts" in result["content"]

    def test_gemini_without_key(self):
        gw = LLMGateway(model="gemini-2.5-flash", api_key="")
        assert not gw.available
        with pytest.raises(AIUnavailableError):
            gw.chat([{"role": "user", "content": "hi"}])

    def test_from_config(self):
        gw = LLMGateway.from_config({"AI_MODEL": "gemini-2.5-pro", "GEMINI_API_KEY": "k"})
        assert (gw.model, gw.api_key, gw.available) == ("gemini-2.5-pro", "k", True)


# ═════════════════════════════════════════════════════════════════════════════
# PROJECT ANALYST
# ═════════════════════════════════════════════════════════════════════════════

class TestProjectAnalyst:
    def test_prompt_samples_open_tasks_only(self, project):
        prompt = ProjectAnalyst(LLMGateway(model=LOCAL_MODEL)).build_analysis_prompt(
            project, "How are we doing?",
        )
        assert 'User Query: "How are we doing?"' in prompt
        assert "GSB Layer (Km 0-5)" in prompt
        assert "Site Clearance (Km 0-5)" not in prompt

    def test_missing_key(self, project):
        analyst = ProjectAnalyst(LLMGateway(model="gemini-2.5-flash", api_key=""))
        assert analyst.analyze(project, "status?") == MSG_NO_KEY
        assert analyst.draft_letter("Delay", "Engineer", project.name) == MSG_LETTER_NO_KEY

    def test_provider_error_becomes_message(self, project):
        analyst = ProjectAnalyst(_FailingGateway())
        assert analyst.analyze(project, "status?") == MSG_ANALYSIS_ERROR
        assert analyst.draft_letter("Delay", "Engineer", project.name) == MSG_LETTER_ERROR

    def test_empty_answer(self, project):
        assert ProjectAnalyst(_EmptyGateway()).analyze(project, "status?") == MSG_NO_ANALYSIS

    def test_letter_prompt(self):
        prompt = ProjectAnalyst.build_letter_prompt("Site handover", "Engineer", "Ring Road")
        assert "Topic: Site handover" in prompt
        assert "Recipient Role: Engineer" in prompt
        assert "[Date]" in prompt


# ═════════════════════════════════════════════════════════════════════════════
# ENDPOINTS
# ═════════════════════════════════════════════════════════════════════════════

class TestAnalyzeEndpoint:
    def test_analyze(self, client):
        res = client.post(f"/api/v1/projects/{PID}/ai/analyze",
                          json={"query": "Which activities are delayed?"})
        assert res.status_code == 200
        data = res.get_json()
        assert data["project_id"] == PID
        assert data["model"] == LOCAL_MODEL
        assert "double shifts" in data["analysis"]

    def test_query_required(self, client):
        res = client.post(f"/api/v1/projects/{PID}/ai/analyze", json={"query": "  "})
        assert res.status_code == 400
        assert client.post(f"/api/v1/projects/{PID}/ai/analyze", json=["status?"]).status_code == 400

    def test_unknown_project(self, client):
        res = client.post("/api/v1/projects/nope/ai/analyze", json={"query": "x"})
        assert res.status_code == 404

    def test_missing_key_is_not_an_http_error(self, make_app):
        client = make_app(AI_MODEL="gemini-2.5-flash", GEMINI_API_KEY="").test_client()
        res = client.post(f"/api/v1/projects/{PID}/ai/analyze", json={"query": "status?"})
        assert res.status_code == 200
        assert res.get_json()["analysis"] == MSG_NO_KEY


class TestDraftLetterEndpoint:
    def test_draft(self, client):
        res = client.post("/api/v1/ai/draft-letter", json={
            "topic": "Delay in land acquisition", "recipient": "Engineer", "project_id": PID,
        })
        assert res.status_code == 200
        assert "[Date]" in res.get_json()["letter"]

    def test_fields_required(self, client):
        res = client.post("/api/v1/ai/draft-letter", json={"topic": "Delay"})
        assert res.status_code == 400
        assert client.post("/api/v1/ai/draft-letter", json=["Delay", "Engineer"]).status_code == 400

    def test_unknown_project(self, client):
        res = client.post("/api/v1/ai/draft-letter", json={
            "topic": "Delay", "recipient": "Engineer", "project_id": "nope",
        })
        assert res.status_code == 404

    def test_missing_key(self, make_app):
        client = make_app(AI_MODEL="gemini-2.5-flash", GEMINI_API_KEY="").test_client()
        res = client.post("/api/v1/ai/draft-letter", json={"topic": "Delay", "recipient": "Engineer"})
        assert res.get_json()["letter"] == MSG_LETTER_NO_KEY
