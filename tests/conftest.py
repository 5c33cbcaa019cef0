"""
Shared pytest fixtures for the SiteLedger test suite.

Provides:
    - _counter_ids: predictable ids ("rfi-1", "rfi-2", ...) (autouse)
    - app: Flask application on a fresh data directory (function-scoped)
    - make_app: factory for apps with config overrides (progress source, AI model)
    - client: Flask test client
    - seeded_project: the bundled "proj-001" as served by the API
"""

import pytest

from siteledger import create_app
from siteledger.utils.ids import CounterIdAllocator, get_allocator, set_allocator

SEED_PROJECT_ID = "proj-001"
SECOND_PROJECT_ID = "proj-002"


@pytest.fixture(autouse=True)
def _counter_ids():
    previous = get_allocator()
    set_allocator(CounterIdAllocator())
    yield
    set_allocator(previous)


# ── App fixtures ─────────────────────────────────────────────────────────


@pytest.fixture()
def make_app(tmp_path):
    """Build a testing app on ``tmp_path``; keyword args override config keys."""

    def _make(**overrides):
        overrides.setdefault("DATA_DIR", str(tmp_path / "data"))
        return create_app("testing", **overrides)

    return _make


@pytest.fixture()
def app(make_app):
    """Testing app with the schedule as progress source (the default)."""
    return make_app()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def report_client(make_app):
    """Client for an app where daily reports own BOQ progress."""
    return make_app(PROGRESS_SOURCE="daily_reports").test_client()


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def seeded_project(client):
    res = client.get(f"/api/v1/projects/{SEED_PROJECT_ID}")
    assert res.status_code == 200
    return res.get_json()
