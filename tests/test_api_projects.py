"""
SiteLedger
Tests: Project API, dashboard and health checks.

Covers:
    - Project list / search / create / get / update / delete
    - Role gating on delete
    - Currency change reflected in BOQ display strings
    - Dashboard snapshot
    - Health and readiness probes
"""

from siteledger.utils.errors import _DEFAULT_STATUS, E

SEED_PROJECT_ID = "proj-001"


def _create_project(client, **kw):
    payload = {"name": "Ring Road Phase II", "code": "RR-II", "start_date": "2024-01-01",
               "end_date": "2025-12-31"}
    payload.update(kw)
    res = client.post("/api/v1/projects", json=payload)
    assert res.status_code == 201, res.get_json()
    return res.get_json()


# ═════════════════════════════════════════════════════════════════════════════
# PROJECTS
# ═════════════════════════════════════════════════════════════════════════════

class TestProjectCRUD:
    def test_list_seeded_projects(self, client):
        res = client.get("/api/v1/projects")
        assert res.status_code == 200
        data = res.get_json()
        assert data["total"] == 2
        assert {p["code"] for p in data["items"]} == {"URLIP-TM", "SH-22-PKG-II"}
        assert "boq" not in data["items"][0]

    def test_search(self, client):
        data = client.get("/api/v1/projects?q=highway").get_json()
        assert [p["id"] for p in data["items"]] == ["proj-002"]

    def test_create_project(self, client):
        project = _create_project(client)
        assert project["id"].startswith("proj-")
        assert project["boq"] == []
        assert project["location"] == "Unknown"
        assert client.get("/api/v1/projects").get_json()["total"] == 3
        assert project["currency"] == "$"

    def test_create_uses_configured_default_currency(self, make_app):
        client = make_app(DEFAULT_CURRENCY="NPR").test_client()
        assert _create_project(client)["currency"] == "NPR"
        assert _create_project(client, code="RR-III", currency="Rs.")["currency"] == "Rs."

    def test_create_requires_name_and_code(self, client):
        res = client.post("/api/v1/projects", json={"location": "Somewhere"})
        assert res.status_code == 422
        assert res.get_json()["details"] == {"name": "required", "code": "required"}

    def test_create_rejects_non_object_body(self, client):
        res = client.post("/api/v1/projects", json=["not", "an", "object"])
        assert res.status_code == 400

    def test_duplicate_code_rejected(self, client):
        res = client.post("/api/v1/projects", json={"name": "Copy", "code": "URLIP-TM"})
        assert res.status_code == 422

    def test_get_project(self, client, seeded_project):
        assert seeded_project["id"] == SEED_PROJECT_ID
        assert len(seeded_project["boq"]) == 6
        assert seeded_project["daily_reports"][0]["report_number"] == "DPR-2023-10-30"

    def test_get_unknown_project(self, client):
        res = client.get("/api/v1/projects/proj-404")
        assert res.status_code == 404
        assert res.get_json()["code"] == "ERR_NOT_FOUND"

    def test_update_project(self, client):
        res = client.put(f"/api/v1/projects/{SEED_PROJECT_ID}", json={
            "engineer_name": "A. Sharma", "contractor_name": "B. Lee", "boq": [],
        })
        assert res.status_code == 200
        project = client.get(f"/api/v1/projects/{SEED_PROJECT_ID}").get_json()
        assert project["engineer_name"] == "A. Sharma"
        assert len(project["boq"]) == 6

    def test_update_rejects_inverted_dates(self, client):
        res = client.put(f"/api/v1/projects/{SEED_PROJECT_ID}", json={"end_date": "2020-01-01"})
        assert res.status_code == 422
        assert res.get_json()["details"] == {"end_date": "before start_date"}

    def test_delete_requires_role(self, client):
        res = client.delete(f"/api/v1/projects/{SEED_PROJECT_ID}",
                            headers={"X-User-Role": "Site Engineer"})
        assert res.status_code == 403
        assert client.get(f"/api/v1/projects/{SEED_PROJECT_ID}").status_code == 200

    def test_delete_as_admin(self, client):
        res = client.delete(f"/api/v1/projects/{SEED_PROJECT_ID}", headers={"X-User-Role": "Admin"})
        assert res.status_code == 200
        assert client.get(f"/api/v1/projects/{SEED_PROJECT_ID}").status_code == 404

    def test_unknown_role_rejected(self, client):
        res = client.delete(f"/api/v1/projects/{SEED_PROJECT_ID}", headers={"X-User-Role": "Wizard"})
        assert res.status_code == 422

    def test_changes_survive_app_restart(self, make_app):
        first = make_app().test_client()
        _create_project(first, code="PERSIST-1")
        second = make_app().test_client()
        codes = {p["code"] for p in second.get("/api/v1/projects").get_json()["items"]}
        assert "PERSIST-1" in codes


class TestCurrency:
    def test_set_currency(self, client):
        res = client.patch(f"/api/v1/projects/{SEED_PROJECT_ID}/currency", json={"currency": "NPR "})
        assert res.status_code == 200
        assert res.get_json()["currency"] == "NPR"
        totals = client.get(f"/api/v1/projects/{SEED_PROJECT_ID}/boq/totals").get_json()
        assert totals["non_ps_total_display"] == "NPR55,125,000.00"

    def test_currency_required(self, client):
        assert client.patch(f"/api/v1/projects/{SEED_PROJECT_ID}/currency", json={}).status_code == 400
        assert client.patch(f"/api/v1/projects/{SEED_PROJECT_ID}/currency", json="Rs.").status_code == 400
        res = client.patch(f"/api/v1/projects/{SEED_PROJECT_ID}/currency", json={"currency": " "})
        assert res.status_code == 422


# ═════════════════════════════════════════════════════════════════════════════
# DASHBOARD / HEALTH
# ═════════════════════════════════════════════════════════════════════════════

class TestDashboard:
    def test_dashboard_snapshot(self, client):
        res = client.get(f"/api/v1/projects/{SEED_PROJECT_ID}/dashboard")
        assert res.status_code == 200
        data = res.get_json()
        assert data["project"]["code"] == "URLIP-TM"
        assert data["rfis"] == {"total": 3, "open": 1, "approved": 1, "rejected": 1, "closed": 0}
        assert data["lab_tests"]["pass_rate"] == 100.0
        assert data["boq"]["item_count"] == 6
        assert data["boq"]["physical_progress"] == 41.77
        assert data["schedule"]["delayed"] == 1
        assert data["inventory"] == {"item_count": 3, "low_stock_count": 1}
        assert data["vehicles"] == {"total": 4, "active": 3}
        assert data["daily_reports"]["latest"] == "DPR-2023-10-30"

    def test_dashboard_unknown_project(self, client):
        assert client.get("/api/v1/projects/nope/dashboard").status_code == 404


class TestHealth:
    def test_health(self, client):
        res = client.get("/api/v1/health")
        assert res.status_code == 200
        assert res.get_json() == {"status": "ok", "app": "SiteLedger"}

    def test_ready(self, client):
        res = client.get("/api/v1/health/ready")
        assert res.status_code == 200
        data = res.get_json()
        assert data["checks"]["storage"]["status"] == "ok"
        assert data["checks"]["progress_source"] == "schedule"

    def test_request_headers(self, client):
        res = client.get("/api/v1/projects", headers={"X-Request-ID": "abc123"})
        assert res.headers["X-Request-ID"] == "abc123"
        assert "X-Request-Duration-Ms" in res.headers

    def test_unknown_api_route(self, client):
        res = client.get("/api/v1/nothing-here")
        assert res.status_code == 404
        assert res.get_json()["path"] == "/api/v1/nothing-here"


class TestErrorCodes:
    def test_every_code_has_a_default_status(self):
        codes = {value for name, value in vars(E).items() if name.isupper()}
        assert codes == set(_DEFAULT_STATUS)
        assert _DEFAULT_STATUS[E.STORAGE] == 500
