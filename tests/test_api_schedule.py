"""
SiteLedger
Tests: Schedule API and schedule-driven BOQ progress.
"""

import pytest

PID = "proj-001"


def _boq_completed(client, item_id):
    items = client.get(f"/api/v1/projects/{PID}/boq").get_json()["items"]
    return next(i["completed_quantity"] for i in items if i["id"] == item_id)


class TestListing:
    def test_list_with_summary(self, client):
        res = client.get(f"/api/v1/projects/{PID}/schedule")
        assert res.status_code == 200
        data = res.get_json()
        assert len(data["items"]) == 5
        assert data["summary"]["total"] == 5
        assert data["summary"]["delayed"] == 1
        assert data["summary"]["completed"] == 2

    def test_filter_by_status(self, client):
        data = client.get(f"/api/v1/projects/{PID}/schedule?status=Delayed").get_json()
        assert [t["id"] for t in data["items"]] == ["s-4"]
        assert data["summary"]["total"] == 5

    def test_unknown_status_filter(self, client):
        res = client.get(f"/api/v1/projects/{PID}/schedule?status=Paused")
        assert res.status_code == 400

    def test_get_task(self, client):
        task = client.get(f"/api/v1/projects/{PID}/schedule/s-3").get_json()
        assert task["boq_item_id"] == "3"
        assert client.get(f"/api/v1/projects/{PID}/schedule/s-99").status_code == 404


class TestProgressFlowsToBoq:
    def test_update_progress(self, client):
        res = client.put(f"/api/v1/projects/{PID}/schedule/s-3", json={"progress": 80})
        assert res.status_code == 200
        assert res.get_json()["progress"] == 80
        assert res.get_json()["name"] == "GSB Layer (Km 0-5)"
        assert _boq_completed(client, "3") == pytest.approx(8000)

    def test_progress_is_clamped(self, client):
        res = client.put(f"/api/v1/projects/{PID}/schedule/s-4", json={"progress": 250})
        assert res.get_json()["progress"] == 100
        assert _boq_completed(client, "4") == pytest.approx(10000)

    def test_new_linked_task(self, client):
        res = client.post(f"/api/v1/projects/{PID}/schedule", json={
            "name": "Road Marking (Km 0-2)", "start_date": "2023-11-01",
            "end_date": "2023-11-15", "progress": 40, "boq_item_id": "6",
            "associated_quantity": 2500,
        })
        assert res.status_code == 201
        assert res.get_json()["id"].startswith("task-")
        assert _boq_completed(client, "6") == pytest.approx(1000)

    def test_delete_task_unwinds_progress(self, client):
        res = client.delete(f"/api/v1/projects/{PID}/schedule/s-5")
        assert res.status_code == 200
        assert _boq_completed(client, "2") == 0

    def test_daily_reports_policy_leaves_boq_alone(self, report_client):
        report_client.put(f"/api/v1/projects/{PID}/schedule/s-3", json={"progress": 80})
        assert _boq_completed(report_client, "3") == pytest.approx(6000)


class TestTimeline:
    def test_rows(self, client):
        data = client.get(f"/api/v1/projects/{PID}/schedule/timeline").get_json()
        rows = {r["task_id"]: r for r in data["rows"]}
        assert rows["s-2"]["boq_description"] == "RCC M-25 Box Culvert (2m x 2m)"
        assert rows["s-2"]["actual_progress"] == 100.0
        assert rows["s-3"]["actual_progress"] == 48.0

    def test_unlinked_task(self, client):
        client.post(f"/api/v1/projects/{PID}/schedule", json={
            "name": "Mobilisation", "start_date": "2023-08-01", "end_date": "2023-08-10",
        })
        rows = client.get(f"/api/v1/projects/{PID}/schedule/timeline").get_json()["rows"]
        assert rows[-1]["boq_description"] == "N/A"
        assert rows[-1]["actual_progress"] == 0


class TestValidationAndRoles:
    def test_invalid_task(self, client):
        res = client.post(f"/api/v1/projects/{PID}/schedule", json={
            "name": "", "start_date": "2023-11-10", "end_date": "2023-11-01",
        })
        assert res.status_code == 422
        assert res.get_json()["details"] == {"name": "required", "end_date": "before start_date"}

    def test_non_object_body(self, client):
        res = client.post(f"/api/v1/projects/{PID}/schedule", json="progress")
        assert res.status_code == 400

    def test_supervisor_may_edit(self, client):
        res = client.put(f"/api/v1/projects/{PID}/schedule/s-3", json={"progress": 70},
                         headers={"X-User-Role": "Supervisor"})
        assert res.status_code == 200

    def test_lab_technician_may_not_edit(self, client):
        res = client.put(f"/api/v1/projects/{PID}/schedule/s-3", json={"progress": 70},
                         headers={"X-User-Role": "Lab Technician"})
        assert res.status_code == 403
        assert res.get_json()["code"] == "ERR_FORBIDDEN"
