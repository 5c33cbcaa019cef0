"""
SiteLedger
Tests: correspondence register and project documents API.

Covers:
    - Multipart upload with attachment storage under DATA_DIR/documents
    - Status defaults by direction, status changes, type filter
    - Filename-based metadata suggestion (extract)
    - Attachment view as data URL and delete (file + entry)
    - Project documents: upload, view, delete
    - Files and entries stay consistent when saving projects.json fails
"""

import base64
import io
import os

import pytest

from siteledger.core.exceptions import StorageError
from siteledger.models import store

PID = "proj-001"
CORR = f"/api/v1/projects/{PID}/correspondence"
DOCS = f"/api/v1/projects/{PID}/documents"


def _upload(client, url, filename="letter.pdf", content=b"%PDF-1.4 test", **form):
    data = dict(form)
    data["file"] = (io.BytesIO(content), filename)
    return client.post(url, data=data, content_type="multipart/form-data")


def _letter(client, **form):
    form.setdefault("reference_number", "DOR/PKG-II/231")
    form.setdefault("subject", "Extension of time request")
    form.setdefault("sender", "Dept. of Roads")
    return _upload(client, CORR, **form)


# ═════════════════════════════════════════════════════════════════════════════
# CORRESPONDENCE
# ═════════════════════════════════════════════════════════════════════════════

class TestCreate:
    def test_incoming_letter(self, app, client):
        res = _letter(client)
        assert res.status_code == 201
        item = res.get_json()
        assert item["status"] == "Received"
        assert item["file_name"] == "letter.pdf"
        assert item["file_size"] == "0.01 KB"
        assert item["file_path"].startswith(f"documents/{PID}/")
        assert os.path.isfile(os.path.join(app.config["DATA_DIR"], item["file_path"]))

    def test_outgoing_starts_as_draft(self, client):
        res = _letter(client, type="Outgoing")
        assert res.get_json()["status"] == "Draft"

    def test_attachment_required(self, client):
        res = client.post(CORR, data={"reference_number": "R-1", "subject": "S"},
                          content_type="multipart/form-data")
        assert res.status_code == 422
        assert res.get_json()["details"] == {"file": "required"}

    def test_missing_fields(self, client):
        res = _upload(client, CORR)
        assert res.status_code == 422
        assert set(res.get_json()["details"]) == {"reference_number", "subject"}

    def test_extract_fills_blank_fields(self, client):
        res = _upload(client, CORR, extract="true")
        assert res.status_code == 201
        item = res.get_json()
        assert item["reference_number"].startswith("REF-")
        assert item["subject"] == "Sample Correspondence Subject - letter"
        assert item["sender"] == "Client Engineering Dept."

    def test_typed_fields_win_over_extraction(self, client):
        res = _upload(client, CORR, extract="1", subject="Typed")
        assert res.get_json()["subject"] == "Typed"


class TestExtract:
    def test_invoice_file_name(self, client):
        res = _upload(client, f"{CORR}/extract", filename="invoice_0042.pdf")
        assert res.status_code == 200
        data = res.get_json()
        assert data["sender"] == "Supplier Company Ltd."
        assert data["subject"] == "Sample Invoice Subject - invoice_0042"
        assert data["notes"].startswith("This is extracted content from invoice_0042.pdf")

    def test_file_required(self, client):
        res = client.post(f"{CORR}/extract", data={}, content_type="multipart/form-data")
        assert res.status_code == 400


class TestRegister:
    def test_list_newest_first_and_filter(self, client):
        first = _letter(client).get_json()
        second = _letter(client, type="Outgoing").get_json()
        items = client.get(CORR).get_json()["items"]
        assert [i["id"] for i in items] == [second["id"], first["id"]]
        outgoing = client.get(f"{CORR}?type=Outgoing").get_json()["items"]
        assert [i["id"] for i in outgoing] == [second["id"]]

    def test_unknown_type_filter(self, client):
        assert client.get(f"{CORR}?type=Sideways").status_code == 422

    def test_status_change(self, client):
        item = _letter(client, type="Outgoing").get_json()
        res = client.patch(f"{CORR}/{item['id']}/status", json={"status": "Sent"})
        assert res.status_code == 200
        assert res.get_json()["status"] == "Sent"
        assert client.patch(f"{CORR}/{item['id']}/status", json={"status": "Lost"}).status_code == 422
        assert client.patch(f"{CORR}/{item['id']}/status", json=["Sent"]).status_code == 400

    def test_view_file(self, client):
        item = _letter(client).get_json()
        data = client.get(f"{CORR}/{item['id']}/file").get_json()
        assert data["name"] == "letter.pdf"
        assert data["data_url"] == (
            "data:application/octet-stream;base64," + base64.b64encode(b"%PDF-1.4 test").decode()
        )

    def test_delete_removes_file(self, app, client):
        item = _letter(client).get_json()
        path = os.path.join(app.config["DATA_DIR"], item["file_path"])
        res = client.delete(f"{CORR}/{item['id']}")
        assert res.status_code == 200
        assert not os.path.exists(path)
        assert client.get(f"{CORR}/{item['id']}").status_code == 404


# ═════════════════════════════════════════════════════════════════════════════
# DOCUMENTS
# ═════════════════════════════════════════════════════════════════════════════

class TestDocuments:
    def test_list_seeded(self, client):
        assert client.get(DOCS).get_json()["total"] == 3

    def test_upload_and_view(self, client):
        res = _upload(client, DOCS, filename="Drawing_Set.pdf", content=b"%PDF drawing")
        assert res.status_code == 201
        doc = res.get_json()
        assert doc["type"] == "PDF"
        assert doc["id"].startswith("doc-")
        view = client.get(f"{DOCS}/{doc['id']}/view").get_json()
        assert view["data_url"].endswith(base64.b64encode(b"%PDF drawing").decode())

    def test_unsupported_type(self, client):
        res = _upload(client, DOCS, filename="notes.txt", content=b"hello")
        assert res.status_code == 422

    def test_file_required(self, client):
        assert client.post(DOCS, data={}, content_type="multipart/form-data").status_code == 400

    def test_seeded_document_has_no_file(self, client):
        assert client.get(f"{DOCS}/d-1/view").status_code == 404

    def test_delete(self, client):
        assert client.delete(f"{DOCS}/d-1").status_code == 200
        assert client.get(DOCS).get_json()["total"] == 2
        assert client.delete(f"{DOCS}/d-1").status_code == 404


# ═════════════════════════════════════════════════════════════════════════════
# STORAGE FAILURES
# ═════════════════════════════════════════════════════════════════════════════

@pytest.fixture()
def failing_save(monkeypatch):
    def _fail():
        raise StorageError("disk full", path="projects.json")

    return lambda: monkeypatch.setattr(store, "save", _fail)


def _stored_files(app):
    folder = os.path.join(app.config["DATA_DIR"], "documents", PID)
    return os.listdir(folder) if os.path.isdir(folder) else []


class TestStorageFailure:
    def test_failed_letter_commit_leaves_no_file(self, app, client, failing_save):
        failing_save()
        res = _letter(client)
        assert res.status_code == 500
        assert res.get_json()["code"] == "ERR_STORAGE"
        assert _stored_files(app) == []
        assert client.get(CORR).get_json()["total"] == 0

    def test_failed_document_commit_leaves_no_file(self, app, client, failing_save):
        failing_save()
        res = _upload(client, DOCS, filename="Drawing_Set.pdf")
        assert res.status_code == 500
        assert _stored_files(app) == []
        assert client.get(DOCS).get_json()["total"] == 3

    def test_failed_delete_keeps_file_and_entry(self, app, client, failing_save):
        item = _letter(client).get_json()
        failing_save()
        res = client.delete(f"{CORR}/{item['id']}")
        assert res.status_code == 500
        assert os.path.isfile(os.path.join(app.config["DATA_DIR"], item["file_path"]))
        assert client.get(f"{CORR}/{item['id']}/file").status_code == 200

    def test_failed_document_delete_keeps_file(self, app, client, failing_save):
        doc = _upload(client, DOCS, filename="Drawing_Set.pdf").get_json()
        failing_save()
        assert client.delete(f"{DOCS}/{doc['id']}").status_code == 500
        assert client.get(f"{DOCS}/{doc['id']}/view").status_code == 200
