from __future__ import annotations

import io
import threading
import zipfile

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from app.data import store as store_module
from app.data.store import AnalyticsStore
from app.main import create_app


@pytest.fixture()
def client():
    app = create_app(AnalyticsStore(capacity=12))
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def loaded_client(client, sample_csv_bytes):
    resp = client.post("/api/upload", files={"file": ("momence-report.csv", sample_csv_bytes, "text/csv")})
    assert resp.status_code == 200
    return client


# ── Upload ────────────────────────────────────────────────────────

def test_upload_csv(client, sample_csv_bytes):
    resp = client.post("/api/upload", files={"file": ("momence-report.csv", sample_csv_bytes, "text/csv")})

    assert resp.status_code == 200
    body = resp.json()
    assert body["processed"] == 5
    assert body["skipped"] == 0
    assert body["groups"] == 4
    assert body["message"].startswith("Successfully processed 5 class records")


def test_upload_zip(client, sample_zip_bytes):
    resp = client.post("/api/upload", files={"file": ("export.zip", sample_zip_bytes, "application/zip")})
    assert resp.status_code == 200
    assert resp.json()["processed"] == 5


def test_upload_rejects_unsupported_file(client):
    resp = client.post("/api/upload", files={"file": ("export.xlsx", b"binary", "application/octet-stream")})
    assert resp.status_code == 400
    assert "ZIP or CSV" in resp.json()["detail"]


def test_upload_zip_without_export(client):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("notes.csv", "a,b\n1,2\n")
    resp = client.post("/api/upload", files={"file": ("export.zip", buffer.getvalue(), "application/zip")})

    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Failed to process file")


def test_upload_during_slow_ingest_is_rejected(client, sample_csv_bytes, monkeypatch):
    started = threading.Event()
    release = threading.Event()
    real_load = store_module.load_upload

    def slow_load(content, filename):
        started.set()
        release.wait(10)
        return real_load(content, filename)

    monkeypatch.setattr(store_module, "load_upload", slow_load)
    files = {"file": ("report.csv", sample_csv_bytes, "text/csv")}
    first: dict = {}
    worker = threading.Thread(target=lambda: first.update(resp=client.post("/api/upload", files=files)))
    worker.start()
    try:
        assert started.wait(10)
        # the event loop stays free while the first upload is processed
        assert client.get("/api/health").json()["busy"] is True
        second = client.post("/api/upload", files=files)
        assert second.status_code == 409
    finally:
        release.set()
        worker.join(10)

    assert first["resp"].status_code == 200
    assert client.get("/api/health").json() == {
        "status": "ok", "rows": 5, "groups": 4, "busy": False, "source": "report.csv",
    }


# ── Before any upload ─────────────────────────────────────────────

def test_health_before_upload(client):
    body = client.get("/api/health").json()
    assert body == {"status": "ok", "rows": 0, "groups": 0, "busy": False, "source": None}


@pytest.mark.parametrize("path", ["/api/metrics", "/api/groups", "/api/export/csv", "/api/export/excel"])
def test_data_endpoints_need_an_upload(client, path):
    resp = client.get(path)
    assert resp.status_code == 503
    assert "No data loaded" in resp.json()["detail"]


# ── Dashboard ─────────────────────────────────────────────────────

def test_health_after_upload(loaded_client):
    body = loaded_client.get("/api/health").json()
    assert body["rows"] == 5
    assert body["groups"] == 4
    assert body["source"] == "momence-report.csv"


def test_metrics(loaded_client):
    body = loaded_client.get("/api/metrics").json()
    assert body["total_classes"] == 5
    assert body["total_attendance"] == 27


def test_filter_options(loaded_client):
    body = loaded_client.get("/api/filters/options").json()
    assert body["teachers"] == ["Anisha Shah", "Rohan Mehta"]


def test_groups_default_grouping(loaded_client):
    body = loaded_client.get("/api/groups").json()
    assert body["grouping"] == "cleanedClass"
    assert [g["groupKey"] for g in body["groups"]] == [
        "Studio Barre 57",
        "Studio Cardio Barre Plus",
        "Studio powerCycle Express",
    ]
    assert body["totals"]["totalCheckins"] == 27


def test_groups_grouping_override(loaded_client):
    body = loaded_client.get("/api/groups", params={"grouping": "location"}).json()
    assert body["group_count"] == 2


def test_groups_invalid_grouping(loaded_client):
    assert loaded_client.get("/api/groups", params={"grouping": "bogus"}).status_code == 400
    assert loaded_client.put("/api/grouping", json={"grouping": "bogus"}).status_code == 400


def test_put_filters_narrows_groups(loaded_client):
    resp = loaded_client.put("/api/filters", json={
        "dateRange": {"start": "2024-01-01", "end": "2024-01-22"},
        "textSearch": "barre 57",
    })
    assert resp.status_code == 200
    assert resp.json()["active_count"] == 2

    body = loaded_client.get("/api/groups").json()
    assert body["record_count"] == 2
    assert body["totals"]["totalCheckins"] == 12

    stored = loaded_client.get("/api/filters").json()
    assert stored["filters"]["textSearch"] == "barre 57"
    assert stored["filters"]["dateRange"]["end"] == "2024-01-22"


def test_put_grouping_changes_view(loaded_client):
    resp = loaded_client.put("/api/grouping", json={"grouping": "teacher-class"})
    assert resp.json() == {"grouping": "teacher-class"}

    body = loaded_client.get("/api/groups").json()
    assert body["groups"][0]["groupKey"] == "Anisha Shah|Studio Barre 57"


def test_list_groupings(client):
    groupings = client.get("/api/groupings").json()["groupings"]
    assert "cleanedClass" in groupings
    assert "day-time-class-teacher" in groupings


def test_drilldown(loaded_client):
    resp = loaded_client.get("/api/groups/drilldown", params={"group_key": "Studio Barre 57"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Studio Barre 57"
    assert len(body["data"]) == 3
    assert body["aggregates"]["total_attendance"] == 15


def test_drilldown_unknown_group(loaded_client):
    resp = loaded_client.get("/api/groups/drilldown", params={"group_key": "Nope"})
    assert resp.status_code == 404


# ── Export & reset ────────────────────────────────────────────────

def test_export_csv(loaded_client):
    resp = loaded_client.get("/api/export/csv")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="studio-analytics.csv"' in resp.headers["content-disposition"]
    header = resp.text.splitlines()[0]
    assert "cleanedClass" in header
    assert "groupKey" not in header


def test_export_excel(loaded_client):
    resp = loaded_client.get("/api/export/excel")

    assert resp.status_code == 200
    wb = load_workbook(io.BytesIO(resp.content))
    assert "Analytics Table" in wb.sheetnames


def test_reset(loaded_client):
    loaded_client.put("/api/filters", json={"textSearch": "barre"})

    assert loaded_client.post("/api/reset").json() == {"status": "reset"}

    assert loaded_client.get("/api/health").json()["rows"] == 0
    assert loaded_client.get("/api/filters").json()["active_count"] == 0
    assert loaded_client.get("/api/metrics").status_code == 503
