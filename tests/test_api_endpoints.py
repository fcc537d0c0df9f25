"""API 端點測試"""

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile as StarletteUploadFile

from config import Settings
from core.data_manager import DataManager
from server import create_app


@pytest.fixture
def client():
    return TestClient(create_app(DataManager()))


@pytest.fixture
def loaded_client(client, mariadb_log):
    response = client.post(
        "/api/upload_log",
        files={"file": ("mysql-slow.log", mariadb_log.encode("utf-8"), "text/plain")},
        data={"analysis_name": "nightly"},
    )
    assert response.status_code == 200
    return client


class TestUpload:
    """POST /api/upload_log"""

    def test_upload(self, client, orders_log):
        response = client.post(
            "/api/upload_log",
            files={"file": ("orders.log", orders_log.encode("utf-8"), "text/plain")},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["analysis_name"] == "orders.log"
        assert data["total_queries"] == 2
        assert data["total_templates"] == 1

    def test_oversized_upload_is_rejected_before_reading(self, client, orders_log, monkeypatch):
        async def fail_read(self, size=-1):
            raise AssertionError("upload body should not be read")

        monkeypatch.setattr("api.upload.settings", Settings(max_upload_bytes=10))
        monkeypatch.setattr(StarletteUploadFile, "read", fail_read)

        response = client.post(
            "/api/upload_log",
            files={"file": ("orders.log", orders_log.encode("utf-8"), "text/plain")},
        )
        assert response.status_code == 413
        assert client.get("/api/summary").json()["summary"]["is_empty"] is True

    def test_empty_upload(self, client):
        response = client.post("/api/upload_log", files={"file": ("empty.log", b"", "text/plain")})
        assert response.status_code == 400

    def test_current_analysis(self, loaded_client):
        data = loaded_client.get("/api/current_analysis").json()
        assert data["name"] == "nightly"
        assert data["original_filename"] == "mysql-slow.log"
        assert data["total_queries"] == 3
        assert data["total_templates"] == 2

    def test_clear_current_analysis(self, loaded_client):
        assert loaded_client.delete("/api/current_analysis").status_code == 200
        assert loaded_client.get("/api/summary").json()["summary"]["is_empty"] is True


class TestAnalysisEndpoints:
    """摘要、時間軸與分布"""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_summary_without_data(self, client):
        data = client.get("/api/summary").json()
        assert data["summary"]["total_queries"] == 0
        assert data["summary"]["avg_time"] == 0.0
        assert data["summary"]["is_empty"] is True

    def test_summary(self, loaded_client):
        summary = loaded_client.get("/api/summary").json()["summary"]
        assert summary["total_queries"] == 3
        assert summary["unique_queries"] == 2
        assert summary["max_time"] == 35.25
        assert summary["total_rows_examined"] == 2400006

    def test_timeline(self, loaded_client):
        timeline = loaded_client.get("/api/timeline").json()["timeline"]
        assert [bucket["time"] for bucket in timeline] == ["250531 09:00", "250531 11:00"]

    def test_type_distribution(self, loaded_client):
        assert loaded_client.get("/api/type_distribution").json()["types"] == {"DELETE": 2, "SELECT": 1}

    def test_time_ranges(self, loaded_client):
        ranges = loaded_client.get("/api/time_ranges").json()["time_ranges"]
        assert ranges["1-5s"] == 2
        assert ranges["30s+"] == 1


class TestQueryEndpoints:
    """樣板與原始查詢"""

    def test_query_groups(self, loaded_client):
        data = loaded_client.get("/api/query_groups").json()
        assert data["order"] == "total_time"
        first = data["groups"][0]
        assert first["type"] == "SELECT"
        assert first["issues"] == {"critical": 2, "warning": 2, "info": 1, "has_suggestions": True}

    def test_query_groups_bad_order(self, loaded_client):
        assert loaded_client.get("/api/query_groups", params={"order": "bogus"}).status_code == 400

    def test_query_group_detail(self, loaded_client):
        data = loaded_client.get("/api/query_groups/1").json()
        assert data["template"] == "delete from logs where id in (?)"
        assert [e["query_time"] for e in data["executions"]] == [2.1, 1.4]
        assert data["issues"]["has_suggestions"] is False

    def test_query_group_bad_index(self, loaded_client):
        assert loaded_client.get("/api/query_groups/9").status_code == 404

    def test_raw_queries_filters(self, loaded_client):
        data = loaded_client.get("/api/raw_queries", params={"sql_type": "delete"}).json()
        assert data["total"] == 2
        assert data["data"][0]["query_time"] == 2.1

        data = loaded_client.get("/api/raw_queries", params={"min_time": 10}).json()
        assert data["total"] == 1

        data = loaded_client.get("/api/raw_queries", params={"table_filter": "event"}).json()
        assert data["total"] == 1

        data = loaded_client.get("/api/raw_queries", params={"user_filter": "REPORT"}).json()
        assert data["total"] == 1

    def test_raw_queries_paging(self, loaded_client):
        data = loaded_client.get("/api/raw_queries", params={"size": 2, "page": 2}).json()
        assert data["total"] == 3
        assert data["total_pages"] == 2
        assert len(data["data"]) == 1

    def test_tables_list(self, loaded_client):
        assert loaded_client.get("/api/tables_list").json()["tables"] == ["events", "logs"]
