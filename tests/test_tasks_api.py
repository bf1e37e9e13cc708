"""
HTTP flows through the FastAPI app against a temporary JSON database.
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Make the task_api package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from task_api.app import create_app  # noqa: E402
from task_api.core.config import Settings  # noqa: E402
from task_api.repositories import json_storage  # noqa: E402


def _settings(tmp_path: Path) -> Settings:
    return Settings(
        app_env="test",
        database_directory=str(tmp_path),
        database_filename="db.json",
        log_level="WARNING",
        default_page_limit=10,
        max_page_limit=100,
    )


@pytest.fixture()
def client(tmp_path):
    app = create_app(_settings(tmp_path))
    with TestClient(app) as test_client:
        yield test_client


def _create(client: TestClient, title: str, description: str = "something to do") -> dict:
    response = client.post("/tasks", json={"title": title, "description": description})
    assert response.status_code == 201, response.text
    return response.json()


def test_health_and_index(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["environment"] == "test"
    assert client.get("/").json()["message"] == "Task Control API"


def test_startup_creates_database_file(client, tmp_path):
    assert json.loads((tmp_path / "db.json").read_text(encoding="utf-8")) == {}


def test_task_crud_flow(client, tmp_path):
    task = _create(client, "Buy milk")
    assert task["completed"] is False

    toggled = client.patch(f"/tasks/{task['id']}/complete")
    assert toggled.status_code == 200
    assert toggled.json()["completed"] is True

    updated = client.put(f"/tasks/{task['id']}", json={"description": "skimmed"})
    assert updated.status_code == 200
    assert updated.json()["status"] == "success"

    stored = json.loads((tmp_path / "db.json").read_text(encoding="utf-8"))["tasks"]
    assert stored[0]["description"] == "skimmed"
    assert stored[0]["completed"] is True

    deleted = client.delete(f"/tasks/{task['id']}")
    assert deleted.status_code == 200
    assert deleted.json()["deletedTaskId"] == task["id"]
    assert client.get("/tasks").json()["total"] == 0


def test_create_validation_errors(client):
    response = client.post("/tasks", json={"title": "ab", "description": "x"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Bad Request"
    assert body["message"] == "Title must have at least 3 characters"
    assert body["statusCode"] == 400

    assert client.post("/tasks").status_code == 400

    _create(client, "Unique task")
    duplicate = client.post("/tasks", json={"title": "unique TASK", "description": "again"})
    assert duplicate.status_code == 400
    assert "already exists" in duplicate.json()["message"]


def test_missing_task_returns_404(client):
    assert client.patch("/tasks/missing/complete").status_code == 404
    assert client.put("/tasks/missing", json={"title": "Whatever"}).status_code == 404
    response = client.delete("/tasks/missing")
    assert response.status_code == 404
    assert response.json()["message"] == "Task with ID missing not found"


def test_list_query_parameters(client):
    for idx in range(15):
        task = _create(client, f"Chore {idx:02d}", "weekly" if idx % 2 else "daily")
        if idx < 5:
            client.patch(f"/tasks/{task['id']}/complete")

    page = client.get("/tasks", params={"page": 2, "limit": 10}).json()
    assert page["total"] == 15
    assert page["totalPages"] == 2
    assert len(page["items"]) == 5

    done = client.get("/tasks", params={"completed": "true", "sortBy": "title", "order": "desc"}).json()
    assert [t["title"] for t in done["items"]] == ["Chore 04", "Chore 03", "Chore 02", "Chore 01", "Chore 00"]

    weekly = client.get("/tasks", params={"search": "WEEK", "completed": "0"}).json()
    assert weekly["total"] == 5

    # invalid values fall back to defaults
    fallback = client.get("/tasks", params={"page": "abc", "limit": "500"}).json()
    assert (fallback["page"], fallback["limit"]) == (1, 10)

    future = client.get("/tasks", params={"createdAfter": "2999-01-01T00:00:00Z"}).json()
    assert future["total"] == 0


def test_database_info(client):
    for idx in range(3):
        _create(client, f"Info task {idx}")
    body = client.get("/database/info").json()["database"]
    assert body["initialized"] is True
    assert body["tables"] == ["tasks"]
    assert body["totalRecords"] == 3
    assert body["tablesDetail"]["tasks"]["count"] == 3
    assert len(body["tablesDetail"]["tasks"]["sample"]) == 2


def test_persist_failure_returns_500(client, monkeypatch):
    def boom(src, dst):
        raise OSError("read-only filesystem")

    monkeypatch.setattr(json_storage.os, "replace", boom)
    response = client.post("/tasks", json={"title": "Cannot save", "description": "nope"})
    assert response.status_code == 500
    assert response.json()["message"] == "Failed to persist changes"
    monkeypatch.undo()
    assert client.get("/tasks").json()["total"] == 0
