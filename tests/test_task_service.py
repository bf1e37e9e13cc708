from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import pytest

# Make the task_api package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from task_api.domain.tasks import Task  # noqa: E402
from task_api.repositories.json_storage import JsonDatabase  # noqa: E402
from task_api.repositories.task_repository import TaskRepository  # noqa: E402
from task_api.services.task_service import (  # noqa: E402
    ListTasksRequest,
    TaskAlreadyExistsError,
    TaskNotFoundError,
    TaskService,
    TaskValidationError,
)


@pytest.fixture()
def service(tmp_path):
    db = JsonDatabase("tasks.json", tmp_path)
    asyncio.run(db.initialize())
    return TaskService(TaskRepository(db))


def test_create_task_persists_record(service, tmp_path):
    created = asyncio.run(service.create_task("  Buy milk ", " two liters "))
    assert created["title"] == "Buy milk"
    assert created["description"] == "two liters"
    assert created["completed"] is False
    assert created["createdAt"] == created["updatedAt"]
    assert created["createdAt"].endswith("Z")

    stored = json.loads((tmp_path / "tasks.json").read_text(encoding="utf-8"))
    assert stored == {"tasks": [created]}


@pytest.mark.parametrize(
    "title, description, message",
    [
        ("", "desc", "Title is required"),
        ("ab", "desc", "Title must have at least 3 characters"),
        ("x" * 201, "desc", "Title must have at most 200 characters"),
        ("Valid title", "   ", "Description is required"),
        ("Valid title", "d" * 1001, "Description must have at most 1000 characters"),
    ],
)
def test_create_task_validation(service, title, description, message):
    with pytest.raises(TaskValidationError) as excinfo:
        asyncio.run(service.create_task(title, description))
    assert excinfo.value.message == message
    assert service.repository.count() == 0


def test_create_task_rejects_duplicate_title(service):
    asyncio.run(service.create_task("Buy milk", "first"))
    # substring matches are not duplicates
    asyncio.run(service.create_task("Buy milk today", "second"))
    with pytest.raises(TaskAlreadyExistsError):
        asyncio.run(service.create_task("BUY MILK", "third"))
    assert service.repository.count() == 2


def test_concurrent_creates_with_same_title(service):
    async def race():
        return await asyncio.gather(
            service.create_task("Pay rent", "first"),
            service.create_task("pay RENT", "second"),
            return_exceptions=True,
        )

    results = asyncio.run(race())
    assert isinstance(results[0], dict)
    assert isinstance(results[1], TaskAlreadyExistsError)
    assert service.repository.count() == 1


def test_toggle_and_update(service):
    created = asyncio.run(service.create_task("Water plants", "balcony"))

    toggled = asyncio.run(service.toggle_completed(created["id"]))
    assert toggled["completed"] is True
    assert toggled["updatedAt"] >= created["updatedAt"]
    assert service.repository.find_completed()[0].id == created["id"]

    result = asyncio.run(service.update_task(created["id"], title="Water all plants"))
    assert result == {"status": "success", "message": "Task updated successfully"}
    task = service.repository.find_by_id(created["id"])
    assert task.title == "Water all plants"
    assert task.description == "balcony"
    assert task.completed is True
    assert task.created_at == Task.from_record(created).created_at


def test_missing_task_raises_not_found(service):
    with pytest.raises(TaskNotFoundError):
        asyncio.run(service.toggle_completed("nope"))
    with pytest.raises(TaskNotFoundError):
        asyncio.run(service.update_task("nope", title="Something"))
    with pytest.raises(TaskNotFoundError):
        asyncio.run(service.delete_task("nope"))


def test_delete_task(service):
    created = asyncio.run(service.create_task("Take out trash", "tuesday"))
    result = asyncio.run(service.delete_task(created["id"]))
    assert result["deletedTaskId"] == created["id"]
    assert service.repository.exists(created["id"]) is False


def test_list_tasks_filters_and_paginates(service):
    async def seed():
        for idx in range(12):
            created = await service.create_task(f"Task number {idx:02d}", "generic chore")
            if idx % 3 == 0:
                await service.toggle_completed(created["id"])

    asyncio.run(seed())

    listing = service.list_tasks(ListTasksRequest(page=2, limit=5))
    assert listing["total"] == 12
    assert listing["totalPages"] == 3
    assert [t["title"] for t in listing["items"]] == [f"Task number {idx:02d}" for idx in range(5, 10)]

    done = service.list_tasks(ListTasksRequest(completed=True, sort_by="title", order="desc"))
    assert [t["title"] for t in done["items"]] == [
        "Task number 09",
        "Task number 06",
        "Task number 03",
        "Task number 00",
    ]

    searched = service.list_tasks(ListTasksRequest(search="NUMBER 1"))
    assert searched["total"] == 2


def test_repository_finders(service):
    repo = service.repository

    async def seed():
        first = await service.create_task("Read a book", "fiction")
        await service.create_task("Write a letter", "to grandma")
        await service.toggle_completed(first["id"])

    asyncio.run(seed())
    assert [t.title for t in repo.find_all()] == ["Read a book", "Write a letter"]
    assert [t.title for t in repo.find_incomplete()] == ["Write a letter"]
    assert [t.title for t in repo.search_by_term("GRANDMA")] == ["Write a letter"]

    asyncio.run(repo.clear())
    assert repo.count() == 0
    assert repo.database.get_info()["tables"] == ["tasks"]
