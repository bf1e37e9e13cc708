"""Task use cases (create, list, update, delete, toggle completion)."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from task_api.domain.tasks import Task, TaskValidationError
from task_api.repositories.query import (
    TaskPaginationOptions,
    TaskSearchCriteria,
    TaskSortOptions,
)
from task_api.repositories.task_repository import TaskRepository

logger = logging.getLogger(__name__)

__all__ = [
    "ListTasksRequest",
    "TaskAlreadyExistsError",
    "TaskError",
    "TaskNotFoundError",
    "TaskService",
    "TaskValidationError",
]


class TaskError(Exception):
    """Base exception for task workflows."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TaskNotFoundError(TaskError):
    """Raised when the requested task id does not exist."""

    def __init__(self, task_id: str):
        super().__init__(f"Task with ID {task_id} not found")
        self.task_id = task_id


class TaskAlreadyExistsError(TaskError):
    """Raised when another task already uses the same title."""


@dataclass
class ListTasksRequest:
    page: Optional[int] = None
    limit: Optional[int] = None
    search: Optional[str] = None
    completed: Optional[bool] = None
    sort_by: Optional[str] = None
    order: str = "asc"
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None


def task_to_dict(task: Task) -> dict:
    return task.to_record()


class TaskService:
    """Orchestrates the task repository for the HTTP layer."""

    def __init__(self, repository: TaskRepository) -> None:
        self.repository = repository
        # Title uniqueness check and save run as one step.
        self._create_lock = asyncio.Lock()

    def _get(self, task_id: str) -> Task:
        task = self.repository.find_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def create_task(self, title: str | None, description: str | None) -> dict:
        task = Task.create(title, description)
        normalized = task.title.lower()
        async with self._create_lock:
            for existing in self.repository.search_by_term(task.title):
                if existing.title.strip().lower() == normalized:
                    raise TaskAlreadyExistsError(f'Task with title "{task.title}" already exists')
            await self.repository.save(task)
        logger.info("Task created id=%s", task.id)
        return task_to_dict(task)

    def list_tasks(self, request: Optional[ListTasksRequest] = None) -> dict:
        request = request or ListTasksRequest()
        criteria = TaskSearchCriteria(
            completed=request.completed,
            search=request.search,
            created_after=request.created_after,
            created_before=request.created_before,
        )
        sort = None
        if request.sort_by:
            direction = "desc" if (request.order or "").lower() == "desc" else "asc"
            sort = TaskSortOptions(field=request.sort_by, direction=direction)
        pagination = TaskPaginationOptions(page=request.page, limit=request.limit)
        result = self.repository.find_with_pagination(
            None if criteria.is_empty() else criteria,
            sort,
            pagination,
        )
        return result.to_dict(task_to_dict)

    async def update_task(self, task_id: str, title: Optional[str] = None, description: Optional[str] = None) -> dict:
        task = self._get(task_id)
        task.update(title=title, description=description)
        if not await self.repository.update(task):
            raise TaskNotFoundError(task_id)
        return {"status": "success", "message": "Task updated successfully"}

    async def delete_task(self, task_id: str) -> dict:
        if not await self.repository.delete(task_id):
            raise TaskNotFoundError(task_id)
        logger.info("Task deleted id=%s", task_id)
        return {
            "status": "success",
            "message": "Task deleted successfully",
            "deletedTaskId": task_id,
        }

    async def toggle_completed(self, task_id: str) -> dict:
        task = self._get(task_id)
        task.toggle_complete()
        if not await self.repository.update(task):
            raise TaskNotFoundError(task_id)
        return task_to_dict(task)
