"""Task persistence on top of the JSON store."""
from __future__ import annotations

from typing import Optional

from task_api.domain.tasks import Task
from task_api.repositories import query as q
from task_api.repositories.json_storage import JsonDatabase

TASKS_TABLE = "tasks"


class TaskRepository:
    """Maps `Task` entities to records of the `tasks` table."""

    def __init__(self, database: JsonDatabase, table: str = TASKS_TABLE) -> None:
        self.database = database
        self.table = table

    # -------------------------- writes --------------------------
    async def save(self, task: Task) -> None:
        await self.database.insert(self.table, task.to_record())

    async def update(self, task: Task) -> bool:
        record = task.to_record()
        return await self.database.update(
            self.table,
            task.id,
            {
                "title": record["title"],
                "description": record["description"],
                "completed": record["completed"],
                "updatedAt": record["updatedAt"],
            },
        )

    async def delete(self, task_id: str) -> bool:
        return await self.database.delete(self.table, task_id)

    async def clear(self) -> None:
        await self.database.clear(self.table)

    # -------------------------- reads --------------------------
    def find_by_id(self, task_id: str) -> Optional[Task]:
        for row in self.database.select(self.table):
            if row.get("id") == task_id:
                return Task.from_record(row)
        return None

    def exists(self, task_id: str) -> bool:
        return self.find_by_id(task_id) is not None

    def find_all(self) -> list[Task]:
        return [Task.from_record(row) for row in self.database.select(self.table)]

    def find_by_criteria(self, criteria: q.TaskSearchCriteria) -> list[Task]:
        rows = q.filter_by_criteria(self.database.select(self.table), criteria)
        return [Task.from_record(row) for row in rows]

    def find_with_pagination(
        self,
        criteria: Optional[q.TaskSearchCriteria] = None,
        sort: Optional[q.TaskSortOptions] = None,
        pagination: Optional[q.TaskPaginationOptions] = None,
    ) -> q.PaginatedResult:
        result = q.query(self.database.select(self.table), criteria, sort, pagination)
        result.items = [Task.from_record(row) for row in result.items]
        return result

    def find_completed(self) -> list[Task]:
        return self.find_by_criteria(q.TaskSearchCriteria(completed=True))

    def find_incomplete(self) -> list[Task]:
        return self.find_by_criteria(q.TaskSearchCriteria(completed=False))

    def search_by_term(self, term: str) -> list[Task]:
        return self.find_by_criteria(q.TaskSearchCriteria(search=term))

    def count(self) -> int:
        return self.database.count(self.table)
