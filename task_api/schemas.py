from typing import Optional

from pydantic import BaseModel


class TaskCreate(BaseModel):
    # Rules live in task_api.domain.tasks so errors share one message format.
    title: Optional[str] = None
    description: Optional[str] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
