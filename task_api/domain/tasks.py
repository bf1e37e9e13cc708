"""Task entity and its validation rules."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from task_api.core.utils import parse_iso, to_iso, utc_now

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


class TaskValidationError(ValueError):
    """Raised when a title/description does not satisfy the task rules."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def validate_title(value: str | None) -> str:
    title = (value or "").strip()
    if not title:
        raise TaskValidationError("Title is required")
    if len(title) < TITLE_MIN_LENGTH:
        raise TaskValidationError(f"Title must have at least {TITLE_MIN_LENGTH} characters")
    if len(title) > TITLE_MAX_LENGTH:
        raise TaskValidationError(f"Title must have at most {TITLE_MAX_LENGTH} characters")
    return title


def validate_description(value: str | None) -> str:
    description = (value or "").strip()
    if not description:
        raise TaskValidationError("Description is required")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise TaskValidationError(f"Description must have at most {DESCRIPTION_MAX_LENGTH} characters")
    return description


@dataclass
class Task:
    id: str
    title: str
    description: str
    completed: bool = False
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def create(cls, title: str | None, description: str | None) -> "Task":
        now = utc_now()
        return cls(
            id=str(uuid.uuid4()),
            title=validate_title(title),
            description=validate_description(description),
            completed=False,
            created_at=now,
            updated_at=now,
        )

    def update(self, title: Optional[str] = None, description: Optional[str] = None) -> bool:
        """Apply the provided fields; returns True when something changed."""
        changed = False
        if title is not None:
            new_title = validate_title(title)
            if new_title != self.title:
                self.title = new_title
                changed = True
        if description is not None:
            new_description = validate_description(description)
            if new_description != self.description:
                self.description = new_description
                changed = True
        if changed:
            self.updated_at = utc_now()
        return changed

    def toggle_complete(self) -> None:
        self.completed = not self.completed
        self.updated_at = utc_now()

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "Task":
        created = parse_iso(data.get("createdAt")) or utc_now()
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            completed=bool(data.get("completed")),
            created_at=created,
            updated_at=parse_iso(data.get("updatedAt")) or created,
        )
