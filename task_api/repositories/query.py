"""
Query helpers over record snapshots fetched from the JSON store.

Everything here is pure: filter -> sort -> paginate, always in that order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Literal, Optional, Sequence

from task_api.core.utils import parse_iso, to_iso

Record = dict[str, Any]
SortDirection = Literal["asc", "desc"]

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
SORTABLE_FIELDS = ("title", "createdAt", "updatedAt")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class TaskSearchCriteria:
    completed: Optional[bool] = None
    search: Optional[str] = None
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None

    def is_empty(self) -> bool:
        return (
            self.completed is None
            and not self.search
            and self.created_after is None
            and self.created_before is None
        )


@dataclass
class TaskSortOptions:
    field: str = "createdAt"
    direction: SortDirection = "asc"


@dataclass
class TaskPaginationOptions:
    page: Optional[int] = None
    limit: Optional[int] = None


@dataclass
class PaginatedResult:
    items: list = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    total_pages: int = 0

    def to_dict(self, serialize: Optional[Callable[[Any], Any]] = None) -> dict:
        items = [serialize(item) for item in self.items] if serialize else list(self.items)
        return {
            "items": items,
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
        }


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def filter_by_criteria(records: Sequence[Record], criteria: Optional[TaskSearchCriteria]) -> list[Record]:
    """Apply every supplied criterion (logical AND)."""
    results = list(records)
    if criteria is None:
        return results

    if criteria.completed is not None:
        results = [row for row in results if row.get("completed") is criteria.completed]

    if criteria.search:
        term = criteria.search.lower()
        results = [
            row
            for row in results
            if term in _text(row.get("title")).lower() or term in _text(row.get("description")).lower()
        ]

    # Stored timestamps share one UTC format, so string order is time order.
    if criteria.created_after is not None:
        after = to_iso(criteria.created_after)
        results = [row for row in results if _text(row.get("createdAt")) >= after]

    if criteria.created_before is not None:
        before = to_iso(criteria.created_before)
        results = [row for row in results if _text(row.get("createdAt")) <= before]

    return results


def _instant(value: Any) -> datetime:
    return parse_iso(value) or _EPOCH


_SORT_KEYS: dict[str, Callable[[Record], Any]] = {
    "title": lambda row: _text(row.get("title")).lower(),
    "createdAt": lambda row: _instant(row.get("createdAt")),
    "updatedAt": lambda row: _instant(row.get("updatedAt")),
}


def sort_by(records: Sequence[Record], field_name: str, direction: SortDirection = "asc") -> list[Record]:
    """
    Stable sort on one of SORTABLE_FIELDS.

    Unknown fields leave the input order untouched. Records with a missing or
    unparsable timestamp sort as the earliest instant.
    """
    key = _SORT_KEYS.get(field_name)
    if key is None:
        return list(records)
    return sorted(records, key=key, reverse=(direction == "desc"))


def _at_least_one(value: Optional[int], default: int) -> int:
    if value is None:
        return default
    return max(1, int(value))


def paginate(
    records: Sequence[Record],
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> PaginatedResult:
    """Slice one page out of `records`; pages past the end are empty."""
    page = _at_least_one(page, DEFAULT_PAGE)
    limit = _at_least_one(limit, DEFAULT_LIMIT)
    total = len(records)
    start = (page - 1) * limit
    return build_paginated_result(list(records[start : start + limit]), total, page, limit)


def build_paginated_result(items: list, total: int, page: int, limit: int) -> PaginatedResult:
    return PaginatedResult(
        items=items,
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if limit > 0 else 0,
    )


def query(
    records: Sequence[Record],
    criteria: Optional[TaskSearchCriteria] = None,
    sort: Optional[TaskSortOptions] = None,
    pagination: Optional[TaskPaginationOptions] = None,
) -> PaginatedResult:
    results = filter_by_criteria(records, criteria)
    if sort is not None:
        results = sort_by(results, sort.field, sort.direction)
    pagination = pagination or TaskPaginationOptions()
    return paginate(results, pagination.page, pagination.limit)
