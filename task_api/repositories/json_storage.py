"""
JSON file persistence adapter.

`JsonDatabase` keeps every table in memory and mirrors it to a single JSON
document on disk: `{"<table>": [<record>, ...], ...}`. Reads are synchronous
against the last committed snapshot; mutations are async, serialized by one
lock, and rewrite the whole file before they return.

Whole-file rewrite is O(total records) per mutation. That is the contract for
this store (a complete, valid document after every write), not an accident.
Record ids are not checked for uniqueness: callers must not insert duplicates.
"""

from __future__ import annotations

import asyncio
import enum
import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

Record = dict[str, Any]
Tables = dict[str, list[Record]]

DEFAULT_FILENAME = "db.json"


class DatabaseError(Exception):
    """Base class for storage failures."""


class UninitializedError(DatabaseError):
    """Raised when the store is used before `initialize()` finished."""


class PersistError(DatabaseError):
    """Raised when writing the database file fails."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"Failed to persist database to {path}: {cause}")
        self.path = path
        self.cause = cause


class StoreState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


def matches_partial(row: Mapping[str, Any], search: Mapping[str, Any]) -> bool:
    """
    Partial-match predicate used by `select`.

    String filters match case-insensitive substrings of string fields; any
    other value needs exact equality. `None` filter values are wildcards.
    """
    for key, value in search.items():
        if value is None:
            continue
        row_value = row.get(key)
        if isinstance(value, str) and isinstance(row_value, str):
            if value.lower() not in row_value.lower():
                return False
        elif isinstance(value, bool) or isinstance(row_value, bool):
            if not (isinstance(value, bool) and isinstance(row_value, bool) and row_value == value):
                return False
        elif row_value != value:
            return False
    return True


def _is_valid_document(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    return all(
        isinstance(rows, list) and all(isinstance(row, dict) for row in rows)
        for rows in data.values()
    )


class JsonDatabase:
    """Single-file JSON store with an in-memory mirror of all tables."""

    def __init__(self, filename: str = DEFAULT_FILENAME, directory: str | Path | None = None) -> None:
        base = Path(directory) if directory else Path.cwd()
        self.path: Path = base / (filename or DEFAULT_FILENAME)
        self.state = StoreState.UNINITIALIZED
        self._tables: Tables = {}
        self._write_lock: Optional[asyncio.Lock] = None

    # -------------------------- lifecycle --------------------------
    @property
    def initialized(self) -> bool:
        return self.state is StoreState.READY

    async def initialize(self) -> None:
        """Load the file, or create it. Always ends in READY."""
        self.state = StoreState.INITIALIZING
        self._write_lock = asyncio.Lock()
        logger.info("Initializing JSON database at %s", self.path)
        try:
            if self.path.exists():
                self._tables = await self._load_from_file()
                logger.info("Database loaded from existing file (%d tables)", len(self._tables))
            else:
                self._tables = {}
                await self._persist(self._tables)
                logger.info("Created new database file")
        except (OSError, DatabaseError) as exc:
            logger.error("Failed to initialize database, starting empty: %s", exc)
            self._tables = {}
            try:
                await self._persist(self._tables)
            except PersistError:
                logger.exception("Could not write an empty database file")
        self.state = StoreState.READY

    async def _load_from_file(self) -> Tables:
        raw = await asyncio.to_thread(self.path.read_bytes)
        try:
            text = raw.decode("utf-8")
            if not text.strip():
                return {}
            data = json.loads(text)
        except ValueError as exc:
            # UnicodeDecodeError and JSONDecodeError both land here
            logger.warning("Failed to parse database file, creating new: %s", exc)
            await self._persist({})
            return {}
        if not _is_valid_document(data):
            logger.warning("Database file is not a mapping of tables, creating new")
            await self._persist({})
            return {}
        return data

    def _ensure_initialized(self) -> None:
        if self.state is not StoreState.READY:
            raise UninitializedError("Database not initialized. Call initialize() first.")

    def _lock(self) -> asyncio.Lock:
        # Recreated by initialize(); binds to a loop only on first contention.
        if self._write_lock is None:
            self._write_lock = asyncio.Lock()
        return self._write_lock

    # -------------------------- persistence --------------------------
    def _write_file(self, payload: str) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tmp_path.open("w", encoding="utf-8") as fh:
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, self.path)

    async def _persist(self, tables: Tables) -> None:
        payload = json.dumps(tables, ensure_ascii=False, indent=2)
        try:
            await asyncio.to_thread(self._write_file, payload)
        except OSError as exc:
            logger.error("Failed to persist database: %s", exc)
            raise PersistError(self.path, exc) from exc
        logger.debug("Persisted %d tables to %s", len(tables), self.path)

    async def _commit(self, tables: Tables) -> None:
        """Persist a new snapshot and make it the visible one."""
        await self._persist(tables)
        self._tables = tables

    # -------------------------- reads --------------------------
    def select(self, table: str, search: Optional[Mapping[str, Any]] = None) -> list[Record]:
        self._ensure_initialized()
        rows = self._tables.get(table) or []
        if search:
            rows = [row for row in rows if matches_partial(row, search)]
        return [dict(row) for row in rows]

    def table_names(self) -> list[str]:
        self._ensure_initialized()
        return list(self._tables)

    def count(self, table: str) -> int:
        self._ensure_initialized()
        return len(self._tables.get(table) or [])

    def get_info(self) -> dict:
        return {
            "path": str(self.path),
            "tables": list(self._tables),
            "totalRecords": sum(len(rows) for rows in self._tables.values()),
            "initialized": self.initialized,
        }

    # -------------------------- writes --------------------------
    async def insert(self, table: str, record: Record) -> Record:
        self._ensure_initialized()
        async with self._lock():
            tables = dict(self._tables)
            tables[table] = [*tables.get(table, []), dict(record)]
            await self._commit(tables)
        return record

    async def update(self, table: str, record_id: str, data: Mapping[str, Any]) -> bool:
        self._ensure_initialized()
        async with self._lock():
            rows = self._tables.get(table)
            if not rows:
                return False
            index = next((i for i, row in enumerate(rows) if row.get("id") == record_id), -1)
            if index == -1:
                return False
            new_rows = list(rows)
            new_rows[index] = {**rows[index], **data, "id": record_id}
            tables = dict(self._tables)
            tables[table] = new_rows
            await self._commit(tables)
        return True

    async def delete(self, table: str, record_id: str) -> bool:
        self._ensure_initialized()
        async with self._lock():
            rows = self._tables.get(table)
            if not rows:
                return False
            index = next((i for i, row in enumerate(rows) if row.get("id") == record_id), -1)
            if index == -1:
                return False
            tables = dict(self._tables)
            tables[table] = rows[:index] + rows[index + 1 :]
            await self._commit(tables)
        return True

    async def clear(self, table: str) -> None:
        self._ensure_initialized()
        async with self._lock():
            tables = dict(self._tables)
            tables[table] = []
            await self._commit(tables)

    async def drop_table(self, table: str) -> None:
        self._ensure_initialized()
        async with self._lock():
            tables = {name: rows for name, rows in self._tables.items() if name != table}
            await self._commit(tables)

    async def force_sync(self) -> None:
        self._ensure_initialized()
        async with self._lock():
            await self._persist(self._tables)
