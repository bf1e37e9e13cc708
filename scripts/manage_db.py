#!/usr/bin/env python3
"""
Maintenance commands for the JSON task database.

Usage:
  python scripts/manage_db.py info
  python scripts/manage_db.py clear tasks
  python scripts/manage_db.py drop test_records
  python scripts/manage_db.py sync
Pass --dir/--file to target a database other than the one in TASKS_DB_DIR/TASKS_DB_FILE.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys

from task_api.core.config import get_settings
from task_api.core.logging_config import configure_logging
from task_api.repositories.json_storage import JsonDatabase


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Manage the JSON task database")
    ap.add_argument("--dir", help="Database directory (default: TASKS_DB_DIR or cwd)")
    ap.add_argument("--file", help="Database filename (default: TASKS_DB_FILE or db.json)")
    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("info", help="Show tables and record counts")
    clear = sub.add_parser("clear", help="Remove every record of a table")
    clear.add_argument("table")
    drop = sub.add_parser("drop", help="Remove a table entirely")
    drop.add_argument("table")
    sub.add_parser("sync", help="Rewrite the file from the loaded state")
    return ap


async def run(args: argparse.Namespace) -> dict:
    settings = get_settings()
    db = JsonDatabase(args.file or settings.database_filename, args.dir or settings.database_directory)
    await db.initialize()
    if args.command == "clear":
        await db.clear(args.table)
    elif args.command == "drop":
        await db.drop_table(args.table)
    elif args.command == "sync":
        await db.force_sync()
    info = db.get_info()
    info["counts"] = {table: db.count(table) for table in db.table_names()}
    return info


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().log_level)
    info = asyncio.run(run(args))
    print(json.dumps(info, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
