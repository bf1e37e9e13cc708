from fastapi import APIRouter, Request

from task_api.core.utils import to_iso, utc_now
from task_api.repositories.json_storage import JsonDatabase

router = APIRouter(prefix="/database", tags=["database"])
SAMPLE_SIZE = 2


def _get_database(request: Request) -> JsonDatabase:
    db = getattr(getattr(request.app, "state", None), "database", None)
    if db is None:
        raise RuntimeError("Database not configured")
    return db


@router.get("/info")
def database_info(request: Request):
    db = _get_database(request)
    info = db.get_info()
    detail = {}
    for table in db.table_names():
        records = db.select(table)
        detail[table] = {"count": len(records), "sample": records[:SAMPLE_SIZE]}
    return {
        "database": {**info, "tablesDetail": detail},
        "timestamp": to_iso(utc_now()),
    }
