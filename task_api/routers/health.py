import time

from fastapi import APIRouter, Request

from task_api import __version__
from task_api.core.utils import to_iso, utc_now

router = APIRouter(tags=["health"])
SERVICE_NAME = "task-control-api"
_STARTED_AT = time.monotonic()


@router.get("/")
def index():
    return {"message": "Task Control API", "version": __version__}


@router.get("/health")
def health(request: Request):
    settings = getattr(request.app.state, "settings", None)
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": __version__,
        "environment": settings.app_env if settings else "dev",
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "timestamp": to_iso(utc_now()),
    }
