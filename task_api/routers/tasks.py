from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request

from task_api.core import query_params as qp
from task_api.core.config import get_settings
from task_api.core.errors import error_response
from task_api.schemas import TaskCreate, TaskUpdate
from task_api.services.task_service import (
    ListTasksRequest,
    TaskAlreadyExistsError,
    TaskNotFoundError,
    TaskService,
    TaskValidationError,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)

MAX_PAGE = 1000


def _get_task_service(request: Request) -> TaskService:
    svc = getattr(getattr(request.app, "state", None), "task_service", None)
    if not svc:
        raise RuntimeError("TaskService not configured")
    return svc


def _list_request(request: Request) -> ListTasksRequest:
    settings = getattr(request.app.state, "settings", None) or get_settings()
    params = request.query_params
    return ListTasksRequest(
        page=qp.in_range(qp.to_int(params.get("page")), 1, MAX_PAGE, 1),
        limit=qp.in_range(
            qp.to_int(params.get("limit")),
            1,
            settings.max_page_limit,
            settings.default_page_limit,
        ),
        search=qp.to_str(params.get("search")),
        completed=qp.to_bool(params.get("completed")),
        sort_by=qp.to_str(params.get("sortBy")),
        order=qp.to_str(params.get("order"), "asc"),
        created_after=qp.to_datetime(params.get("createdAfter")),
        created_before=qp.to_datetime(params.get("createdBefore")),
    )


@router.post("", status_code=201)
async def create_task(request: Request, payload: Optional[TaskCreate] = None):
    if payload is None:
        return error_response(400, "Request body is required")
    svc = _get_task_service(request)
    try:
        return await svc.create_task(payload.title, payload.description)
    except (TaskValidationError, TaskAlreadyExistsError) as exc:
        return error_response(400, exc.message)


@router.get("")
def list_tasks(request: Request):
    svc = _get_task_service(request)
    return svc.list_tasks(_list_request(request))


@router.put("/{task_id}")
async def update_task(task_id: str, request: Request, payload: Optional[TaskUpdate] = None):
    svc = _get_task_service(request)
    payload = payload or TaskUpdate()
    try:
        return await svc.update_task(task_id, title=payload.title, description=payload.description)
    except TaskValidationError as exc:
        return error_response(400, exc.message)
    except TaskNotFoundError as exc:
        return error_response(404, exc.message)


@router.delete("/{task_id}")
async def delete_task(task_id: str, request: Request):
    svc = _get_task_service(request)
    try:
        return await svc.delete_task(task_id)
    except TaskNotFoundError as exc:
        return error_response(404, exc.message)


@router.patch("/{task_id}/complete")
async def toggle_task_complete(task_id: str, request: Request):
    svc = _get_task_service(request)
    try:
        return await svc.toggle_completed(task_id)
    except TaskNotFoundError as exc:
        logger.info("Toggle on missing task id=%s", task_id)
        return error_response(404, exc.message)
