"""JSON error bodies shared by routers and app-level exception handlers."""

from __future__ import annotations

from http import HTTPStatus

from fastapi.responses import JSONResponse

from .utils import to_iso, utc_now


def error_payload(status_code: int, message: str) -> dict:
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        phrase = "Error"
    return {
        "error": phrase,
        "message": message,
        "statusCode": status_code,
        "timestamp": to_iso(utc_now()),
    }


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(error_payload(status_code, message), status_code=status_code)
