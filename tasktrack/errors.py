"""Error taxonomy and structured error helpers for API responses."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

INVALID_JSON_MESSAGE = "invalid JSON body"
INTERNAL_ERROR_MESSAGE = "internal server error"


def build_error_payload(message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"error": message}
    if details:
        payload.update(details)
    return payload


class TaskTrackError(Exception):
    """Base error carrying the HTTP status and the response payload."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def payload(self) -> Dict[str, Any]:
        return build_error_payload(self.message, self.details)


class ValidationError(TaskTrackError):
    """Bad caller input. The message names the violated constraint."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(TaskTrackError):
    """No task with the requested id."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, task_id: Any, message: str = "Task not found"):
        super().__init__(message, {"id": task_id})
        self.task_id = task_id


class StorageError(TaskTrackError):
    """The persistence layer failed to read or write."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class FormatError(TaskTrackError):
    """Persisted or imported content is not valid JSON or not the expected shape."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def app_error_handler(_: Request, exc: TaskTrackError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message, exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Map FastAPI request validation failures to the flat 400 payload."""
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        message = INVALID_JSON_MESSAGE
    elif errors:
        first = errors[0]
        loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
    else:
        message = "invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=build_error_payload(message),
    )


async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=build_error_payload(INTERNAL_ERROR_MESSAGE),
    )


def describe_validation_error(exc: Any) -> str:
    """Turn a pydantic ValidationError into a single human-readable message."""
    errors = exc.errors()
    if not errors:
        return "invalid input"
    first = errors[0]
    ctx = first.get("ctx") or {}
    if "error" in ctx:
        return str(ctx["error"])
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
