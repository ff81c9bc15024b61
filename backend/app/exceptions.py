"""
Error types raised by the scheduling engine and how the API renders them.

Every WaypointException becomes a JSON body of the form
{"error": <code>, "message": <text>, "details": [...] | null}.
Subclasses fix their error_code and status_code as class attributes.
"""

from typing import Any, Dict, Optional, List
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.logging_config import get_logger

logger = get_logger("error")


class ErrorDetail(BaseModel):
    """One offending field or constraint."""
    loc: Optional[List[str]] = None  # e.g. ["body", "end_date"]
    msg: str
    type: str


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[List[ErrorDetail]] = None


def _detail(field: Optional[str], msg: str, kind: str) -> Dict[str, Any]:
    return {"loc": ["body", field] if field else ["body"], "msg": msg, "type": kind}


# =============================================================================
# Exceptions
# =============================================================================

class WaypointException(Exception):
    """Base exception for all Waypoint errors."""

    error_code = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.error_code, message=self.message, details=self.details)


class NotFoundError(WaypointException):
    """Missing, soft-deleted, or outside the expected project."""

    error_code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} {resource_id} does not exist")
        self.resource = resource
        self.resource_id = resource_id


class CycleDetectedError(WaypointException):
    error_code = "cycle_detected"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, predecessor_id: str, successor_id: str):
        super().__init__(
            f"Task {predecessor_id} is already reachable from {successor_id}; "
            f"linking them would close a loop",
            details=[_detail(None, f"{predecessor_id} -> {successor_id} closes a cycle", "cycle")],
        )
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id


class DuplicateDependencyError(WaypointException):
    error_code = "duplicate_dependency"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, predecessor_id: str, successor_id: str):
        super().__init__(f"Tasks {predecessor_id} and {successor_id} are already linked")
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id


class SelfDependencyError(WaypointException):
    error_code = "self_dependency"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, task_id: str):
        super().__init__(f"Task {task_id} cannot be its own predecessor")
        self.task_id = task_id


class CrossProjectDependencyError(WaypointException):
    error_code = "cross_project_dependency"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, predecessor_project: str, successor_project: str):
        super().__init__(
            f"Predecessor belongs to project {predecessor_project} "
            f"but successor belongs to {successor_project}"
        )


class SummaryFieldsReadOnlyError(WaypointException):
    """Summary dates and progress are derived from children."""

    error_code = "summary_fields_read_only"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, task_id: str, fields: List[str]):
        super().__init__(
            f"{', '.join(fields)} of summary task {task_id} are derived from its children",
            details=[_detail(field, "read-only on summary tasks", "read_only") for field in fields],
        )
        self.task_id = task_id
        self.fields = fields


class InvalidMoveError(WaypointException):
    error_code = "invalid_move"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, task_id: str, new_parent_id: str):
        super().__init__(f"Task {task_id} cannot be placed under {new_parent_id}, which is inside its own subtree")
        self.task_id = task_id
        self.new_parent_id = new_parent_id


class ValidationError(WaypointException):
    """A request that is well-formed but breaks a task rule."""

    error_code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, details=details)


class PropagationError(WaypointException):
    """Schedule propagation ran past its depth bound (corrupt dependency data)."""

    error_code = "propagation_error"

    def __init__(self, message: str, task_id: Optional[str] = None):
        super().__init__(message)
        self.task_id = task_id


# =============================================================================
# Handlers
# =============================================================================

async def waypoint_exception_handler(request: Request, exc: WaypointException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.debug(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    body = ErrorResponse(error="internal_error", message="An unexpected error occurred")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WaypointException, waypoint_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
