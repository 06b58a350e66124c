"""
Structured exceptions and error responses for Pathwise.

Provides consistent error handling across the API with:
- Custom exception classes
- Structured error response format
- FastAPI exception handlers
"""

from typing import Any, Dict, Optional, List
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.logging_config import get_logger

logger = get_logger("error")


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Detail of a single error."""
    loc: Optional[List[str]] = None  # Location of error (e.g., ["body", "title"])
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error response format."""
    error: str  # Error code (e.g., "not_found", "blocked")
    message: str  # Human-readable message
    details: Optional[List[ErrorDetail]] = None


# =============================================================================
# Custom Exceptions
# =============================================================================

class PathwiseException(Exception):
    """Base exception for all Pathwise errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(PathwiseException):
    """Resource not found, or owned by someone else."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} with ID {resource_id} not found",
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.resource = resource
        self.resource_id = resource_id


class ValidationError(PathwiseException):
    """Request validation error."""

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code="validation_error",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class BlockedError(PathwiseException):
    """Forward move attempted while prerequisites are incomplete."""

    def __init__(self, task_id: str, incomplete_count: int):
        super().__init__(
            message="Cannot start task: Prerequisites not completed",
            error_code="blocked",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=[{
                "loc": ["path", "task_id"],
                "msg": f"Task {task_id} has {incomplete_count} incomplete prerequisite(s)",
                "type": "blocked",
            }],
        )
        self.task_id = task_id
        self.incomplete_count = incomplete_count


class CycleDetectedError(PathwiseException):
    """Adding a dependency would create a cycle."""

    def __init__(self, task_id: str, depends_on_task_id: str):
        super().__init__(
            message="Adding this dependency would create a cycle in the task graph",
            error_code="cycle_detected",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=[{
                "loc": ["body"],
                "msg": f"Dependency {task_id} -> {depends_on_task_id} would create a cycle",
                "type": "cycle_error",
            }],
        )
        self.task_id = task_id
        self.depends_on_task_id = depends_on_task_id


class DuplicateDependencyError(PathwiseException):
    """Dependency already exists."""

    def __init__(self, task_id: str, depends_on_task_id: str):
        super().__init__(
            message="This dependency already exists",
            error_code="duplicate_dependency",
            status_code=status.HTTP_409_CONFLICT,
        )


class SelfDependencyError(PathwiseException):
    """Task cannot depend on itself."""

    def __init__(self, task_id: str):
        super().__init__(
            message="A task cannot depend on itself",
            error_code="self_dependency",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class CrossRoadmapDependencyError(PathwiseException):
    """Cannot create dependency between tasks of different roadmaps."""

    def __init__(self, task_roadmap: str, depends_on_roadmap: str):
        super().__init__(
            message="Cannot create dependency between tasks in different roadmaps",
            error_code="cross_roadmap_dependency",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class UpstreamGenerationError(PathwiseException):
    """The roadmap content generator failed or returned an unusable template."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="upstream_generation_error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def pathwise_exception_handler(request: Request, exc: PathwiseException) -> JSONResponse:
    """Handle PathwiseException and return structured response."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
        # Server-side failures get a generic, retryable message
        message = "Something went wrong. Please try again."
    else:
        message = exc.message

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": message,
            "details": exc.details,
        },
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed request bodies and parameters as a 400 validation_error."""
    details = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", "value_error"),
        }
        for error in exc.errors()
    ]
    if details:
        first = details[0]
        message = f"{'.'.join(first['loc'][1:]) or 'request'}: {first['msg']}"
    else:
        message = "Invalid request"

    logger.info(f"Validation error on {request.method} {request.url.path}: {message}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "validation_error",
            "message": message,
            "details": details,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "Something went wrong. Please try again.",
            "details": None,
        },
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(PathwiseException, pathwise_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
