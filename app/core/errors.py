"""
Central error handling for HR Workflow Backend
"""
import logging
import traceback
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class NotFoundError(HTTPException):
    """Referenced account, employee, department, position or manager does not exist"""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """Uniqueness or exclusivity rule would be broken"""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidValueError(HTTPException):
    """Invalid status, position or enum value"""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class GenerationExhaustedError(HTTPException):
    """
    Every generated employee identifier collided with an existing one.

    Transient: the caller may retry the whole operation.
    """

    def __init__(self, attempts: int):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not allocate a unique employee ID after {attempts} attempts",
        )
        self.attempts = attempts


class SideEffectFailure(Exception):
    """
    A follow-up step failed after the primary write was committed.

    Never surfaced to API callers; raised inside contain_side_effect and logged.
    """

    def __init__(self, operation: str, employee_id: Optional[str], cause: BaseException):
        super().__init__(f"{operation} failed for employee {employee_id}: {cause}")
        self.operation = operation
        self.employee_id = employee_id
        self.cause = cause


@contextmanager
def contain_side_effect(db: Session, operation: str, employee_id: Optional[str] = None, **context: Any) -> Iterator[None]:
    """
    Run one best-effort step after a committed write.

    Any exception rolls back the session's pending changes and is logged as a
    SideEffectFailure with enough context to reconcile by hand. The caller
    carries on with its next step.

    Usage:
        with contain_side_effect(db, "department_recount", employee.id, department_id=5):
            recount_employees(db, 5)
    """
    try:
        yield
    except Exception as e:
        db.rollback()
        failure = SideEffectFailure(operation, employee_id, e)
        logger.error(
            "Side effect failed: operation=%s employee_id=%s context=%s error=%s",
            operation,
            employee_id,
            context or {},
            failure.cause,
            exc_info=True,
        )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException with consistent JSON response format

    Args:
        request: FastAPI request object
        exc: HTTPException instance

    Returns:
        JSONResponse with error details
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "status_code": exc.status_code,
            "detail": exc.detail,
            "path": str(request.url.path)
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle RequestValidationError with consistent JSON response format

    Does not leak internal validation details in production.
    """
    from app.core.config import settings

    # In production, return generic error message
    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "status_code": 422,
                "detail": "Validation error: Invalid request data",
                "path": str(request.url.path)
            }
        )

    # Sanitize for JSON: e.g. ctx.error ValueError -> str
    errors = []
    for e in exc.errors():
        err = dict(e)
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {
                k: (str(v) if not isinstance(v, (str, int, float, bool, type(None))) else v)
                for k, v in err["ctx"].items()
            }
        errors.append(err)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": True,
            "status_code": 422,
            "detail": "Validation error",
            "errors": errors,
            "path": str(request.url.path)
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with consistent JSON response format

    Does not leak internal error details in production.
    """
    from app.core.config import settings

    logger.error("Unhandled exception: %s", exc, exc_info=True)

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "status_code": 500,
                "detail": "Internal server error",
                "path": str(request.url.path)
            }
        )

    # In development/staging, return error details
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": True,
            "status_code": 500,
            "detail": str(exc),
            "path": str(request.url.path),
            "traceback": traceback.format_exc() if settings.APP_ENV == "local" else None
        }
    )
