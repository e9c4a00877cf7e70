"""Global exception handlers for consistent error responses."""

from datetime import datetime, timezone
from typing import Any, Optional, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from src.exceptions import BadRequestError, BaseAPIException, PersistenceError
from src.schemas.errors import ErrorResponse
from src.utils.logger import get_logger, get_request_id

log = get_logger(__name__)


def _error_json(
    status_code: int, code: str, message: str, details: Optional[dict[str, Any]] = None
) -> JSONResponse:
    error_response = ErrorResponse(
        error=message,
        code=code,
        details=details,
        request_id=get_request_id(),
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=error_response.model_dump(mode="json"))


async def base_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Handle application exceptions."""
    log_method = log.warning if exc.status_code < 500 else log.error
    log_method(
        "api exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
    )
    return _error_json(exc.status_code, exc.error_code, exc.message, exc.details)


async def validation_exception_handler(
    request: Request, exc: Union[RequestValidationError, PydanticValidationError]
) -> JSONResponse:
    """Malformed or incomplete request bodies are a 400 Bad Request."""
    # Only field locations and error types are logged; input values may be sensitive.
    log.warning(
        "validation error",
        fields=[".".join(str(p) for p in e.get("loc", ())) for e in exc.errors()],
    )

    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    return _error_json(
        status.HTTP_400_BAD_REQUEST,
        BadRequestError.error_code,
        "Request validation failed",
        {"errors": errors},
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database errors that escaped the service layer."""
    log.error("database error", error_type=type(exc).__name__)
    return _error_json(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        PersistenceError.error_code,
        "Database operation failed",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    log.critical("unhandled exception", error_type=type(exc).__name__, exc_info=exc)
    return _error_json(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI application."""
    app.add_exception_handler(BaseAPIException, base_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)  # type: ignore[arg-type]
