"""
Domain errors and their HTTP translation.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class GarageError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GarageError):
    """Malformed, missing or out-of-range input."""

    status_code = 422

    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message}])


class NotFoundError(GarageError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(GarageError):
    """Uniqueness violation or a delete blocked by existing references."""

    status_code = status.HTTP_409_CONFLICT


class AuthError(GarageError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(GarageError):
    status_code = status.HTTP_403_FORBIDDEN


class ExternalServiceError(GarageError):
    """Mail transport failure."""

    status_code = status.HTTP_502_BAD_GATEWAY


async def garage_error_handler(request: Request, exc: GarageError) -> JSONResponse:
    content = {"detail": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GarageError, garage_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
