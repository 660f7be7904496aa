import logging
from typing import List, Tuple, Type

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors raised deliberately by the services"""
    pass


class NotFoundError(AppError):
    """Raised when no row exists for the requested id"""
    pass


class ConflictError(AppError):
    """Raised when a write would break a business rule or a uniqueness rule"""
    pass


class InsufficientStockError(ConflictError):
    """Raised when a stock adjustment would leave a negative quantity"""
    pass


class AuthenticationError(AppError):
    """Raised when credentials do not match an active user"""
    pass


# Checked in order; the first matching class wins.
ERROR_STATUS_CODES: List[Tuple[Type[Exception], int]] = [
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (ConflictError, 409),
    (IntegrityError, 409),
    (OperationalError, 503),
    (AppError, 500),
    (SQLAlchemyError, 500),
]

# Database messages carry SQL and parameters; clients get these instead.
DATABASE_ERROR_MESSAGES = {
    IntegrityError: "Constraint violation",
    OperationalError: "Database unavailable",
    SQLAlchemyError: "Database error",
}


def status_code_for(error: Exception) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            return status_code
    return 500


def message_for(error: Exception) -> str:
    if isinstance(error, AppError):
        return str(error)
    for error_class, message in DATABASE_ERROR_MESSAGES.items():
        if isinstance(error, error_class):
            return message
    return "Internal server error"


async def handle_error(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {str(exc)}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {str(exc)}")
    return JSONResponse(status_code=status_code, content={"error": message_for(exc)})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_error)
    app.add_exception_handler(SQLAlchemyError, handle_error)
    app.add_exception_handler(Exception, handle_error)
