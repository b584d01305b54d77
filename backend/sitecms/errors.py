"""Error taxonomy and the app-wide error normalizer.

Domain failures are raised as ``HTTPException`` subclasses straight from the
services. Anything else bubbles up to the handlers registered by
``register_exception_handlers`` which map it to a stable response shape.
"""
import asyncio
import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

logger = logging.getLogger(__name__)


class ValidationError(HTTPException):
    def __init__(self, detail: str = "All fields are required"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Authentication required. Please login"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class TokenExpired(Unauthenticated):
    def __init__(self):
        super().__init__("Token expired. Please login again")


class TokenInvalid(Unauthenticated):
    def __init__(self):
        super().__init__("Invalid token. Please login again")


class NotFound(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Forbidden(NotFound):
    """Ownership violation. Reported as 404 so callers cannot probe for ids they do not own."""

    def __init__(self, resource: str = "resource"):
        super().__init__(f"Unauthorized to update this {resource} or {resource} not found")


class RegistrationLimitReached(HTTPException):
    def __init__(self, limit: int):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Registration limit reached. Only {limit} users are allowed.",
        )


class EmailAlreadyRegistered(HTTPException):
    def __init__(self):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")


SERVICE_UNAVAILABLE_MESSAGE = (
    "We're having trouble connecting to the database. Please try again shortly."
)
INTERNAL_ERROR_MESSAGE = "Something went wrong. Please try again."


async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Database unreachable during {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": SERVICE_UNAVAILABLE_MESSAGE},
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"Constraint violation during {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"Invalid request: {exc.orig}"},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(p) for p in err["loc"][1:]) for err in exc.errors() if err.get("loc")})
    detail = "Invalid or missing fields"
    if fields:
        detail = f"{detail}: {', '.join(f for f in fields if f)}"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error during {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OperationalError, database_unavailable_handler)
    app.add_exception_handler(InterfaceError, database_unavailable_handler)
    # connect failures the driver raises without wrapping them
    app.add_exception_handler(OSError, database_unavailable_handler)
    app.add_exception_handler(asyncio.TimeoutError, database_unavailable_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
