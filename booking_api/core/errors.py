"""
Booking error taxonomy.

Every domain failure raised by the services maps to exactly one HTTP status,
so routes stay thin and the exception handler in main.py renders them as
``{"error": message}``.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants: user-facing messages
# ---------------------------------------------------------------------------

MSG_SLOT_UNAVAILABLE = "slot unavailable"
MSG_INVALID_TRANSITION = "invalid transition"
MSG_INTERNAL_ERROR = "internal error"


class BookingError(Exception):
    """Base class for expected booking failures"""

    status_code = 500
    default_message = MSG_INTERNAL_ERROR

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingError):
    """Malformed input or a reference to something that does not exist"""

    status_code = 400
    default_message = "invalid request"


class BusinessNotFound(ValidationError):
    default_message = "business not found"


class ServiceNotFound(ValidationError):
    default_message = "service not found for this business"


class InvalidTimezone(BookingError):
    """Business timezone is not a recognised IANA zone"""

    status_code = 400
    default_message = "invalid timezone"


class PermissionDenied(BookingError):
    status_code = 403
    default_message = "permission denied"


class AppointmentNotFound(BookingError):
    status_code = 404
    default_message = "appointment not found"


class SlotUnavailable(BookingError):
    """No free resource for the requested interval, including lost races"""

    status_code = 409
    default_message = MSG_SLOT_UNAVAILABLE


class InvalidStatusTransition(BookingError):
    status_code = 409
    default_message = MSG_INVALID_TRANSITION


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(
            f"{request.method} {request.url.path} -> {exc.status_code} ({type(exc).__name__}: {exc.message})"
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and query strings use the same 400 shape as ValidationError"""
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg')}" if field else ValidationError.default_message
    logger.info(f"{request.method} {request.url.path} -> 400 (request validation: {message})")
    return JSONResponse(status_code=400, content={"error": message, "details": errors})


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": MSG_INTERNAL_ERROR})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
