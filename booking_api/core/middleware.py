"""Request tracing and access logging"""
import logging
import time
import uuid

from starlette.requests import Request

from booking_api.utils.my_logging import correlation_id_var

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
SLOW_REQUEST_MS = 1000


async def correlation_id_middleware(request: Request, call_next):
    """Tag the request, its log records and its response with one correlation id"""
    correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
    request.state.correlation_id = correlation_id
    token = correlation_id_var.set(correlation_id)

    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token)

    response.headers[CORRELATION_HEADER] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """
    One line per request. Server errors and slow requests (booking
    transactions waiting on a lock) are raised to WARNING.
    """
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000, 2)

    level = logging.INFO
    if response.status_code >= 500 or duration_ms >= SLOW_REQUEST_MS:
        level = logging.WARNING

    logger.log(
        level,
        f"{request.method} {request.url.path} -> {response.status_code} in {duration_ms}ms",
        extra={
            "client": request.client.host if request.client else "unknown",
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
    )
    return response
