# bossofclean/core/middleware.py
"""Custom middleware for request handling"""
import uuid
import time
import logging
from starlette.requests import Request

logger = logging.getLogger(__name__)

# Path parameters copied onto the "Request completed" log record
LOGGED_PATH_PARAMS = ("cleaner_id", "booking_id", "blocked_date_id")


async def correlation_id_middleware(request: Request, call_next):
    """Add correlation ID to all requests for tracing"""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


def _domain_fields(request: Request) -> dict:
    """Cleaner/booking ids matched by the router; empty before routing."""
    path_params = request.scope.get("path_params") or {}
    return {name: str(path_params[name]) for name in LOGGED_PATH_PARAMS if name in path_params}


async def request_logging_middleware(request: Request, call_next):
    """Log every request with its timing and the cleaner/booking it touched"""
    start_time = time.time()
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    logger.info(
        "Request started",
        extra={
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
        }
    )

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        "Request completed",
        extra={
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration * 1000, 2),
            **_domain_fields(request),
        }
    )
    if response.status_code == 409:
        logger.warning(
            "Booking conflict",
            extra={"correlation_id": correlation_id, "path": request.url.path, **_domain_fields(request)},
        )

    return response
