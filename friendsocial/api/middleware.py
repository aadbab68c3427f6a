"""
Request tracking middleware.

Tags every request with an id (reusing an incoming X-Request-ID) and logs
which scheduling operation handled it, on which scheduled activity or
participant, with what outcome.
"""

import logging
import time
import uuid
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Request id for the request being served
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")

logger = logging.getLogger(__name__)

# Path parameters worth echoing into the log line
TRACKED_PATH_PARAMS = ("scheduled_activity_id", "participant_id")


def get_request_id() -> str:
    """Get current request ID from context."""
    return request_id_ctx.get()


def operation_name(request: Request) -> str:
    """Name of the route endpoint that served ``request``, or '-' when unrouted."""
    endpoint = request.scope.get("endpoint")
    return getattr(endpoint, "__name__", "-")


def tracked_ids(request: Request) -> dict[str, str]:
    params = request.scope.get("path_params") or {}
    return {key: str(params[key]) for key in TRACKED_PATH_PARAMS if key in params}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its id, operation, target ids and duration."""

    async def dispatch(self, request: Request, call_next) -> Response:
        req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request_id_ctx.set(req_id)

        logger.debug(f"[{req_id}] {request.method} {request.url.path} received")
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(
                f"[{req_id}] {operation_name(request)} failed after {elapsed_ms:.0f}ms: {e}",
                extra={"request_id": req_id, "operation": operation_name(request), "elapsed_ms": elapsed_ms},
                exc_info=True,
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        operation = operation_name(request)
        ids = tracked_ids(request)
        target = " ".join(f"{key}={value}" for key, value in ids.items())

        logger.info(
            f"[{req_id}] {request.method} {request.url.path} -> {response.status_code} "
            f"{operation}{' ' + target if target else ''} in {elapsed_ms:.0f}ms",
            extra={
                "request_id": req_id,
                "operation": operation,
                "status_code": response.status_code,
                "elapsed_ms": elapsed_ms,
                **ids,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
