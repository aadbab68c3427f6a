"""
FastAPI application for FriendSocial.

Exposes the scheduling engine over HTTP:
- Scheduled activity endpoints (single, multi-date, recurring, decline, CRUD)
- Activity participant endpoints
- Health endpoint
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from friendsocial import __version__
from friendsocial.api.middleware import RequestLoggingMiddleware, get_request_id
from friendsocial.api.models import HealthResponse
from friendsocial.api.participant_routes import router as participant_router
from friendsocial.api.scheduled_activity_routes import router as scheduled_activity_router
from friendsocial.config import get_settings
from friendsocial.database import check_connection
from friendsocial.exceptions import (
    NotFoundError,
    PersistenceError,
    SchedulingError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Suggested client back-off after a transient persistence failure
RETRY_AFTER_SECONDS = 1


# =============================================================================
# Application Lifecycle
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting FriendSocial API")

    yield

    logger.info("Shutting down FriendSocial API")


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title="FriendSocial API",
    description="""
# FriendSocial API

Schedules recurring and ad-hoc social activities and tracks who takes part.

## Error Handling

Every error body has the shape `{"status_code": ..., "error": ...}`.

- **400** - Invalid input (malformed date, time, timezone, weekday, ids)
- **404** - Referenced activity, preference or scheduled activity not found
- **500** - Persistence failure (the transaction was rolled back)

Dates skipped because of a conflict are **not** errors; they are simply
absent from the creation response.
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add middleware
app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(scheduled_activity_router)
app.include_router(participant_router)


# =============================================================================
# Exception Handlers
# =============================================================================


def error_response(status_code: int, error: str, headers: dict[str, str] | None = None) -> JSONResponse:
    """Build the uniform error body."""
    return JSONResponse(
        status_code=status_code,
        content={"status_code": status_code, "error": error},
        headers=headers,
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return error_response(400, exc.message)


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return error_response(404, exc.message)


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    """Persistence failures are 500s; transient ones tell the client it may retry."""
    if exc.retryable:
        logger.warning(
            f"[{get_request_id()}] Transient persistence failure on "
            f"{request.method} {request.url.path}: {exc.context}"
        )
        return error_response(500, exc.message, headers={"Retry-After": str(RETRY_AFTER_SECONDS)})

    logger.error(
        f"[{get_request_id()}] Persistence failure on {request.method} {request.url.path}: {exc.context}"
    )
    return error_response(500, exc.message)


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    logger.error(f"Unhandled scheduling error: {exc.message}")
    return error_response(500, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and path parameters are client errors (400)."""
    messages = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    ]
    return error_response(400, "; ".join(messages))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with consistent format."""
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"[{get_request_id()}] Unhandled exception: {exc}", exc_info=True)
    return error_response(500, "An unexpected error occurred")


# =============================================================================
# Health & Status Endpoints
# =============================================================================


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    tags=["System"],
)
def health_check():
    """
    Check API health status.

    Returns:
        Health status including database connectivity
    """
    database_connected = check_connection()

    return HealthResponse(
        status="healthy" if database_connected else "unhealthy",
        version=__version__,
        database_connected=database_connected,
    )


# =============================================================================
# Run with Uvicorn
# =============================================================================


def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """Run the API server with Uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run(
        "friendsocial.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    settings = get_settings()
    run_server(host=settings.api_host, port=settings.api_port, reload=settings.api_reload)
