# ruff: noqa: E402
# E402 disabled: load_dotenv() must run before other imports for Sentry DSN

import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

import sentry_sdk
import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from core.correlation import (
    generate_correlation_id,
    get_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)
from core.logging_config import configure_logging
from core.scheduler import setup_scheduler, shutdown_scheduler
from core.sentry_config import init_sentry
from helpers.security_headers import SecurityHeadersMiddleware
from models.config import settings
from models.exceptions import (
    DomainException,
    EmailDeliveryException,
    RateLimitExceededException,
    ValidationException,
)
from models.schemas import HealthResponse
from routers import contact_router
from services.rate_limit_service import create_rate_limiter

# Initialize Sentry BEFORE app creation
init_sentry()

# Configure logging with Loguru
configure_logging(settings.ENVIRONMENT, settings.LOG_FILE or None)

GENERIC_ERROR_MESSAGE = "Internal server error"
INVALID_BODY_MESSAGE = "Invalid request body."


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Create the rate limiter owned by this application instance.
    - Start the periodic rate limiter sweep (not in tests).
    - Stop the scheduler and drop rate limit state on shutdown.
    """
    rate_limiter = create_rate_limiter(settings)
    app.state.rate_limiter = rate_limiter
    logger.info(
        f"Rate limiter ready: {rate_limiter.max_requests} requests per "
        f"{rate_limiter.window_minutes} minutes, capacity {rate_limiter.max_entries}"
    )
    logger.info(f"CORS origin: {settings.CLIENT_URL}")

    if settings.ENVIRONMENT != "test":
        setup_scheduler(rate_limiter, settings.RATE_LIMIT_SWEEP_INTERVAL_SECONDS)

    try:
        yield
    finally:
        if settings.ENVIRONMENT != "test":
            shutdown_scheduler()
        rate_limiter.reset()


app = FastAPI(title="Contact Relay API", lifespan=lifespan)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Inject correlation ID into request context and Sentry."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request with correlation ID tracking."""
        correlation_id = resolve_correlation_id(request.headers.get("X-Correlation-ID"))
        set_correlation_id(correlation_id)

        sentry_sdk.set_tag("correlation_id", correlation_id)

        response = await call_next(request)

        response.headers["X-Correlation-ID"] = correlation_id

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all incoming requests with performance monitoring."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and log timing information."""
        start_time = time.perf_counter()

        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Request: {request.method} {request.url.path} from {client_host}")

        response = await call_next(request)

        duration = time.perf_counter() - start_time

        logger.info(
            f"Response: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s"
        )

        # Warn on slow requests (mail delivery is the usual suspect)
        if duration > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} "
                f"took {duration:.2f}s (threshold: {settings.SLOW_REQUEST_THRESHOLD}s)"
            )

        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        return response


# Note: Middleware runs in reverse order - security headers should wrap everything
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# Only the website hosting the contact form may call the API from a browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_URL],
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "X-Correlation-ID"],
    expose_headers=["X-Correlation-ID"],
)


def _error_response(
    status_code: int,
    message: str,
    correlation_id: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "correlation_id": correlation_id},
        headers=headers,
    )


# Global unhandled exception handler (returns generic 500 and logs details)
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch all unhandled exceptions with full Sentry capture."""
    correlation_id = get_correlation_id() or generate_correlation_id()

    sentry_sdk.set_tag("correlation_id", correlation_id)
    sentry_sdk.capture_exception(exc)

    logger.bind(
        correlation_id=correlation_id,
        path=str(request.url.path),
        method=request.method,
    ).exception(f"Unhandled exception: {exc!r}")

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE, correlation_id
    )


# Centralized exception handlers
@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed JSON or non-string fields: a client error, not a 422 dump."""
    correlation_id = get_correlation_id() or generate_correlation_id()
    logger.info(
        f"Rejected malformed body on {request.url.path}: {len(exc.errors())} errors"
    )
    return _error_response(
        status.HTTP_400_BAD_REQUEST, INVALID_BODY_MESSAGE, correlation_id
    )


@app.exception_handler(RateLimitExceededException)
async def rate_limit_exception_handler(
    request: Request, exc: RateLimitExceededException
) -> JSONResponse:
    """Handle blocked clients with a Retry-After hint."""
    logger.bind(path=str(request.url.path)).warning(
        f"Rate limited: {exc.remaining_minutes} minutes remaining"
    )
    return _error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        exc.message,
        exc.correlation_id,
        headers={"Retry-After": str(exc.retry_after)},
    )


@app.exception_handler(ValidationException)
async def validation_exception_handler(
    request: Request, exc: ValidationException
) -> JSONResponse:
    """Handle validation failures (expected user input issue, not reported)."""
    logger.bind(path=str(request.url.path)).info(f"Validation failed: {exc.message}")
    return _error_response(
        status.HTTP_400_BAD_REQUEST, exc.message, exc.correlation_id
    )


@app.exception_handler(EmailDeliveryException)
async def email_delivery_exception_handler(
    request: Request, exc: EmailDeliveryException
) -> JSONResponse:
    """Handle email delivery failure without leaking provider details."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.capture_exception(exc)
    logger.bind(path=str(request.url.path)).error(
        f"Email delivery failed: {exc.message}"
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message, exc.correlation_id
    )


@app.exception_handler(DomainException)
async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """Handle any other domain exception."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    sentry_sdk.capture_exception(exc)

    logger.bind(
        exception_type=exc.__class__.__name__, path=str(request.url.path)
    ).warning(f"Domain exception: {exc.message}")

    return _error_response(
        status.HTTP_400_BAD_REQUEST, exc.message, exc.correlation_id
    )


app.include_router(contact_router.router, prefix="/api")


@app.get("/api/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="OK")


if __name__ == "__main__":
    logger.info(f"Server starting on port {settings.PORT}")
    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT)
