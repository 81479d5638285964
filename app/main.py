"""FastAPI application entry point."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text

from app.api.v1.router import api_router
from app.config import get_settings
from app.core.errors import BankingError, RateLimitedError
from app.dependencies import create_engine, create_redis, create_session_factory
from app.middleware import (
    HPPMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    SuspiciousRequestLoggingMiddleware,
)
from app.rate_limit import RateLimiter, limiter
from app.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager — owns all shared resources."""
    settings = get_settings()
    logger.info("Starting Secure Payments API...")
    logger.info("Environment: %s", settings.environment)
    logger.info("Debug mode: %s", settings.debug)

    try:
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
    except Exception:
        logger.exception("Failed to initialise database engine")
        raise

    try:
        app.state.redis = create_redis(settings)
    except Exception:
        logger.exception("Failed to initialise Redis client")
        await engine.dispose()
        raise

    app.state.rate_limiter = RateLimiter.from_settings(settings)

    yield

    logger.info("Shutting down Secure Payments API...")
    try:
        await app.state.redis.aclose()
    except Exception:
        logger.exception("Error closing Redis connection")
    finally:
        await engine.dispose()
    logger.info("Shutdown complete.")


# ---------------------------------------------------------------------------
# Exception handlers — every failure renders as {"detail", "code"}
# ---------------------------------------------------------------------------


def _error_response(
    status_code: int, detail: str, code: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "code": code},
        headers=headers,
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BankingError)
    async def _banking_error_handler(request: Request, exc: BankingError):
        headers: dict[str, str] = {}
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers["WWW-Authenticate"] = "Bearer"
        if isinstance(exc, RateLimitedError) and exc.retry_after:
            headers["Retry-After"] = str(exc.retry_after)
        return _error_response(exc.status_code, exc.detail, exc.code, headers or None)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        message = first.get("msg", "Invalid request")
        detail = f"{field}: {message}" if field else message
        logger.info("Rejected invalid input on %s %s: %s", request.method, request.url.path, detail)
        return _error_response(status.HTTP_400_BAD_REQUEST, detail, "VALIDATION_ERROR")

    @app.exception_handler(RateLimitExceeded)
    async def _global_rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning("Global rate limit exceeded on %s: %s", request.url.path, exc.detail)
        return _error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "Too many requests. Please try again later.",
            RateLimitedError.code,
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        # Let cancellation propagate — swallowing it breaks graceful shutdown
        if isinstance(exc, asyncio.CancelledError):
            raise
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR"
        )


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_application() -> FastAPI:
    """Application factory."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Secure Payments API",
        description="Customer payment submission with admin verification and processing.",
        version="1.0.0",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )

    # Global per-IP limit; the credential endpoints add their own tighter quota
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    # Last added = outermost
    app.add_middleware(HPPMiddleware)
    app.add_middleware(SuspiciousRequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    _register_exception_handlers(app)

    app.include_router(api_router, prefix="/api/v1")

    # ------------------------------------------------------------------
    # Health check endpoints (no prefix)
    # ------------------------------------------------------------------

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        """Liveness check — is the process running?"""
        return {
            "status": "healthy",
            "service": "secure-payments-api",
            "version": "1.0.0",
        }

    @app.get("/ready", tags=["Health"])
    async def readiness_check(request: Request):
        """Readiness check — can the service handle traffic?"""
        checks: dict[str, str] = {}

        try:
            async with request.app.state.session_factory() as session:
                await session.execute(text("SELECT 1"))
            checks["database"] = "ok"
        except Exception:
            logger.warning("Readiness: database unavailable", exc_info=True)
            checks["database"] = "unavailable"

        try:
            await request.app.state.redis.ping()
            checks["redis"] = "ok"
        except Exception:
            logger.warning("Readiness: redis unavailable", exc_info=True)
            checks["redis"] = "unavailable"

        all_ok = all(v == "ok" for v in checks.values())
        payload = {
            "status": "ready" if all_ok else "degraded",
            "checks": checks,
        }

        if not all_ok:
            return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload)
        return payload

    @app.get("/api/v1/ping", tags=["Health"])
    async def ping() -> dict:
        """Simple ping endpoint for debugging."""
        return {"ping": "pong"}

    return app


app = create_application()
