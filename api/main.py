"""FastAPI surface for the discovery drafting service."""

from __future__ import annotations

import logging
import re
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.logging_config import configure_logging
from api.middleware import (
    AuditLoggingMiddleware,
    PayloadSizeLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from api.router import limiter
from api.router import router as cases_router
from core.config import Settings
from core.exceptions import (
    DiscoveryError,
    DocumentGenerationError,
    ExtractionError,
    LLMError,
    MissingPreconditionError,
    NotFoundError,
    StorageError,
    TemplateError,
    ValidationError,
)
from core.service import DiscoveryService

logger = logging.getLogger("discovery.api")

# Looked up along the exception's MRO, so subclasses inherit their parent's status
ERROR_STATUS: dict[type[DiscoveryError], int] = {
    ValidationError: 400,
    MissingPreconditionError: 400,
    NotFoundError: 404,
    ExtractionError: 422,
    LLMError: 502,
    StorageError: 502,
    TemplateError: 502,
    DocumentGenerationError: 500,
    DiscoveryError: 500,
}


def _error_code(exc: DiscoveryError) -> str:
    """``NotFoundError`` -> ``not_found``."""
    name = type(exc).__name__.removesuffix("Error") or "discovery"
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def status_for(exc: DiscoveryError) -> int:
    for klass in type(exc).__mro__:
        if klass in ERROR_STATUS:
            return ERROR_STATUS[klass]
    return 500


def create_app(settings: Settings | None = None, service: DiscoveryService | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Runtime configuration; read from the environment when omitted.
        service: Pre-built service (tests inject one wired to stubs).
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_service = getattr(app.state, "discovery_service", None) is None
        if owns_service:
            logger.info("Starting discovery API")
            app.state.discovery_service = DiscoveryService.from_settings(settings)
            logger.info(
                f"Discovery service initialized (stub_llm={app.state.discovery_service.llm.stub_mode}, "
                f"storage={app.state.discovery_service.storage_enabled})"
            )

        yield

        if owns_service:
            logger.info("Shutting down discovery API")
            await app.state.discovery_service.close()
            app.state.discovery_service = None

    app = FastAPI(
        title="Discovery Drafting API",
        description="Complaint extraction and California discovery document generation.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.startup_time = time.time()
    app.state.discovery_service = service

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Response-Time-Ms", "X-Document-URL"],
        )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Last added runs first
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(AuditLoggingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(PayloadSizeLimitMiddleware)

    _register_error_handlers(app)
    _register_system_routes(app)
    app.include_router(cases_router)
    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DiscoveryError)
    async def discovery_exception_handler(request: Request, exc: DiscoveryError) -> JSONResponse:
        """Map domain errors to the standard error body."""
        request_id = getattr(request.state, "request_id", "unknown")
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(f"{type(exc).__name__}: {exc.message} | request_id={request_id}")
        else:
            logger.info(f"Rejected request: {exc.message} | request_id={request_id}")
        return JSONResponse(
            status_code=status_code,
            content={
                "error": {
                    "code": _error_code(exc),
                    "message": exc.message,
                    "details": exc.details,
                    "request_id": request_id,
                }
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.status_code,
                    "message": exc.detail,
                    "details": {},
                    "request_id": request_id,
                }
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        errors = []
        for error in exc.errors():
            location = " -> ".join(str(loc) for loc in error["loc"])
            errors.append({"field": location, "message": error["msg"]})

        return JSONResponse(
            status_code=422,
            content={
                "error": {
                    "code": "request_validation",
                    "message": "Validation error",
                    "details": errors[:10],
                    "request_id": request_id,
                }
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.exception(f"Unhandled exception: {exc} | request_id={request_id}")
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "internal",
                    "message": "Internal server error",
                    "details": {},
                    "request_id": request_id,
                }
            },
        )


def _register_system_routes(app: FastAPI) -> None:
    @app.get("/health", tags=["system"])
    async def healthcheck() -> dict[str, str]:
        """Basic health check for load balancers and monitoring."""
        return {"status": "healthy"}

    @app.get("/health/live", tags=["system"])
    async def liveness() -> dict[str, str]:
        return {"status": "alive"}

    @app.get("/health/ready", tags=["system"])
    async def readiness(request: Request) -> dict:
        """Readiness: the service exists, and whether the LLM and storage are live."""
        service = getattr(request.app.state, "discovery_service", None)
        checks = {"service": service is not None}
        startup_time = getattr(request.app.state, "startup_time", time.time())

        return {
            "status": "ready" if all(checks.values()) else "not_ready",
            "uptime_seconds": round(time.time() - startup_time, 2),
            "checks": checks,
            "llm_stub_mode": service.llm.stub_mode if service else None,
            "storage_enabled": service.storage_enabled if service else None,
        }


app = create_app()


def run() -> None:
    """Serve the API with uvicorn (the ``discovery-api`` command)."""
    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
