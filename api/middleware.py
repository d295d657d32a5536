"""Middleware for request logging, auditing, payload limits, and security headers."""

from __future__ import annotations

import os
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from api.logging_config import (
    get_audit_logger,
    get_performance_logger,
    get_request_logger,
)

request_logger = get_request_logger()
audit_logger = get_audit_logger()
performance_logger = get_performance_logger()

# 25 MB
MAX_REQUEST_SIZE = 25 * 1024 * 1024

SLOW_REQUEST_MS = 5000


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request and response with a correlation ID."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        request_logger.info(f"[{request_id}] {method} {path} | client={client_ip}")

        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        status_code = response.status_code
        level = "info" if status_code < 400 else "error" if status_code < 500 else "critical"
        getattr(request_logger, level)(
            f"[{request_id}] {method} {path} | "
            f"status={status_code} | duration={duration_ms:.2f}ms | client={client_ip}"
        )

        if duration_ms > SLOW_REQUEST_MS:
            performance_logger.warning(
                f"Slow request: {method} {path} | "
                f"duration={duration_ms:.2f}ms | client={client_ip} | request_id={request_id}"
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"
        return response


class AuditLoggingMiddleware(BaseHTTPMiddleware):
    """Log changes to case documents and rejected requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        auth_header = request.headers.get("authorization", "")
        # Only the scheme is logged, never the credential
        auth_type = auth_header.split()[0] if auth_header else "none"

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        response = await call_next(request)

        if path.startswith("/cases"):
            status_code = response.status_code
            if status_code in (401, 403):
                audit_logger.warning(
                    f"Authentication failed: {method} {path} | "
                    f"client={client_ip} | auth_type={auth_type}"
                )
            elif status_code == 429:
                audit_logger.warning(f"Rate limit exceeded: {method} {path} | client={client_ip}")
            elif status_code < 400 and method in ("POST", "PUT", "DELETE"):
                audit_logger.info(f"Case document changed: {method} {path} | client={client_ip}")

        return response


class PayloadSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies larger than ``max_size`` bytes."""

    def __init__(self, app: ASGIApp, max_size: int = MAX_REQUEST_SIZE):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        client_ip = request.client.host if request.client else "unknown"

        if content_length:
            try:
                content_length_int = int(content_length)
            except ValueError:
                audit_logger.warning(f"Invalid Content-Length header: {content_length} | client={client_ip}")
            else:
                if content_length_int > self.max_size:
                    audit_logger.warning(
                        f"Request payload too large: {content_length_int} bytes "
                        f"(max: {self.max_size} bytes) | client={client_ip} | path={request.url.path}"
                    )
                    return JSONResponse(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        content={
                            "error": {
                                "code": "payload_too_large",
                                "message": (
                                    f"Request payload too large. Maximum size: "
                                    f"{self.max_size // (1024 * 1024)}MB"
                                ),
                                "details": {"max_bytes": self.max_size},
                                "request_id": getattr(request.state, "request_id", "unknown"),
                            }
                        },
                    )

        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    SECURITY_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Cache-Control": "no-store, no-cache, must-revalidate, private",
        "Pragma": "no-cache",
    }

    def __init__(self, app: ASGIApp, enable_hsts: bool | None = None):
        super().__init__(app)
        self.enable_hsts = enable_hsts if enable_hsts is not None else (
            os.getenv("PRODUCTION_MODE", "").lower() == "true"
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        for header, value in self.SECURITY_HEADERS.items():
            response.headers[header] = value

        if self.enable_hsts:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
