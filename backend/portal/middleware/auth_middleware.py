"""
Request Middleware Module
=========================

Starlette middleware for request processing.

Features:
- Request ID generation for tracing
- Request timing and logging
- Security headers
- Login rate limiting per client IP

Note:
    Authentication and lifecycle checks happen in the dependency
    layer, where the account's current roles are loaded.
"""

import time
import uuid
from typing import Callable, Dict, List

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from portal.core.config import settings
from portal.core.exceptions import LoginRateLimitError
from portal.core.logging import get_logger, request_id_context, security_logger

# Initialize logger
logger = get_logger(__name__)

QUIET_PATHS = {"/", "/health", "/ready"}


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Request preprocessing.

    Responsibilities:
    - Generate unique request ID for tracing
    - Log request timing
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_id_context.set(request_id)
        request.state.request_id = request_id

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request processing error",
                extra={
                    "error": str(e),
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            raise

        process_time = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        self._log_request(request, response, process_time)
        return response

    def _log_request(self, request: Request, response: Response, process_time: float) -> None:
        if request.url.path in QUIET_PATHS:
            return

        log_data = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2),
            "ip_address": request.client.host if request.client else None,
        }

        if response.status_code >= 500:
            logger.error("Request completed with error", extra=log_data)
        elif response.status_code >= 400:
            logger.warning("Request completed with client error", extra=log_data)
        else:
            logger.info("Request completed", extra=log_data)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to all responses.

    Headers added:
    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Referrer-Policy
    - Content-Security-Policy
    - Strict-Transport-Security (in production)
    """

    # Paths that serve Swagger / ReDoc UI assets
    _DOCS_PATHS = {"/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if settings.DEBUG and request.url.path in self._DOCS_PATHS:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "img-src 'self' data: https://cdn.jsdelivr.net https://fastapi.tiangolo.com; "
                "frame-ancestors 'none';"
            )
        else:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "img-src 'self' data:; "
                "frame-ancestors 'none';"
            )

        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window limit on ``POST /auth/login``.

    Counters live in the process, so each worker limits separately.
    """

    LOGIN_PATH = "/auth/login"
    WINDOW_SECONDS = 60

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self._requests: Dict[str, List[float]] = {}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        if request.url.path == self.LOGIN_PATH and request.method == "POST":
            client_ip = request.client.host if request.client else "unknown"
            if self._is_rate_limited(client_ip, settings.LOGIN_RATE_LIMIT, self.WINDOW_SECONDS):
                security_logger.log_rate_limit_exceeded(ip_address=client_ip, path=request.url.path)

                error = LoginRateLimitError(retry_after=self.WINDOW_SECONDS)
                return JSONResponse(
                    status_code=error.status_code,
                    content={"message": error.message, "details": error.details},
                    headers={"Retry-After": str(self.WINDOW_SECONDS)},
                )

        return await call_next(request)

    def _is_rate_limited(self, key: str, max_requests: int, window_seconds: int) -> bool:
        current_time = time.time()
        window_start = current_time - window_seconds

        recent = [ts for ts in self._requests.get(key, []) if ts > window_start]
        if len(recent) >= max_requests:
            self._requests[key] = recent
            return True

        recent.append(current_time)
        self._requests[key] = recent
        return False
