"""
Hospital Auth - Security Middleware

Request/response middleware for:
- Request ID injection for tracing
- Request timing in the logs
- Security headers

Token checks are not done here; they belong to the session guard
dependency so that public routes (/login, /health) stay open.
"""

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger(__name__)


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Security-focused middleware for all incoming requests.

    Responsibilities:
    1. Inject X-Request-ID header for tracing
    2. Add security headers to response
    3. Log method, path, status and duration (never headers or bodies)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process each request through security pipeline."""

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Cache-Control"] = "no-store"

        logger.debug(
            "%s %s -> %s (%.1f ms) request_id=%s",
            request.method, request.url.path, response.status_code, duration_ms, request_id,
        )

        return response
