# ABOUTME: HTTP request logging middleware.
# ABOUTME: Logs method, path, status, and elapsed time for every request on the folio.requests logger.

import logging
import time
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

request_logger = logging.getLogger("folio.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"

        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - started) * 1000
            request_logger.error("%s %s failed after %.1fms", request.method, path, elapsed_ms)
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        request_logger.log(
            level, "%s %s -> %d (%.1fms)", request.method, path, response.status_code, elapsed_ms
        )
        response.headers["X-Response-Time"] = f"{elapsed_ms:.1f}ms"
        return response
