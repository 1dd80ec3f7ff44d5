"""
Tree Leaves Backend — Request Logging Middleware
=================================================

What:  One access log line per HTTP request.
How:   Measures the time spent in the rest of the stack and logs method,
       path, status and duration under the "leaftree.access" logger.

Formats:
    development (concise):
        GET /api/leaves 200 3.1ms [a1b2c3d4]
    production (combined, adds client and user agent):
        127.0.0.1 "GET /api/leaves HTTP/1.1" 200 3.1ms [a1b2c3d4] "Mozilla/5.0 ..."

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, IP, user-agent, request ID
    ❌ Don't log: request bodies
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("leaftree.access")

# Probe endpoints hit every few seconds by orchestrators
QUIET_PATHS = {"/api/health/live", "/api/health/ready"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request with a level chosen by status code:
    5xx → ERROR, 4xx → WARNING, everything else → INFO.
    """

    def __init__(self, app, combined: bool = False, **kwargs):
        super().__init__(app, **kwargs)
        self.combined = combined

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        method = request.method

        if self.combined:
            client_ip = request.client.host if request.client else "unknown"
            user_agent = request.headers.get("user-agent", "-")
            logger.log(
                log_level,
                '%s "%s %s HTTP/%s" %d %.1fms [%s] "%s"',
                client_ip,
                method,
                path,
                request.scope.get("http_version", "1.1"),
                status,
                duration_ms,
                rid,
                user_agent,
            )
        else:
            logger.log(log_level, "%s %s %d %.1fms [%s]", method, path, status, duration_ms, rid)

        return response
