"""
Tree Leaves Backend — Request ID Middleware
============================================

What:  Tags each request with a correlation ID and echoes it back.
How:   A well-formed X-Request-ID from the client is reused; anything else
       (missing, too long, unexpected characters) is replaced by 8 hex chars
       from a UUID4. The ID lives in a ContextVar for the duration of the
       request so loggers and exception handlers can read it.

Accepted client IDs:
    1 to 64 characters from [A-Za-z0-9._-]; other header values are ignored.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

# Coroutine-local storage for the current request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(header_value) -> str:
    """Client-supplied ID when it is well formed, otherwise a fresh one."""
    if header_value and _VALID_REQUEST_ID.fullmatch(header_value):
        return header_value
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = rid

        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
