"""
Tree Leaves Backend — Request Body Size Limit Middleware
==========================================================

What:  Rejects requests whose declared body is larger than settings.max_body_size.
How:   Compares the Content-Length header with the limit before the route
       handler reads the body; oversized requests get a 413 JSON envelope.

Limitation:
    Chunked requests without Content-Length are not measured here.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.exceptions import PayloadTooLargeError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Returns 413 Payload Too Large for oversized request bodies."""

    def __init__(self, app, max_body_size: int, **kwargs):
        super().__init__(app, **kwargs)
        self.max_body_size = max_body_size

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        declared = request.headers.get("content-length")
        if declared is None:
            return await call_next(request)

        try:
            size = int(declared)
        except ValueError:
            return JSONResponse(
                status_code=400,
                content={
                    "success": False,
                    "error": "validation_error",
                    "message": "Invalid Content-Length header",
                    "requestId": request_id_var.get(""),
                },
            )

        if size > self.max_body_size:
            exc = PayloadTooLargeError(limit=self.max_body_size, received=size)
            logger.warning(
                "Rejected %s %s: body of %d bytes exceeds %d",
                request.method,
                request.url.path,
                size,
                self.max_body_size,
            )
            return JSONResponse(
                status_code=413,
                content={
                    "success": False,
                    "error": "payload_too_large",
                    "message": exc.message,
                    "details": {"limit": self.max_body_size},
                    "requestId": request_id_var.get(""),
                },
            )

        return await call_next(request)
