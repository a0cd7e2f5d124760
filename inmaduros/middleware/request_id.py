"""
Los Inmaduros Backend — Request ID Middleware
==============================================

What:  Assigns a correlation ID to each request and echoes it back.
Why:   Every error envelope carries `request_id`, so a user reporting
       "it failed" can be matched to the exact log lines.
How:   Reuses the client's X-Request-ID header when present, otherwise
       generates a short UUID. The value lives in a ContextVar that loggers,
       exception handlers and other middleware read.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on the same thread each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Take X-Request-ID from the request, or generate 8 hex chars
        2. Store it in `request_id_var` and `request.state.request_id`
        3. Return it in the X-Request-ID response header
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
