"""
Book Catalog — Request ID Middleware
======================================

What:  Assigns a correlation id to each request and echoes it back in the
       X-Request-ID response header.
Why:   One id ties the access log line, application log lines and the
       error body of a single request together.
How:   Uses the client's X-Request-ID when present, otherwise a short
       UUID. Stores it in a ContextVar (read by loggers and exception
       handlers) and on request.state.
When:  Outermost application middleware; runs before RequestLoggingMiddleware.

The ContextVar is reset when the request leaves this middleware. Code that
runs after that (Starlette's ServerErrorMiddleware and the handler for
unexpected exceptions) reads the id from request.state instead, through
current_request_id().
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def current_request_id(request: Request) -> str:
    """The id of the request being handled, or "" if none was assigned."""
    return request_id_var.get("") or getattr(request.state, "request_id", "")


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        token = request_id_var.set(rid)
        # request.state lives in the ASGI scope, so it outlives the ContextVar
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
