"""
Side Quest Backend — Request ID Middleware
============================================

What:  Assigns an id to each incoming request and returns it as X-Request-ID.
How:   Reuses a client-supplied X-Request-ID or generates a short UUID, stores
       it in a ContextVar for log lines and on request.state for handlers.
When:  Outermost custom middleware, so every later log line can read the id.

Error bodies stay `{"error": ...}`; clients that need to report a failure
quote the X-Request-ID header instead. Exceptions no handler claimed are
turned into the generic 500 here, so that response carries the id too.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a correlation id to the request, the log context and the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "[%s] Unhandled error on %s %s: %s",
                rid,
                request.method,
                request.url.path,
                exc,
                exc_info=True,
            )
            response = JSONResponse(status_code=500, content={"error": "Internal server error"})

        response.headers["X-Request-ID"] = rid
        return response
