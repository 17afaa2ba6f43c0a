"""Request ID middleware — one correlation id per request.

Learn: A caller (gateway, load balancer, another service) may send its
own X-Request-ID so its logs and ours line up. That value ends up in
every log line and in the response, so only short ids made of
[A-Za-z0-9._-] are trusted; anything else is replaced by a fresh UUID.

Besides the id, the method and path are bound into structlog's
contextvars for the lifetime of the request. The auth gate later adds
account_id, so a line logged deep inside a service still says who
asked and for what.
"""

import re
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]+$")


def resolve_request_id(incoming: str | None) -> str:
    """Reuse a well-formed inbound id, otherwise mint a new one."""
    if (
        incoming
        and len(incoming) <= MAX_REQUEST_ID_LENGTH
        and _SAFE_REQUEST_ID.match(incoming)
    ):
        return incoming
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind request context for logging and echo the id back."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        )
        try:
            response: Response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("account_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
