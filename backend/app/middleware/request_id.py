"""
Request correlation IDs.

A caller (or the load balancer in front of the API) may send ``X-Request-ID``;
otherwise a UUID4 is generated. The ID is stored on ``request.state``, bound
to the structlog context for the lifetime of the request, and echoed back in
the response header. It never appears in response bodies.
"""

import re
import uuid

from starlette.datastructures import Headers, MutableHeaders

from core.logging import LogContext

REQUEST_ID_HEADER = "X-Request-ID"

_SAFE_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_request_id(inbound: str | None) -> str:
    if inbound and _SAFE_REQUEST_ID.fullmatch(inbound):
        return inbound
    return str(uuid.uuid4())


class RequestIDMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = resolve_request_id(Headers(scope=scope).get(REQUEST_ID_HEADER))
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_header(message):
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        with LogContext(request_id=request_id):
            await self.app(scope, receive, send_with_header)
