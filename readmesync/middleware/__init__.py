"""Request-ID middleware — tags every HTTP request with a trace ID.

Pure ASGI (not BaseHTTPMiddleware) so the raw request body reaches the
webhook handler untouched for signature checks.
"""

import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

REQUEST_ID_HEADER = b"x-request-id"


class RequestIDMiddleware:
    """Injects ``X-Request-ID`` into every HTTP request/response cycle.

    A client-supplied ID (GitHub sends ``X-GitHub-Delivery``, the sync
    trigger sends nothing) is reused when present; otherwise a random
    UUID-4 is generated.  Lifespan scopes pass through untouched.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = (
            headers.get(REQUEST_ID_HEADER, b"").decode("latin-1")
            or headers.get(b"x-github-delivery", b"").decode("latin-1")
            or str(uuid.uuid4())
        )
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                raw_headers = list(message.get("headers", []))
                raw_headers.append((REQUEST_ID_HEADER, request_id.encode("latin-1")))
                message = {**message, "headers": raw_headers}
            await send(message)

        await self.app(scope, receive, send_with_id)
