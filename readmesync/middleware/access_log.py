"""HTTP access log middleware — one structured METRIC line per request.

Records method, path, status code, wall time, webhook event type and
request ID.  Writes to the ``readmesync.access`` logger so it can be
routed or silenced separately from the application log.
"""

from __future__ import annotations

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("readmesync.access")

_SKIP_PREFIXES = frozenset({"/health", "/favicon.ico"})


class AccessLogMiddleware:
    """ASGI middleware that logs every HTTP request as a METRIC line."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path: str = scope.get("path", "")
        if any(path.startswith(p) for p in _SKIP_PREFIXES):
            await self.app(scope, receive, send)
            return

        method: str = scope.get("method", "?")
        state: dict = scope.get("state", {})
        request_id: str = state.get("request_id", "-")
        headers = dict(scope.get("headers", []))
        event = headers.get(b"x-github-event", b"-").decode("latin-1") or "-"
        t0 = time.perf_counter()
        status_code = 0

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            # Unhandled exception before the response started, count as 500.
            if status_code == 0:
                status_code = 500
            raise
        finally:
            wall_ms = (time.perf_counter() - t0) * 1000
            _emit(method, path, status_code, wall_ms, event, request_id)


def _emit(
    method: str,
    path: str,
    status_code: int,
    wall_ms: float,
    event: str,
    request_id: str,
) -> None:
    """Emit a structured METRIC line for the HTTP request."""
    line = " | ".join([
        "METRIC | type=http_request",
        f"method={method}",
        f"path={path}",
        f"status={status_code}",
        f"wall_ms={wall_ms:.0f}",
        f"event={event.replace('|', '/')}",
        f"req_id={request_id}",
    ])

    if status_code >= 500:
        logger.error(line)
    elif status_code >= 400:
        logger.warning(line)
    else:
        logger.info(line)
