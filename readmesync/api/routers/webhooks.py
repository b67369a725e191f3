"""Webhook router -- GitHub push/ping events and sync-all requests."""

import logging
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError
from starlette.requests import ClientDisconnect

from readmesync.api.deps import get_settings
from readmesync.clients.github_client import fetch_readme
from readmesync.config import Settings
from readmesync.errors import AuthError, BadRequestError, UpstreamFetchError
from readmesync.models import EventKind, SyncRequest
from readmesync.services.site_service import publish
from readmesync.services.sync_service import sync_all
from readmesync.webhooks import parse_signature_header, verify_signature

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])

EVENT_HEADER = "X-Github-Event"
SIGNATURE_HEADER = "X-Hub-Signature"


def classify_event(header: str | None) -> EventKind:
    """Map the event header onto an :class:`EventKind`, or reject it."""
    try:
        return EventKind(header or "")
    except ValueError:
        raise BadRequestError(f"Unsupported event type: {header!r}")


def parse_branch(ref: str) -> str:
    """Return the branch of a ``refs/heads/<branch>`` ref.

    The ref must have exactly three ``/``-separated segments.
    """
    parts = ref.split("/")
    if len(parts) != 3:
        raise BadRequestError(f"Malformed ref: {ref!r}")
    return parts[2]


def _parse_body(body: bytes) -> SyncRequest:
    try:
        return SyncRequest.model_validate_json(body)
    except ValidationError as exc:
        raise BadRequestError(f"Invalid request body: {exc.error_count()} error(s)")


# ---------------------------------------------------------------------------
# Per-event handlers
# ---------------------------------------------------------------------------


async def _handle_ping(body: bytes, settings: Settings) -> Response:
    return PlainTextResponse("pong")


async def _handle_push(body: bytes, settings: Settings) -> Response:
    """Sync the pushed repository if the push landed on the release branch."""
    req = _parse_body(body)
    branch = parse_branch(req.ref)
    if branch != settings.RELEASE_BRANCH:
        logger.info("Ignoring push to %s/%s", req.repository.name, branch)
        return JSONResponse({"status": "ignored"})

    name = req.repository.name
    try:
        readme = await fetch_readme(
            name,
            settings.GITHUB_TOKEN,
            org=settings.GITHUB_ORG,
            api_base=settings.GITHUB_API_BASE,
        )
    except UpstreamFetchError as exc:
        logger.error("README fetch failed: %s", exc)
        if exc.body:
            logger.debug("GitHub response body for %s: %r", name, exc.body[:500])
        raise

    await publish({name: readme}, settings)
    return JSONResponse({"status": "synced", "repos": [name]})


async def _handle_sync_all(body: bytes, settings: Settings) -> Response:
    """Fetch every listed README.

    The fetched READMEs are not written and hugo is not run; only push
    events publish.  The response reports which fetches succeeded.
    """
    req = _parse_body(body)
    readmes = await sync_all(
        req.repos,
        settings.GITHUB_TOKEN,
        org=settings.GITHUB_ORG,
        api_base=settings.GITHUB_API_BASE,
    )
    return JSONResponse({"status": "fetched", "repos": sorted(readmes)})


_HANDLERS: dict[EventKind, Callable[[bytes, Settings], Awaitable[Response]]] = {
    EventKind.PING: _handle_ping,
    EventKind.PUSH: _handle_push,
    EventKind.SYNC_ALL: _handle_sync_all,
}


@router.post("/hook")
async def github_hook(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Response:
    """Receive a signed GitHub (or sync-all) webhook event.

    Classifies the event, validates the X-Hub-Signature header against the
    raw body, then dispatches to the handler for that event kind.
    """
    event = classify_event(request.headers.get(EVENT_HEADER))

    try:
        body = await request.body()
    except ClientDisconnect:
        raise BadRequestError("Client disconnected before the body was read")

    signature = parse_signature_header(request.headers.get(SIGNATURE_HEADER))
    if not verify_signature(signature, body, settings.WEBHOOK_SECRET):
        client_ip = request.client.host if request.client else "unknown"
        logger.warning("Rejected %s event from %s: signature mismatch", event.value, client_ip)
        raise AuthError()

    return await _HANDLERS[event](body, settings)
