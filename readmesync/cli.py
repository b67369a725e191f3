"""syncall — ask a readmesync hook to fetch a batch of READMEs.

Signs a ``{"repos": [...]}`` body with the hook's shared secret, exactly
as GitHub signs its own deliveries, and POSTs it with the ``sync-all``
event type.

Usage:
    syncall repo1 repo2 repo3

Environment:
    GITHUB_SECRET -- the hook's shared secret (same value as WEBHOOK_SECRET
                     on the server).
    HOOK_URL      -- full URL of the hook endpoint, e.g.
                     https://example.com/hook

Exit codes:
    0 -- The hook accepted the request.
    1 -- Missing configuration, no repos given, or the request failed.
"""

from __future__ import annotations

import argparse
import json
import sys

import httpx
from pydantic_settings import BaseSettings, SettingsConfigDict

from readmesync.models import EventKind
from readmesync.webhooks import SIGNATURE_PREFIX, sign_payload


class TriggerSettings(BaseSettings):
    """Environment for the trigger CLI."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    GITHUB_SECRET: str = ""
    HOOK_URL: str = ""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _info(msg: str) -> None:
    print(f"[syncall] {msg}", flush=True)


def _err(msg: str) -> None:
    print(f"[syncall] ERROR: {msg}", file=sys.stderr, flush=True)


def build_request(repos: list[str], secret: str) -> tuple[bytes, dict[str, str]]:
    """Return the exact body bytes and the headers that sign them."""
    body = json.dumps({"repos": repos}).encode()
    headers = {
        "Content-Type": "application/json",
        "X-Hub-Signature": SIGNATURE_PREFIX + sign_payload(body, secret),
        "X-Github-Event": EventKind.SYNC_ALL.value,
    }
    return body, headers


def trigger(endpoint: str, repos: list[str], secret: str, *, timeout: float = 60.0) -> httpx.Response:
    """POST a signed sync-all request and return the hook's response."""
    body, headers = build_request(repos, secret)
    return httpx.post(endpoint, content=body, headers=headers, timeout=timeout)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="syncall",
        description="Trigger a README sync for several repositories at once.",
    )
    parser.add_argument("repos", nargs="*", metavar="repo",
                        help="Repository names to sync.")
    parser.add_argument("--timeout", type=float, default=60.0,
                        help="Seconds to wait for the hook to answer (default: 60).")
    args = parser.parse_args(argv)

    settings = TriggerSettings()
    if not settings.GITHUB_SECRET:
        _err("GITHUB_SECRET must be set to the hook's secret.")
        return 1
    if not settings.HOOK_URL:
        _err("HOOK_URL must be set to the hook URL to call.")
        return 1
    if not args.repos:
        _err("Usage: syncall {repo} {repo} {repo}")
        return 1

    _info(f"Syncing repos: {', '.join(args.repos)}")
    try:
        response = trigger(settings.HOOK_URL, args.repos, settings.GITHUB_SECRET,
                           timeout=args.timeout)
    except httpx.HTTPError as exc:
        _err(f"Request to {settings.HOOK_URL} failed: {exc}")
        return 1

    _info(f"{response.status_code} {response.reason_phrase}")
    if response.text:
        _info(response.text)
    if response.is_error:
        _err("Hook rejected the sync request.")
        return 1
    return 0


def run() -> None:
    """Console-script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
