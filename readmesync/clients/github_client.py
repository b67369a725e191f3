"""GitHub API client -- raw README fetches for a single organisation."""

import logging

import httpx

from readmesync.errors import FetchStatusError, FetchTransportError

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
DEFAULT_ORG = "darlinggo"
RAW_CONTENT_TYPE = "application/vnd.github.v3.raw"

# ── Shared HTTP client (connection pooling) ─────────────────────────────────

_client: httpx.AsyncClient | None = None


def _get_client(timeout: float = 30.0) -> httpx.AsyncClient:
    """Return (or create) the shared httpx client for GitHub API calls.

    *timeout* only applies when the client is first created.
    """
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=timeout)
    return _client


def open_client(timeout: float) -> httpx.AsyncClient:
    """Create the shared client with *timeout*.  Called during app startup."""
    return _get_client(timeout)


async def close_client() -> None:
    """Close the shared HTTP client.  Called during app shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


# ── Helpers ──────────────────────────────────────────────────────────────────


def _raw_headers(access_token: str) -> dict:
    """Headers asking for the undecorated file body, token-authenticated."""
    return {
        "Authorization": f"token {access_token}",
        "Accept": RAW_CONTENT_TYPE,
    }


def readme_url(repo: str, *, org: str = DEFAULT_ORG, api_base: str = GITHUB_API_BASE) -> str:
    """Return the README endpoint for ``org/repo``."""
    return f"{api_base.rstrip('/')}/repos/{org}/{repo}/readme"


async def fetch_readme(
    repo: str,
    access_token: str,
    *,
    org: str = DEFAULT_ORG,
    api_base: str = GITHUB_API_BASE,
) -> bytes:
    """Fetch the raw README of ``org/repo``.

    Makes exactly one request.  A non-200 answer raises
    :class:`FetchStatusError` carrying the status line and body; transport
    failures and names that do not form a valid URL raise
    :class:`FetchTransportError`.  Both keep *repo*.
    """
    client = _get_client()
    try:
        response = await client.get(
            readme_url(repo, org=org, api_base=api_base),
            headers=_raw_headers(access_token),
        )
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchTransportError(repo, str(exc) or type(exc).__name__) from exc

    if response.status_code != 200:
        status = f"{response.status_code} {response.reason_phrase}".strip()
        raise FetchStatusError(repo, status, response.content)

    logger.debug("Fetched README for %s (%d bytes)", repo, len(response.content))
    return response.content
