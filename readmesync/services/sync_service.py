"""Concurrent README fan-out for bulk syncs.

One producer task per repository fetches its README and pushes a
:class:`FetchResult` onto a queue.  A closer task waits for every
producer to finish, then enqueues a sentinel.  A single collector drains
the queue into the result dict, so the dict has exactly one writer and
needs no lock.  Fetch failures are logged and skipped: a partial result
is a normal outcome for a batch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from readmesync.clients.github_client import DEFAULT_ORG, GITHUB_API_BASE, fetch_readme
from readmesync.errors import UpstreamFetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one README fetch: content or the error that replaced it."""

    repo: str
    content: bytes | None = None
    error: UpstreamFetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _fetch_into(
    queue: asyncio.Queue[FetchResult | None],
    repo: str,
    access_token: str,
    org: str,
    api_base: str,
) -> None:
    """Producer: fetch one README and hand the result to the collector."""
    try:
        content = await fetch_readme(repo, access_token, org=org, api_base=api_base)
    except UpstreamFetchError as exc:
        await queue.put(FetchResult(repo=repo, error=exc))
        return
    await queue.put(FetchResult(repo=repo, content=content))


async def _close_when_done(
    queue: asyncio.Queue[FetchResult | None],
    producers: list[asyncio.Task],
) -> list[BaseException]:
    """Join barrier: wait for every producer, then release the collector."""
    try:
        outcomes = await asyncio.gather(*producers, return_exceptions=True)
    finally:
        await queue.put(None)
    return [o for o in outcomes if isinstance(o, BaseException)]


async def sync_all(
    repos: list[str],
    access_token: str,
    *,
    org: str = DEFAULT_ORG,
    api_base: str = GITHUB_API_BASE,
) -> dict[str, bytes]:
    """Fetch every README in *repos* concurrently.

    Returns ``{repo: readme_bytes}`` for the fetches that succeeded.
    Failed repos are logged and left out; they never fail the batch.
    If *repos* names a repository twice, the last result collected wins.
    """
    results: dict[str, bytes] = {}
    if not repos:
        return results

    queue: asyncio.Queue[FetchResult | None] = asyncio.Queue()
    producers = [
        asyncio.create_task(_fetch_into(queue, repo, access_token, org, api_base))
        for repo in repos
    ]
    closer = asyncio.create_task(_close_when_done(queue, producers))

    while True:
        item = await queue.get()
        if item is None:
            break
        if item.ok:
            results[item.repo] = item.content or b""
        else:
            logger.warning("README sync failed for %s: %s", item.repo, item.error)

    # Anything other than a fetch error is a bug, not a partial result.
    unexpected = await closer
    if unexpected:
        raise unexpected[0]

    logger.info("Fetched %d of %d READMEs", len(results), len(repos))
    return results
