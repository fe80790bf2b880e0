"""External link reachability (opt-in).

Each distinct URL is fetched once per run, concurrently, bounded by a
semaphore. `HEAD` first; servers that reject it (403/405/501) get a `GET`.
Transport failures are results, never exceptions.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Iterable

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings

logger = logging.getLogger(__name__)

_HEAD_REJECTED = frozenset({403, 405, 501})


@dataclass(frozen=True)
class LinkStatus:
    url: str
    ok: bool
    status_code: int | None = None
    final_url: str | None = None
    error: str | None = None

    def describe(self) -> str:
        if self.error:
            return self.error
        return f"HTTP {self.status_code}"


async def _probe(client: httpx.AsyncClient, url: str) -> LinkStatus:
    try:
        response = await client.head(url)
        if response.status_code in _HEAD_REJECTED:
            response = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        # InvalidURL (bad port, bad host) is not an HTTPError subclass.
        logger.debug("External link %s failed: %s", url, exc)
        return LinkStatus(url=url, ok=False, error=f"{exc.__class__.__name__}: {exc}".rstrip(": "))

    ok = response.status_code < 400
    return LinkStatus(
        url=url,
        ok=ok,
        status_code=response.status_code,
        final_url=str(response.url),
    )


async def check_external_links(
    urls: Iterable[str],
    *,
    settings: AppSettings,
    transport: httpx.AsyncBaseTransport | None = None,
    progress_callback: Callable[[LinkStatus], None] | None = None,
) -> dict[str, LinkStatus]:
    """Probe every distinct URL and return a status per URL."""

    unique = sorted({url.split("#", 1)[0] for url in urls if url})
    if not unique:
        return {}

    sem = asyncio.Semaphore(max(1, settings.external_max_concurrency))
    results: dict[str, LinkStatus] = {}

    async with build_async_client(settings, transport=transport) as client:

        async def check_one(url: str) -> None:
            async with sem:
                status = await _probe(client, url)
            results[url] = status
            if progress_callback:
                progress_callback(status)

        await asyncio.gather(*(check_one(url) for url in unique))

    logger.info(
        "Checked %d external links, %d unreachable",
        len(results),
        sum(1 for status in results.values() if not status.ok),
    )
    return results
