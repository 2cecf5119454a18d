# site_mapper/crawler/fetcher.py
"""
Fetcher module: downloads one page with retry/backoff and timeout and turns it
into a PageRecord. Per-page failures never escape :meth:`PageFetcher.fetch`.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence, Tuple

from aiohttp import ClientError, ClientSession, ClientTimeout
from bs4 import ParserRejectedMarkup

from site_mapper.crawler.link_extractor import extract_page
from site_mapper.crawler.models import PageRecord
from site_mapper.errors import FetchTimeout, PageFetchError
from site_mapper.utils import normalize_url

logger = logging.getLogger("SiteMapper")


class PageFetcher:
    """Handles HTTP fetching with retries/backoff and timeout."""

    RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(
        self,
        session: ClientSession,
        *,
        timeout: Optional[float] = None,
        retry_times: int = 2,
        retry_backoff: float = 1.0,
    ) -> None:
        self.session = session
        self.timeout = ClientTimeout(total=timeout) if timeout else None
        self.retry_times = retry_times
        self.retry_backoff = retry_backoff

    async def fetch(self, url: str) -> PageRecord:
        """
        Fetch ``url`` and extract its links and assets.

        Returns an empty PageRecord when the page cannot be downloaded, is not
        HTML, or its markup cannot be turned into a record.
        """
        location = normalize_url(url)
        try:
            body = await self.get_html(url)
        except FetchTimeout as exc:
            logger.warning("Timed out: %s", exc)
            return PageRecord.empty(location)
        except PageFetchError as exc:
            logger.warning("Failed %s", exc)
            return PageRecord.empty(location)

        if body is None:
            return PageRecord.empty(location)
        html, final_url = body
        try:
            return extract_page(location, html, base_url=final_url)
        except (ParserRejectedMarkup, ValueError) as exc:
            logger.warning("Unparsable markup at %s: %s", url, exc)
            return PageRecord.empty(location)

    async def get_html(self, url: str) -> Optional[Tuple[str, str]]:
        """
        Download ``url``; returns ``(html, final_url)`` or None for non-HTML content.

        Raises FetchTimeout on timeout (not retried) and PageFetchError on
        connection errors or non-2xx statuses. 429/5xx are retried with
        exponential backoff.
        """
        # without an explicit timeout the session's own timeout applies
        kwargs = {"timeout": self.timeout} if self.timeout else {}
        attempts = 0
        while True:
            try:
                async with self.session.get(url, **kwargs) as resp:
                    if resp.status in self.RETRY_STATUS:
                        raise ClientError(f"retryable status {resp.status}")
                    if not 200 <= resp.status < 300:
                        raise PageFetchError(url, f"HTTP {resp.status}")
                    mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                    if mime and "html" not in mime:
                        logger.debug("Skipping non-HTML %s (%s)", url, mime)
                        return None
                    text = await resp.text(errors="replace")
                    return text, str(resp.url)
            except asyncio.TimeoutError as exc:
                raise FetchTimeout(url, "timed out") from exc
            except ClientError as exc:
                attempts += 1
                if attempts > self.retry_times:
                    raise PageFetchError(url, str(exc) or type(exc).__name__) from exc
                backoff = min(60.0, self.retry_backoff * 2 ** (attempts - 1))
                logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.retry_times, url, backoff)
                await asyncio.sleep(backoff)
