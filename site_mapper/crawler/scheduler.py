# === FILE: site_mapper/crawler/scheduler.py ===
"""
The crawl loop. One URL at a time: dequeue, robots check, politeness wait,
fetch, merge the discovered links back into the frontier.
"""
from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Optional
from urllib.parse import urlparse

from site_mapper.crawler.fetcher import PageFetcher
from site_mapper.crawler.frontier import Frontier
from site_mapper.crawler.models import ResultSet, RobotsRuleSet
from site_mapper.crawler.robots import RobotsPolicy, is_allowed
from site_mapper.errors import CrawlForbidden, EmptyFrontier

__all__ = ("CrawlScheduler", "CrawlState")


class CrawlState(str, Enum):
    IDLE = "idle"
    DELAYING = "delaying"
    FETCHING = "fetching"
    MERGING = "merging"
    DONE = "done"


class CrawlScheduler:
    """Sequential crawler: at most one fetch in flight, so the crawl-delay holds globally.

    URLs rejected by robots.txt are skipped without waiting; the politeness
    delay is only spent in front of an actual request.
    """

    def __init__(
        self,
        policy: RobotsPolicy,
        fetcher: PageFetcher,
        frontier: Optional[Frontier] = None,
        *,
        rate_limit: Optional[float] = None,
        max_pages: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.policy = policy
        self.fetcher = fetcher
        self.frontier = frontier if frontier is not None else Frontier()
        self.min_interval = 1.0 / rate_limit if rate_limit else 0.0
        self.max_pages = max_pages
        self.results = ResultSet()
        self.logger = logging.getLogger("SiteMapper")
        self._clock = clock
        self._stop = asyncio.Event()
        self._last_fetch_started: Optional[float] = None
        self._state = CrawlState.IDLE

    @property
    def state(self) -> CrawlState:
        return self._state

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        """Ask the loop to finish: no new dequeues, the in-flight fetch is kept."""
        if not self._stop.is_set():
            self.logger.info("Stop requested, finishing the current page")
        self._stop.set()

    def _set_state(self, state: CrawlState) -> None:
        self.logger.debug("%s -> %s", self._state.value, state.value)
        self._state = state

    def interval(self, rules: RobotsRuleSet) -> float:
        return max(float(rules.crawl_delay_seconds), self.min_interval)

    async def _wait_politely(self, interval: float) -> None:
        self._set_state(CrawlState.DELAYING)
        if self._last_fetch_started is not None:
            remaining = interval - (self._clock() - self._last_fetch_started)
            if remaining > 0:
                self.logger.debug("Waiting %.2f s before the next request", remaining)
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=remaining)
                except asyncio.TimeoutError:
                    pass
        self._last_fetch_started = self._clock()

    def _limit_reached(self) -> bool:
        return self.max_pages is not None and len(self.results) >= self.max_pages

    async def run(self, seed: str) -> ResultSet:
        """Crawl from ``seed`` until the frontier is empty, the page limit is hit or stop() is called."""
        rules = await self.policy.rules_for(seed)
        if not rules.user_agent_matched:
            self._set_state(CrawlState.DONE)
            raise CrawlForbidden(f"robots.txt of {urlparse(seed).netloc} has no 'User-agent: *' group")

        self.logger.info("Crawl started: %s", seed)
        start = time.monotonic()
        self.frontier.enqueue(seed)

        while not self.stopped:
            self._set_state(CrawlState.IDLE)
            if self._limit_reached():
                self.logger.info("Page limit of %d reached", self.max_pages)
                break
            try:
                url = self.frontier.dequeue()
            except EmptyFrontier:
                break

            rules = await self.policy.rules_for(url)
            if not rules.user_agent_matched:
                self.logger.error("robots.txt no longer admits 'User-agent: *', stopping")
                self.stop()
                break
            if not is_allowed(rules, urlparse(url).path or "/"):
                self.logger.info("Disallowed by robots.txt: %s", url)
                self.results.disallowed.append(url)
                continue

            await self._wait_politely(self.interval(rules))
            if self.stopped:
                break

            self._set_state(CrawlState.FETCHING)
            record = await self.fetcher.fetch(url)

            self._set_state(CrawlState.MERGING)
            self.results.add(record)
            for link in record.links:
                self.frontier.enqueue(link)
            self.logger.debug("Queue length: %d, pages: %d", len(self.frontier), len(self.results))

        self.results.cancelled = self.stopped
        self._set_state(CrawlState.DONE)
        duration = time.monotonic() - start
        self.logger.info("Finished: %d pages in %.2f s", len(self.results), duration)
        if self.results.disallowed:
            self.logger.info("Blocked by robots.txt: %d", len(self.results.disallowed))
        return self.results
