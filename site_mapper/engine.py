# File: site_mapper/engine.py
"""site_mapper.engine: wires config, HTTP session and crawler components for one crawl."""

from __future__ import annotations

import asyncio
import signal
from contextlib import suppress
from datetime import timedelta
from typing import Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_mapper.config import CrawlerConfig
from site_mapper.crawler.fetcher import PageFetcher
from site_mapper.crawler.frontier import Frontier
from site_mapper.crawler.models import ResultSet
from site_mapper.crawler.robots import RobotsPolicy
from site_mapper.crawler.scheduler import CrawlScheduler
from site_mapper.errors import CrawlAborted, CrawlForbidden, SiteMapperError
from site_mapper.logger import logger

__all__ = ["start_crawl"]


async def start_crawl(
    config: CrawlerConfig,
    *,
    crawl_timeout: Optional[float] = None,
    handle_signals: bool = False,
) -> ResultSet:
    """
    Crawls ``config.site_url`` and returns the gathered pages.

    ``crawl_timeout`` bounds the whole crawl: when it expires the scheduler is
    stopped and the pages gathered so far are returned. With ``handle_signals``
    SIGINT does the same.

    Raises CrawlForbidden when robots.txt has no ``User-agent: *`` group and
    CrawlAborted (carrying the partial result) on any other fatal error.
    """
    timeout = ClientTimeout(total=config.timeout)
    async with ClientSession(timeout=timeout, headers={"User-Agent": config.user_agent}) as session:
        policy = RobotsPolicy(
            session,
            storage_dir=config.robots_dir,
            max_age=timedelta(seconds=config.robots_max_age),
            default_crawl_delay=config.default_crawl_delay,
        )
        fetcher = PageFetcher(
            session,
            retry_times=config.retry_times,
            retry_backoff=config.retry_backoff,
        )
        scheduler = CrawlScheduler(
            policy,
            fetcher,
            Frontier(),
            rate_limit=config.rate_limit,
            max_pages=config.max_pages,
        )

        loop = asyncio.get_running_loop()
        timer = loop.call_later(crawl_timeout, scheduler.stop) if crawl_timeout else None
        signals_installed = False
        if handle_signals:
            with suppress(NotImplementedError, RuntimeError, ValueError):
                loop.add_signal_handler(signal.SIGINT, scheduler.stop)
                signals_installed = True

        try:
            results = await scheduler.run(str(config.site_url))
        except CrawlForbidden:
            logger.error("Crawling %s is not permitted by robots.txt", config.host)
            raise
        except (SiteMapperError, ClientError, OSError) as exc:
            logger.error("Crawl failed after %d pages: %s", len(scheduler.results), exc)
            raise CrawlAborted(str(exc), partial=scheduler.results) from exc
        except Exception as exc:
            logger.exception("Unexpected error after %d pages", len(scheduler.results))
            raise CrawlAborted(str(exc) or type(exc).__name__, partial=scheduler.results) from exc
        finally:
            if timer is not None:
                timer.cancel()
            if signals_installed:
                loop.remove_signal_handler(signal.SIGINT)

    if results.cancelled:
        logger.warning("Crawl stopped early, %d pages gathered", len(results))
    return results
