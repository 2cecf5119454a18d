"""site_mapper.errors: exception hierarchy shared by the crawler, the CLI and the reports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from site_mapper.crawler.models import ResultSet

__all__ = (
    "SiteMapperError",
    "ConfigError",
    "FetchError",
    "RobotsFetchError",
    "PageFetchError",
    "FetchTimeout",
    "RobotsReadError",
    "CrawlForbidden",
    "EmptyFrontier",
    "CrawlAborted",
    "SerializationError",
)


class SiteMapperError(Exception):
    """Base class for every error raised by SiteMapper."""


class ConfigError(SiteMapperError):
    """Configuration is missing or invalid (bad seed URL, unreadable file)."""


class FetchError(SiteMapperError):
    """An HTTP request could not be completed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class RobotsFetchError(FetchError):
    """robots.txt could not be downloaded."""


class PageFetchError(FetchError):
    """A page could not be downloaded."""


class FetchTimeout(PageFetchError):
    """A request did not finish within the configured timeout."""


class RobotsReadError(SiteMapperError):
    """The persisted robots.txt copy exists but cannot be read."""


class CrawlForbidden(SiteMapperError):
    """robots.txt has no ``User-agent: *`` group, so the site must not be crawled."""


class EmptyFrontier(SiteMapperError):
    """The frontier has no pending URLs. Signals normal crawl completion."""


class CrawlAborted(SiteMapperError):
    """A fatal error interrupted the crawl; ``partial`` keeps what was gathered."""

    def __init__(self, message: str, partial: Optional["ResultSet"] = None) -> None:
        super().__init__(message)
        self.partial = partial


class SerializationError(SiteMapperError):
    """The sitemap artifact could not be written."""
