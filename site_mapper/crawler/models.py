# site_mapper/crawler/models.py
"""
Data models for the SiteMapper crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterator, List, Tuple


@dataclass(frozen=True, slots=True)
class PageRecord:
    """Links and assets found on one page. Failed pages keep all sequences empty."""

    location: str
    links: Tuple[str, ...] = ()
    stylesheets: Tuple[str, ...] = ()
    scripts: Tuple[str, ...] = ()
    images: Tuple[str, ...] = ()

    @classmethod
    def empty(cls, location: str) -> PageRecord:
        return cls(location=location)

    @property
    def is_empty(self) -> bool:
        return not (self.links or self.stylesheets or self.scripts or self.images)

    def to_dict(self) -> Dict[str, object]:
        """Sitemap wire form."""
        return {
            "Location": self.location,
            "Urls": list(self.links),
            "Stylesheets": list(self.stylesheets),
            "Scripts": list(self.scripts),
            "Images": list(self.images),
        }


@dataclass(frozen=True, slots=True)
class RobotsRuleSet:
    """Rules of the ``User-agent: *`` group of one host's robots.txt."""

    user_agent_matched: bool
    disallowed_paths: Tuple[str, ...] = ()
    allowed_paths: Tuple[str, ...] = ()
    crawl_delay_seconds: int = 1
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def unrestricted(cls, crawl_delay_seconds: int = 1) -> RobotsRuleSet:
        """Rules of a host that publishes no robots.txt: everything is allowed."""
        return cls(user_agent_matched=True, crawl_delay_seconds=crawl_delay_seconds)

    def age(self, now: datetime | None = None) -> timedelta:
        return (now or datetime.now(timezone.utc)) - self.fetched_at

    def is_stale(self, max_age: timedelta, now: datetime | None = None) -> bool:
        return self.age(now) > max_age


@dataclass(slots=True)
class ResultSet:
    """Pages gathered by one crawl, in fetch order."""

    pages: Dict[str, PageRecord] = field(default_factory=dict)
    disallowed: List[str] = field(default_factory=list)
    cancelled: bool = False

    def add(self, record: PageRecord) -> bool:
        """Stores ``record`` unless its location is already present."""
        if record.location in self.pages:
            return False
        self.pages[record.location] = record
        return True

    @property
    def records(self) -> List[PageRecord]:
        return list(self.pages.values())

    def __len__(self) -> int:
        return len(self.pages)

    def __iter__(self) -> Iterator[PageRecord]:
        return iter(self.pages.values())

    def __contains__(self, location: object) -> bool:
        return location in self.pages
