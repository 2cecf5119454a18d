# site_mapper/crawler/robots.py
"""
robots.txt handling: download and on-disk caching per host, parsing of the
``User-agent: *`` group and the allow/disallow check.
"""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

from aiohttp import ClientError, ClientSession

from site_mapper.crawler.models import RobotsRuleSet
from site_mapper.errors import RobotsFetchError, RobotsReadError
from site_mapper.utils import host_filename

__all__ = ("RobotsPolicy", "parse_robots_text", "is_allowed")

logger = logging.getLogger("SiteMapper")

_WILDCARD_RE = re.compile(r"(\*|\$)")
_regex_cache: Dict[str, re.Pattern[str]] = {}


def _prepare_lines(text: str) -> List[Tuple[str, str]]:
    """Strips comments and splits lines into (field, value); lines without ':' are skipped."""
    lines: List[Tuple[str, str]] = []
    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line or ":" not in line:
            continue
        key, val = (part.strip() for part in line.split(":", 1))
        lines.append((key.lower(), val))
    return lines


def parse_robots_text(
    text: str,
    *,
    default_crawl_delay: int = 1,
    fetched_at: Optional[datetime] = None,
) -> RobotsRuleSet:
    """Builds the rule set that applies to the generic ``*`` user agent.

    Consecutive ``User-agent`` lines form one group; a ``User-agent`` line
    after any other directive starts a new group. Only directives of groups
    naming ``*`` are kept. ``Crawl-delay`` must be a non-negative integer,
    anything else falls back to ``default_crawl_delay``.
    """
    matched = False
    in_star_group = False
    agents_open = False
    disallowed: List[str] = []
    allowed: List[str] = []
    crawl_delay: Optional[int] = None

    for directive, value in _prepare_lines(text):
        if directive == "user-agent":
            if not agents_open:
                in_star_group = False
                agents_open = True
            if value == "*":
                in_star_group = True
                matched = True
            continue
        agents_open = False
        if not in_star_group:
            continue
        if directive == "disallow" and value:
            disallowed.append(value)
        elif directive == "allow" and value:
            allowed.append(value)
        elif directive == "crawl-delay":
            try:
                delay = int(value)
            except ValueError:
                logger.debug("Ignoring malformed Crawl-delay: %r", value)
                continue
            if delay >= 0:
                crawl_delay = delay

    return RobotsRuleSet(
        user_agent_matched=matched,
        disallowed_paths=tuple(dict.fromkeys(disallowed)),
        allowed_paths=tuple(dict.fromkeys(allowed)),
        crawl_delay_seconds=default_crawl_delay if crawl_delay is None else crawl_delay,
        fetched_at=fetched_at or datetime.now(timezone.utc),
    )


def _match_path(path: str, pattern: str) -> bool:
    if pattern not in _regex_cache:
        esc = re.escape(pattern).replace(r"\*", ".*")
        if pattern.endswith("$"):
            esc = esc[:-2] + "$"
        else:
            esc += ".*"
        _regex_cache[pattern] = re.compile(f"^{esc}")
    return bool(_regex_cache[pattern].match(path))


def _rule_len(pattern: str) -> int:
    return len(_WILDCARD_RE.sub("", pattern))


def is_allowed(rules: RobotsRuleSet, path: str) -> bool:
    """True unless the longest matching pattern is a Disallow. Allow wins ties."""
    path = path or "/"
    best_len = -1
    allow: Optional[bool] = None
    for directive, patterns in (("disallow", rules.disallowed_paths), ("allow", rules.allowed_paths)):
        for pattern in patterns:
            if not _match_path(path, pattern):
                continue
            length = _rule_len(pattern)
            if length > best_len or (length == best_len and directive == "allow"):
                best_len = length
                allow = directive == "allow"
    return True if allow is None else allow


class RobotsPolicy:
    """Keeps one robots.txt copy per host on disk and the parsed rules in memory."""

    def __init__(
        self,
        session: ClientSession,
        *,
        storage_dir: Path | str = ".",
        max_age: timedelta = timedelta(hours=1),
        default_crawl_delay: int = 1,
    ) -> None:
        self.session = session
        self.storage_dir = Path(storage_dir)
        self.max_age = max_age
        self.default_crawl_delay = default_crawl_delay
        self._rules: Dict[str, RobotsRuleSet] = {}

    def robots_path(self, host: str) -> Path:
        return self.storage_dir / host_filename(host)

    def _copy_age(self, path: Path) -> Optional[timedelta]:
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return None
        return datetime.now(timezone.utc) - datetime.fromtimestamp(mtime, timezone.utc)

    async def ensure_fresh(self, host: str, scheme: str = "http") -> bool:
        """
        Downloads robots.txt when there is no local copy or the copy is older
        than ``max_age``. Returns True if a request was made.

        A non-2xx answer means the host has no robots.txt: the old copy is
        dropped and nothing is stored. Network failures raise RobotsFetchError.
        """
        path = self.robots_path(host)
        age = self._copy_age(path)
        if age is not None and age <= self.max_age:
            return False

        robots_url = f"{scheme}://{host}/robots.txt"
        try:
            async with self.session.get(robots_url) as resp:
                if not 200 <= resp.status < 300:
                    logger.info("robots.txt %s -> HTTP %s, treating host as unrestricted", robots_url, resp.status)
                    path.unlink(missing_ok=True)
                    return True
                text = await resp.text(errors="replace")
        except asyncio.TimeoutError as exc:
            raise RobotsFetchError(robots_url, "timed out") from exc
        except ClientError as exc:
            raise RobotsFetchError(robots_url, str(exc) or type(exc).__name__) from exc

        self.storage_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        logger.debug("Stored %s as %s", robots_url, path)
        return True

    def parse(self, host: str) -> RobotsRuleSet:
        """Parses the stored copy for ``host``; no copy means no restrictions."""
        path = self.robots_path(host)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return RobotsRuleSet.unrestricted(self.default_crawl_delay)
        except OSError as exc:
            raise RobotsReadError(f"Cannot read robots.txt copy {path}: {exc}") from exc
        return parse_robots_text(
            text,
            default_crawl_delay=self.default_crawl_delay,
            fetched_at=datetime.fromtimestamp(mtime, timezone.utc),
        )

    async def rules_for(self, url: str) -> RobotsRuleSet:
        """Rules for the host of ``url``, refreshed once they are older than ``max_age``."""
        parsed = urlparse(url)
        host = parsed.netloc.lower()
        cached = self._rules.get(host)
        if cached is not None and not cached.is_stale(self.max_age):
            return cached

        try:
            await self.ensure_fresh(host, parsed.scheme or "http")
        except RobotsFetchError as exc:
            if not self.robots_path(host).exists():
                logger.warning("Could not fetch robots.txt (%s); crawling %s without restrictions", exc, host)
                # cached for one freshness window instead of retrying on every URL
                rules = RobotsRuleSet.unrestricted(self.default_crawl_delay)
                self._rules[host] = rules
                return rules
            logger.warning("Could not refresh robots.txt (%s); using the stored copy", exc)

        rules = self.parse(host)
        if rules.is_stale(self.max_age):
            # old copy kept after a failed refresh; retry after another window
            rules = replace(rules, fetched_at=datetime.now(timezone.utc))
        self._rules[host] = rules
        logger.debug(
            "robots.txt for %s: matched=%s disallow=%d allow=%d delay=%ss",
            host, rules.user_agent_matched, len(rules.disallowed_paths),
            len(rules.allowed_paths), rules.crawl_delay_seconds,
        )
        return rules
