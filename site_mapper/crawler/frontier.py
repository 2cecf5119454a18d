# site_mapper/crawler/frontier.py
"""
FIFO queue of URLs waiting to be fetched, with a seen-set so that every page
is queued at most once over a crawl.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Set

from site_mapper.errors import EmptyFrontier
from site_mapper.logger import logger
from site_mapper.utils import is_valid_url, normalize_url


class Frontier:
    """Pending URLs of a crawl. Not thread-safe: owned by a single scheduler."""

    def __init__(self) -> None:
        self._queue: Deque[str] = deque()
        self._seen: Set[str] = set()

    def enqueue(self, url: str) -> bool:
        """
        Queue ``url`` unless it is empty, not an absolute http(s) URL, or was
        queued before (compared in normalized form). Returns True if queued.
        """
        if not is_valid_url(url):
            return False
        key = normalize_url(url)
        if key in self._seen:
            return False
        self._seen.add(key)
        self._queue.append(url)
        logger.debug("Queued %s (%d pending)", url, len(self._queue))
        return True

    def dequeue(self) -> str:
        """Pop the oldest pending URL; raises EmptyFrontier when nothing is left."""
        try:
            return self._queue.popleft()
        except IndexError:
            raise EmptyFrontier("frontier is empty") from None

    @property
    def seen_count(self) -> int:
        return len(self._seen)

    def __len__(self) -> int:
        return len(self._queue)

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and normalize_url(url) in self._seen
