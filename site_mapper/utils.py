# File: site_mapper/utils.py
"""site_mapper.utils: URL helpers shared by the frontier, the fetcher and the reports."""

from __future__ import annotations

from typing import Collection, List, Sequence
from urllib.parse import urlparse, urlunparse

from site_mapper.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "is_valid_url",
    "host_filename",
    "strip_query_and_fragment",
    "remove_duplicates",
)


def normalize_url(url: str) -> str:
    """Canonical form of a page URL.

    The whole URL is lower-cased, the fragment is dropped and the path always
    ends with ``/``. The function is idempotent. It only builds keys and
    ``Location`` values; requests go to the URL as discovered.
    """
    parsed = urlparse(url.strip().lower())
    path = parsed.path or "/"
    if not path.endswith("/"):
        path += "/"

    normalized = urlunparse((parsed.scheme, parsed.netloc, path, parsed.params, parsed.query, ""))
    logger.debug("Normalized URL: %s -> %s", url, normalized)
    return normalized


def is_valid_url(url: str) -> bool:
    """Checks that ``url`` is an absolute http(s) URL with a host."""
    if not url:
        return False
    try:
        parsed = urlparse(url)
        # .port raises ValueError for garbage like "http://host:abc"
        parsed.port
    except ValueError:
        logger.debug("URL rejected: %s", url)
        return False
    valid = parsed.scheme in ("http", "https") and bool(parsed.hostname)
    logger.debug("URL valid: %s -> %s", url, valid)
    return valid


def host_filename(host: str, suffix: str = "") -> str:
    """File name derived from a host; ``:`` of an explicit port becomes ``_``."""
    return host.lower().replace(":", "_") + suffix


def strip_query_and_fragment(url: str) -> str:
    return urlparse(url)._replace(query="", fragment="").geturl()


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Removes duplicates and empty strings, keeping first-seen order."""
    unique = list(dict.fromkeys(u for u in urls if u))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate or empty URLs", removed)
    return unique
