# site_mapper/crawler/link_extractor.py
"""
Link and asset extraction for SiteMapper pages.
"""
from __future__ import annotations

from typing import Iterable, List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_mapper.crawler.models import PageRecord
from site_mapper.logger import logger
from site_mapper.utils import remove_duplicates, strip_query_and_fragment

__all__ = ("extract_page", "extract_links", "extract_assets", "fix_protocol_relative")


def _attr(tag: object, name: str) -> str:
    if not isinstance(tag, Tag):
        return ""
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return value.strip() if isinstance(value, str) else ""


def fix_protocol_relative(src: str) -> str:
    """``//cdn.example/x.js`` -> ``http://cdn.example/x.js``."""
    if src.startswith("//"):
        return "http:" + src
    return src


def _base_url(soup: BeautifulSoup, page_url: str) -> str:
    base = _attr(soup.find("base", href=True), "href")
    if not base:
        return page_url
    try:
        return urljoin(page_url, base)
    except ValueError:
        logger.debug("Ignoring unusable <base href=%r> on %s", base, page_url)
        return page_url


def extract_links(soup: BeautifulSoup, page_url: str, host: Optional[str] = None) -> List[str]:
    """
    Absolute same-host http(s) links of all ``<a href>`` tags, without query
    string or fragment, deduplicated in document order.
    """
    base = _base_url(soup, page_url)
    host = (host or urlparse(page_url).netloc).lower()
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        raw = _attr(tag, "href")
        if not raw or raw.startswith(("mailto:", "javascript:", "tel:")):
            continue
        try:
            parsed = urlparse(urljoin(base, raw))
            netloc = parsed.netloc.lower()
        except ValueError:
            # e.g. an unterminated IPv6 literal such as "http://[oops/x"
            logger.debug("Skipping malformed href %r on %s", raw, page_url)
            continue
        if parsed.scheme in ("http", "https") and netloc == host:
            links.append(strip_query_and_fragment(parsed.geturl()))
    return remove_duplicates(links)


def _srcs(tags: Iterable[object]) -> List[str]:
    return remove_duplicates([fix_protocol_relative(_attr(tag, "src")) for tag in tags])


def extract_assets(soup: BeautifulSoup) -> tuple[List[str], List[str], List[str]]:
    """Returns (stylesheets, scripts, images) as written in the markup."""
    stylesheets = remove_duplicates(
        [_attr(tag, "href") for tag in soup.find_all("link", rel="stylesheet")]
    )
    scripts = _srcs(soup.find_all("script", src=True))
    images = _srcs(soup.find_all("img", src=True))
    return stylesheets, scripts, images


def extract_page(location: str, html: str, base_url: Optional[str] = None) -> PageRecord:
    """
    Parses ``html`` and builds the PageRecord of ``location``.

    ``base_url`` is the URL the markup was actually served from (after
    redirects); relative links are resolved against it. Only links on the
    host of ``location`` are kept.
    """
    soup = BeautifulSoup(html, "html.parser")
    links = extract_links(soup, base_url or location, host=urlparse(location).netloc)
    stylesheets, scripts, images = extract_assets(soup)
    return PageRecord(
        location=location,
        links=tuple(links),
        stylesheets=tuple(stylesheets),
        scripts=tuple(scripts),
        images=tuple(images),
    )
