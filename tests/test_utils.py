# File: tests/test_utils.py
import pytest

from site_mapper.utils import (
    host_filename,
    is_valid_url,
    normalize_url,
    remove_duplicates,
    strip_query_and_fragment,
)

URLS = [
    "http://example.com",
    "HTTP://Example.COM/About",
    "https://example.com/a/b/",
    "http://example.com/style.css",
    "http://example.com/page?x=1#frag",
    "http://example.com:8080/Docs/v1.2",
    "http://example.com/a//b",
]


@pytest.mark.parametrize("url", URLS)
def test_normalize_is_idempotent(url):
    once = normalize_url(url)
    assert normalize_url(once) == once


@pytest.mark.parametrize("url", URLS)
def test_normalized_form_is_lower_case_and_slash_terminated(url):
    normalized = normalize_url(url)
    assert normalized == normalized.lower()
    assert "#" not in normalized
    assert normalized.split("?", 1)[0].endswith("/")


@pytest.mark.parametrize(
    "url,expected",
    [
        ("http://example.com", "http://example.com/"),
        ("HTTP://Example.COM/About", "http://example.com/about/"),
        ("http://example.com/style.css", "http://example.com/style.css/"),
        ("http://example.com/page#top", "http://example.com/page/"),
        ("  http://example.com/x/  ", "http://example.com/x/"),
    ],
)
def test_normalize_values(url, expected):
    assert normalize_url(url) == expected


def test_remove_duplicates_keeps_order_and_drops_empty():
    items = ["b", "", "a", "b", "c", "a", ""]
    once = remove_duplicates(items)
    assert once == ["b", "a", "c"]
    assert remove_duplicates(once) == once


@pytest.mark.parametrize(
    "url,valid",
    [
        ("https://example.com/x", True),
        ("http://127.0.0.1:8080/", True),
        ("", False),
        ("not a url", False),
        ("/relative/path", False),
        ("ftp://example.com/file", False),
        ("http://", False),
        ("http://host:abc/", False),
        ("http://[oops/x", False),
        ("mailto:me@example.com", False),
    ],
)
def test_is_valid_url(url, valid):
    assert is_valid_url(url) is valid


def test_host_helpers():
    assert host_filename("localhost:8080", ".json") == "localhost_8080.json"
    assert host_filename("example.com") == "example.com"
    assert strip_query_and_fragment("http://a.com/p?q=1#f") == "http://a.com/p"
