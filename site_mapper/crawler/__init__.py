"""Crawl engine: robots.txt policy, page fetcher, frontier and scheduler."""

from site_mapper.crawler.fetcher import PageFetcher
from site_mapper.crawler.frontier import Frontier
from site_mapper.crawler.models import PageRecord, ResultSet, RobotsRuleSet
from site_mapper.crawler.robots import RobotsPolicy, is_allowed, parse_robots_text
from site_mapper.crawler.scheduler import CrawlScheduler, CrawlState

__all__ = [
    "CrawlScheduler",
    "CrawlState",
    "Frontier",
    "PageFetcher",
    "PageRecord",
    "ResultSet",
    "RobotsPolicy",
    "RobotsRuleSet",
    "is_allowed",
    "parse_robots_text",
]
