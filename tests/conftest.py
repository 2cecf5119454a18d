# File: tests/conftest.py
import time
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import web

from site_mapper.config import CrawlerConfig

#: body of a route: HTML text, a bare status code, or a custom aiohttp handler
RouteBody = Union[str, int, Callable[[web.Request], Awaitable[web.StreamResponse]]]

ALLOW_ALL = "User-agent: *\nDisallow:\nCrawl-delay: 0"


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


@pytest.fixture()
def site_app():
    """
    Build an aiohttp application serving ``pages`` (path -> body) and ``robots``.
    Returns ``(app, hits)``; ``hits`` collects ``(path, monotonic time)`` per request.
    ``robots=None`` leaves /robots.txt unrouted (404).
    """

    def _build(
        pages: Dict[str, RouteBody], robots: Optional[str] = ALLOW_ALL
    ) -> Tuple[web.Application, List[Tuple[str, float]]]:
        app = web.Application()
        hits: List[Tuple[str, float]] = []

        def make_handler(body: RouteBody):
            async def handle(request: web.Request) -> web.StreamResponse:
                hits.append((request.path, time.monotonic()))
                if isinstance(body, int):
                    return web.Response(status=body)
                if callable(body):
                    return await body(request)
                return web.Response(text=body, content_type="text/html")

            return handle

        for path, body in pages.items():
            app.router.add_get(path, make_handler(body))
        if robots is not None:
            async def handle_robots(request: web.Request) -> web.Response:
                hits.append((request.path, time.monotonic()))
                return web.Response(text=robots, content_type="text/plain")

            app.router.add_get("/robots.txt", handle_robots)
        return app, hits

    return _build


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory):
    """Start applications on free ports; yields ``serve(app) -> base URL``."""
    runners: List[web.AppRunner] = []

    async def _serve(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    yield _serve
    for runner in runners:
        await runner.cleanup()


@pytest.fixture()
def make_config(tmp_path: Path):
    """Fast CrawlerConfig for tests: files go to tmp_path, no retries."""

    def _make(site_url: str, **overrides) -> CrawlerConfig:
        values = dict(
            site_url=site_url,
            timeout=2.0,
            rate_limit=100.0,
            retry_times=0,
            retry_backoff=0.0,
            default_crawl_delay=0,
            robots_dir=tmp_path / "robots",
            output_dir=tmp_path / "out",
        )
        values.update(overrides)
        return CrawlerConfig(**values)

    return _make
