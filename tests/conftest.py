# File: tests/conftest.py
import asyncio
from collections.abc import AsyncIterator
from typing import Dict, List, Optional, Union

import pytest
from aiohttp import web
from site_graph.crawler.models import FetchResult
from site_graph.errors import FetchError, FetchErrorKind

SEED = "https://ex.com/"

Response = Union[str, FetchResult, Exception]


def page(*hrefs: str, title: str = "Page", body: str = "") -> str:
    """Build a small HTML document linking to *hrefs*."""
    links = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><head><title>{title}</title></head><body><h1>{title}</h1>{body}{links}</body></html>"


class FakeFetcher:
    """
    In-memory PageFetcher.

    *site* maps absolute URLs to HTML (served with 200), a ready FetchResult,
    or an exception to raise. Unknown URLs answer 404.
    """

    def __init__(self, site: Dict[str, Response], delay: float = 0.0) -> None:
        self.site = site
        self.delay = delay
        self.calls: List[str] = []
        self.active = 0
        self.max_active = 0

    async def fetch(self, url: str, timeout: float) -> FetchResult:
        self.calls.append(url)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            item: Optional[Response] = self.site.get(url)
            if item is None:
                return FetchResult(html="<h1>Not found</h1>", final_url=url, status=404, load_time_ms=1.0)
            if isinstance(item, Exception):
                raise item
            if isinstance(item, FetchResult):
                return item
            return FetchResult(html=item, final_url=url, status=200, load_time_ms=10.0)
        finally:
            self.active -= 1

    def page_calls(self) -> List[str]:
        """Calls excluding the robots.txt / sitemap probe."""
        return [u for u in self.calls if not u.endswith((".txt", ".xml"))]


@pytest.fixture()
def fake_fetcher_factory():
    def factory(site: Dict[str, Response], delay: float = 0.0) -> FakeFetcher:
        return FakeFetcher(site, delay=delay)

    return factory


@pytest.fixture()
def basic_site() -> Dict[str, Response]:
    """Seed linking to /a, /b and an external site."""
    return {
        SEED: page("/a", "/b", "https://other.com"),
        "https://ex.com/a": page(title="A"),
        "https://ex.com/b": page(title="B"),
    }


def timeout_error(url: str) -> FetchError:
    return FetchError(url, FetchErrorKind.TIMEOUT, "no response within 30s")


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()
