# File: tests/test_engine.py
"""End-to-end crawl through the aiohttp fetcher against a local test site."""
from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web
from conftest import FakeFetcher, serve_app
from site_graph.config import CrawlConfig
from site_graph.engine import Engine, start_crawl

#: number of leaf pages linked from the root of the large site
STRESS_PAGES: int = 40


@pytest_asyncio.fixture
async def test_site(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    async def handle_root(_):
        return web.Response(
            text=(
                "<html><head><title>Home</title></head><body>"
                '<a href="/page1">Page1</a><a href="/old">Old</a><a href="/missing">Broken</a>'
                '<a href="https://external.example/">Out</a></body></html>'
            ),
            content_type="text/html",
        )

    async def handle_page1(_):
        return web.Response(text='<h1>Page1</h1><a href="/page2">Page2</a><a href="/">Home</a>', content_type="text/html")

    async def handle_page2(_):
        return web.Response(text='<h1>Page2</h1><a href="/page3">Page3</a>', content_type="text/html")

    async def handle_page3(_):
        return web.Response(text="<h1>Page3</h1>", content_type="text/html")

    async def handle_old(_):
        raise web.HTTPFound(location="/new/")

    async def handle_new(_):
        return web.Response(text="<h1>New</h1>", content_type="text/html")

    async def handle_robots(_):
        return web.Response(text="User-agent: *\nDisallow:", content_type="text/plain")

    app.router.add_get("/", handle_root)
    app.router.add_get("/page1", handle_page1)
    app.router.add_get("/page2", handle_page2)
    app.router.add_get("/page3", handle_page3)
    app.router.add_get("/old", handle_old)
    app.router.add_get("/new/", handle_new)
    app.router.add_get("/robots.txt", handle_robots)

    async for url in serve_app(app, unused_tcp_port):
        yield url


@pytest.mark.asyncio()
async def test_full_crawl(test_site: str):
    cfg = CrawlConfig(start_url=test_site, max_pages=20, max_depth=2, timeout=5.0, rate_limit=100.0)
    report = await start_crawl(cfg)
    result = report.result
    urls = {p.url for p in result.pages}

    assert urls == {
        f"{test_site}/",
        f"{test_site}/page1",
        f"{test_site}/new",
        f"{test_site}/missing",
        f"{test_site}/page2",
    }
    assert f"{test_site}/page3" not in urls
    assert result.robots_found
    assert not result.sitemap_found

    assert result.page(f"{test_site}/missing").status_code == 404
    assert result.page(f"{test_site}/new").requested_url == f"{test_site}/old"
    assert report.summary.failed_pages == 1
    assert report.summary.redirected_pages == 1
    assert [p.url for p in report.broken_pages] == [f"{test_site}/missing"]
    assert report.result.pages[0].broken_links[0].url == f"{test_site}/missing"
    assert report.summary.total_broken_links == 1

    graph = report.graph
    assert graph.node(f"{test_site}/new").incoming_links == 1
    assert graph.node(f"{test_site}/").incoming_links == 1
    assert graph.uncrawled_targets == {f"{test_site}/page3": 1}
    assert graph.orphan_pages == ()


@pytest.mark.asyncio()
@pytest.mark.slow()
async def test_concurrent_crawl_respects_limits(unused_tcp_port: int):
    app = web.Application()
    links = "".join(f'<a href="/page{i}">Page{i}</a>' for i in range(1, STRESS_PAGES + 1))

    async def handle_root(_):
        return web.Response(text=links, content_type="text/html")

    async def handle_page(_):
        return web.Response(text=f"<h1>Page</h1>{links}", content_type="text/html")

    app.router.add_get("/", handle_root)
    for i in range(1, STRESS_PAGES + 1):
        app.router.add_get(f"/page{i}", handle_page)

    async for base in serve_app(app, unused_tcp_port):
        cfg = CrawlConfig(
            start_url=base,
            max_pages=25,
            max_depth=3,
            max_links_per_page=STRESS_PAGES,
            concurrency=8,
            timeout=5.0,
            rate_limit=500.0,
        )
        report = await start_crawl(cfg)

    pages = report.result.pages
    assert len(pages) == 25
    assert len({p.url for p in pages}) == 25
    assert max(p.depth for p in pages) <= 3


def test_engine_runs_synchronously():
    site = {"https://ex.com/": '<a href="/a">a</a>', "https://ex.com/a": "<h1>A</h1>"}
    engine = Engine(CrawlConfig(start_url="https://ex.com", max_depth=1), fetcher=FakeFetcher(site))
    report = engine.start()
    assert report.summary.total_pages == 2
    assert report.result.start_url == "https://ex.com/"
