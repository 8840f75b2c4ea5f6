# === FILE: site_graph/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from site_graph.config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_LINKS_PER_PAGE,
    DEFAULT_MAX_PAGES,
    DEFAULT_TIMEOUT,
    CrawlConfig,
)
from site_graph.crawler.fetcher import PageFetcher
from site_graph.crawler.frontier import Frontier
from site_graph.crawler.link_checker import LinkChecker, LinkStatus, is_broken_status
from site_graph.crawler.link_classifier import classify_links
from site_graph.crawler.models import BrokenLink, CrawledPage, CrawlResult, FrontierEntry
from site_graph.crawler.probe import ProbeResult, probe_site
from site_graph.errors import FetchError, InvalidSeedError, InvalidUrlError
from site_graph.logger import get_logger
from site_graph.parser.html_parser import PageFacts, parse_html
from site_graph.progress import ProgressCallback, ProgressReporter
from site_graph.utils import extract_host, normalize_url, site_origin, try_normalize

__all__ = ("SiteCrawler", "detect_issues", "THIN_CONTENT_WORDS")

THIN_CONTENT_WORDS = 300


def detect_issues(facts: PageFacts, internal_links: int) -> List[str]:
    """SEO findings for one page, in a fixed order."""
    issues: List[str] = []
    if not facts.title:
        issues.append("Missing title")
    if not facts.meta_description:
        issues.append("Missing meta description")
    if facts.h1_count == 0:
        issues.append("No H1 tag")
    elif facts.h1_count > 1:
        issues.append("Multiple H1 tags")
    if facts.word_count < THIN_CONTENT_WORDS:
        issues.append("Thin content")
    if internal_links == 0:
        issues.append("No internal links")
    return issues


class SiteCrawler:
    """Bounded breadth-first crawler over a single host.

    Each instance owns the state of one run (frontier, visited set, pages,
    errors). ``concurrency`` workers share the frontier; with the default of
    one worker pages are visited strictly in breadth-first order.
    """

    def __init__(
        self,
        start_url: str,
        fetcher: PageFetcher,
        *,
        max_pages: int = DEFAULT_MAX_PAGES,
        max_depth: int = DEFAULT_MAX_DEPTH,
        timeout: float = DEFAULT_TIMEOUT,
        max_links_per_page: int = DEFAULT_MAX_LINKS_PER_PAGE,
        concurrency: int = 1,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
        probe: bool = True,
        link_check_limit: int = 0,
    ) -> None:
        try:
            self.start_url = normalize_url(start_url)
        except InvalidUrlError as exc:
            raise InvalidSeedError(str(start_url), exc.reason) from exc
        if max_links_per_page < 1:
            raise ValueError("max_links_per_page must be >= 1")
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if link_check_limit < 0:
            raise ValueError("link_check_limit must be >= 0")

        self.fetcher = fetcher
        self.site_host = extract_host(self.start_url)
        self.timeout = timeout
        self.max_links_per_page = max_links_per_page
        self.concurrency = concurrency
        self.probe = probe
        self.link_check_limit = link_check_limit
        self.cancel_event = cancel_event
        self.frontier = Frontier(max_pages=max_pages, max_depth=max_depth)
        self.progress = ProgressReporter(progress_callback, total=max_pages)
        self.pages: List[CrawledPage] = []
        self.errors: List[str] = []
        # status of every URL the crawl requested or landed on
        self._link_status: Dict[str, LinkStatus] = {}
        self.logger = get_logger("crawler")
        self._cond: Optional[asyncio.Condition] = None
        self._started = False

    @classmethod
    def from_config(cls, config: CrawlConfig, fetcher: PageFetcher, **kwargs) -> SiteCrawler:
        return cls(
            str(config.start_url),
            fetcher,
            max_pages=config.max_pages,
            max_depth=config.max_depth,
            timeout=config.timeout,
            max_links_per_page=config.max_links_per_page,
            concurrency=config.concurrency,
            link_check_limit=config.link_check_limit,
            **kwargs,
        )

    @property
    def max_pages(self) -> int:
        return self.frontier.max_pages

    @property
    def max_depth(self) -> int:
        return self.frontier.max_depth

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def cancel(self) -> None:
        """Request a cooperative stop; in-flight fetches are allowed to finish."""
        if self.cancel_event is None:
            self.cancel_event = asyncio.Event()
        self.cancel_event.set()

    # ------------------------------------------------------------------ run

    async def crawl(self) -> CrawlResult:
        """Run the crawl and return its result. A crawler instance runs once."""
        if self._started:
            raise RuntimeError("SiteCrawler.crawl() can only be called once per instance")
        self._started = True
        if self.cancel_event is None:
            self.cancel_event = asyncio.Event()

        self.logger.info(
            "Старт обхода: %s (max_pages=%d, max_depth=%d, concurrency=%d)",
            self.start_url, self.max_pages, self.max_depth, self.concurrency,
        )
        start = time.monotonic()
        self.progress.crawling(0, self.start_url)

        try:
            probe = await self._probe()
            self.frontier.push(FrontierEntry(self.start_url, 0, None))
            await self._run_workers()
            if self.link_check_limit and not self.cancelled:
                await self._check_links()
        except BaseException:
            self.progress.failed(len(self.pages), self.start_url)
            raise

        if self.cancelled:
            self.logger.warning("Обход прерван: %d страниц", len(self.pages))
            self.progress.failed(len(self.pages))
        else:
            self.progress.completed(len(self.pages))

        duration = time.monotonic() - start
        self.logger.info(
            "Завершено: %d страниц за %.2f с, ошибок: %d", len(self.pages), duration, len(self.errors)
        )
        return CrawlResult(
            start_url=self.start_url,
            pages=tuple(self.pages),
            robots_found=probe.robots_found,
            robots_content=probe.robots_content,
            sitemap_found=probe.sitemap_found,
            sitemap_url=probe.sitemap_url,
            sitemap_url_count=probe.sitemap_url_count,
            errors=tuple(self.errors),
            visited=self.frontier.visited,
            cancelled=self.cancelled,
        )

    async def _probe(self) -> ProbeResult:
        if not self.probe or self.cancelled:
            return ProbeResult()
        return await probe_site(site_origin(self.start_url), self.fetcher, self.timeout)

    async def _run_workers(self) -> None:
        self._cond = asyncio.Condition()
        workers = [asyncio.create_task(self._worker(i)) for i in range(self.concurrency)]
        watcher = asyncio.create_task(self._watch_cancel())
        try:
            await asyncio.gather(*workers)
        finally:
            watcher.cancel()
            for w in workers:
                w.cancel()
            await asyncio.gather(watcher, *workers, return_exceptions=True)

    async def _watch_cancel(self) -> None:
        assert self.cancel_event is not None and self._cond is not None
        await self.cancel_event.wait()
        async with self._cond:
            self._cond.notify_all()

    async def _next_entry(self) -> Optional[FrontierEntry]:
        """Block until an entry is available; None when the crawl is over for this worker."""
        assert self._cond is not None
        async with self._cond:
            while True:
                if self.cancelled:
                    return None
                entry = self.frontier.pop()
                if entry is not None:
                    return entry
                if self.frontier.in_flight == 0:
                    # nothing queued (or budget spent) and nobody can add more
                    self._cond.notify_all()
                    return None
                await self._cond.wait()

    async def _worker(self, worker_id: int) -> None:
        assert self._cond is not None
        while True:
            entry = await self._next_entry()
            if entry is None:
                self.logger.debug("Worker %d finished", worker_id)
                return
            try:
                await self._visit(entry)
            finally:
                async with self._cond:
                    self._cond.notify_all()

    # ---------------------------------------------------------------- pages

    async def _visit(self, entry: FrontierEntry) -> None:
        self.progress.crawling(len(self.pages), entry.url)
        try:
            fetched = await self.fetcher.fetch(entry.url, self.timeout)
        except FetchError as exc:
            self.frontier.release()
            self._link_status[entry.url] = (0, str(exc))
            message = f"Error crawling {entry.url}: {exc}"
            self.errors.append(message)
            self.logger.warning("%s", message)
            return

        page_url = try_normalize(fetched.final_url) or entry.url
        self._link_status[entry.url] = self._link_status[page_url] = (fetched.status, "")
        if fetched.is_html:
            facts = parse_html(fetched.html, page_url)
        else:
            self.logger.debug("%s is %s, not parsed", page_url, fetched.content_type)
            facts = PageFacts()
        links = classify_links(facts.links, self.site_host)

        if not self.frontier.commit(page_url):
            self.logger.debug("%s redirected to already crawled %s", entry.url, page_url)
            return

        page = CrawledPage(
            url=page_url,
            requested_url=entry.url,
            title=facts.title,
            status_code=fetched.status,
            depth=entry.depth,
            parent_url=entry.parent_url,
            outgoing_links=tuple(facts.links),
            anchors=tuple(facts.anchors),
            internal_link_count=len(links.internal),
            external_link_count=len(links.external),
            image_count=facts.image_count,
            h1_count=facts.h1_count,
            h2_count=facts.h2_count,
            meta_description=facts.meta_description,
            word_count=facts.word_count,
            # SEO findings only make sense for HTML documents
            issues=tuple(detect_issues(facts, len(links.internal))) if fetched.is_html else (),
            load_time_ms=fetched.load_time_ms,
            redirected=fetched.redirected,
            content_type=fetched.content_type,
            nofollow_links=tuple(facts.nofollow),
        )
        self.pages.append(page)
        self.logger.debug("Crawled %s [%s] depth=%d", page.url, page.status_code, page.depth)

        if entry.depth < self.max_depth and not self.frontier.exhausted:
            self._enqueue_children(page, links.internal)

    def _enqueue_children(self, page: CrawledPage, internal: Sequence[str]) -> None:
        children = (
            FrontierEntry(link, page.depth + 1, page.url)
            for link in internal[: self.max_links_per_page]
            if not self.frontier.is_visited(link)
        )
        added = self.frontier.extend(children)
        if added:
            self.logger.debug("Queued %d links from %s", added, page.url)

    # ---------------------------------------------------------- link check

    def _link_targets(self, page: CrawledPage) -> List[str]:
        """The first ``link_check_limit`` internal links of *page*, self-links excluded."""
        internal = classify_links(page.outgoing_links, self.site_host).internal
        own = (page.url, page.requested_url)
        return [url for url in internal if url not in own][: self.link_check_limit]

    async def _check_links(self) -> None:
        """Attach ``broken_links`` to every page; targets the crawl never requested are fetched once."""
        targets = {page.url: self._link_targets(page) for page in self.pages}
        unknown = [url for links in targets.values() for url in links if url not in self._link_status]
        checker = LinkChecker(self.fetcher, self.timeout, self.concurrency)
        self._link_status.update(await checker.run(unknown))

        checked: List[CrawledPage] = []
        for page in self.pages:
            broken = tuple(
                BrokenLink(url, *self._link_status[url])
                for url in targets[page.url]
                if is_broken_status(self._link_status[url][0])
            )
            checked.append(replace(page, broken_links=broken) if broken else page)
        self.pages = checked
        self.logger.info(
            "Битых ссылок: %d (проверено новых URL: %d)",
            sum(len(p.broken_links) for p in self.pages),
            len(set(unknown)),
        )
