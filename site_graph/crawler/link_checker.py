# site_graph/crawler/link_checker.py
"""
Status check of internal link targets that the crawl itself did not visit
(beyond the fan-out cap, the depth limit or the page budget).
"""
from __future__ import annotations

import asyncio
from typing import Dict, Iterable, Tuple

from site_graph.config import DEFAULT_TIMEOUT
from site_graph.crawler.fetcher import PageFetcher
from site_graph.errors import FetchError
from site_graph.logger import get_logger
from site_graph.utils import remove_duplicates

logger = get_logger("link_checker")

#: (status, error); status 0 means the target could not be fetched at all
LinkStatus = Tuple[int, str]


def is_broken_status(status: int) -> bool:
    return status == 0 or status >= 400


class LinkChecker:
    """Fetches each URL once through a :class:`PageFetcher`, at most ``concurrency`` at a time."""

    def __init__(self, fetcher: PageFetcher, timeout: float = DEFAULT_TIMEOUT, concurrency: int = 1) -> None:
        self.fetcher = fetcher
        self.timeout = timeout
        self.semaphore = asyncio.Semaphore(concurrency)

    async def check(self, url: str) -> LinkStatus:
        async with self.semaphore:
            try:
                result = await self.fetcher.fetch(url, self.timeout)
            except FetchError as exc:
                logger.debug("Link %s unreachable: %s", url, exc)
                return 0, str(exc)
        return result.status, ""

    async def run(self, urls: Iterable[str]) -> Dict[str, LinkStatus]:
        unique = remove_duplicates(list(urls))
        if not unique:
            return {}
        logger.info("Проверка %d непосещённых ссылок", len(unique))
        statuses = await asyncio.gather(*(self.check(url) for url in unique))
        return dict(zip(unique, statuses))

