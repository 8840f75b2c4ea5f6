# File: site_graph/engine.py
"""site_graph.engine: Orchestration layer для запуска обхода и построения отчёта."""

from __future__ import annotations

import asyncio
from typing import Optional

from site_graph.aggregator import SiteReport, build_report
from site_graph.config import CrawlConfig, load_config
from site_graph.crawler.crawler import SiteCrawler
from site_graph.crawler.fetcher import AiohttpFetcher, PageFetcher
from site_graph.logger import logger
from site_graph.progress import ProgressCallback

__all__ = ["Engine", "start_crawl"]


async def start_crawl(
    cfg: CrawlConfig,
    *,
    fetcher: Optional[PageFetcher] = None,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> SiteReport:
    """
    Запускает SiteCrawler по конфигурации и возвращает SiteReport.

    Если ``fetcher`` не передан, используется AiohttpFetcher с user_agent и
    rate_limit из конфигурации; сессия закрывается по завершении.
    """
    if fetcher is not None:
        crawler = SiteCrawler.from_config(
            cfg, fetcher, progress_callback=progress_callback, cancel_event=cancel_event
        )
        result = await crawler.crawl()
    else:
        async with AiohttpFetcher(user_agent=cfg.user_agent, rate_limit=cfg.rate_limit) as http:
            crawler = SiteCrawler.from_config(
                cfg, http, progress_callback=progress_callback, cancel_event=cancel_event
            )
            result = await crawler.crawl()
    return build_report(result)


class Engine:
    """Фасад для CLI и тестов: загрузка конфига, запуск обхода и построение отчёта."""

    @staticmethod
    def load_config(path: Optional[str], **overrides) -> CrawlConfig:
        """Загружает конфиг из YAML/JSON."""
        return load_config(path, **overrides)

    def __init__(self, config: CrawlConfig, fetcher: Optional[PageFetcher] = None) -> None:
        """Инициализирует Engine с заданной конфигурацией обхода."""
        self.config = config
        self.fetcher = fetcher

    def start(self, progress_callback: Optional[ProgressCallback] = None) -> SiteReport:
        """Синхронно выполняет обход и возвращает отчёт."""
        logger.info("Starting crawl of %s", self.config.start_url)
        try:
            return asyncio.run(
                start_crawl(self.config, fetcher=self.fetcher, progress_callback=progress_callback)
            )
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
