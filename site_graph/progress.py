# File: site_graph/progress.py
"""site_graph.progress: Side channel reporting crawl progress to an optional observer."""

from __future__ import annotations

from typing import Callable, Optional

from site_graph.crawler.models import CrawlProgress, CrawlStatus
from site_graph.logger import get_logger

logger = get_logger("progress")

ProgressCallback = Callable[[CrawlProgress], None]


class ProgressReporter:
    """Calls *callback* with :class:`CrawlProgress` snapshots.

    Observer failures are logged and never interrupt the crawl.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None, total: int = 0) -> None:
        self.callback = callback
        self.total = total
        self.last: Optional[CrawlProgress] = None

    def emit(self, status: CrawlStatus, current: int, current_url: str = "", total: Optional[int] = None) -> None:
        progress = CrawlProgress(
            current=current,
            total=self.total if total is None else total,
            current_url=current_url,
            status=status,
        )
        self.last = progress
        if self.callback is None:
            return
        try:
            self.callback(progress)
        except Exception:
            logger.exception("Progress callback failed for %s", current_url or "<run>")

    def crawling(self, current: int, url: str) -> None:
        self.emit(CrawlStatus.CRAWLING, current, url)

    def completed(self, pages: int) -> None:
        self.emit(CrawlStatus.COMPLETED, pages, "", total=pages)

    def failed(self, current: int, url: str = "") -> None:
        self.emit(CrawlStatus.ERROR, current, url)
