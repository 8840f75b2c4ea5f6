# site_graph/crawler/frontier.py
"""
Frontier: the queue of pending visits, the visited set and the page budget of one crawl run.

All methods are synchronous. Under asyncio they run without yielding to the
event loop, so every check-and-mark below is atomic with respect to the
crawler's workers.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, Optional, Set

from site_graph.crawler.models import FrontierEntry
from site_graph.logger import get_logger

logger = get_logger("frontier")


class Frontier:
    """FIFO frontier with deduplication and hard page/depth ceilings.

    - ``visited`` grows only; a URL is marked the moment it is popped.
    - A popped entry reserves one page slot; the slot is either committed
      (a page was recorded) or released (fetch failed or page was a duplicate).
    - ``pop`` refuses to hand out entries once committed + reserved slots
      reach ``max_pages``, so the page count can never exceed the limit.
    """

    def __init__(self, max_pages: int, max_depth: int) -> None:
        if max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self.max_pages = max_pages
        self.max_depth = max_depth
        self._queue: Deque[FrontierEntry] = deque()
        self._visited: Set[str] = set()
        self._visit_order: list[str] = []
        self._recorded: Set[str] = set()
        self._reserved = 0
        self._committed = 0

    # -- queue ------------------------------------------------------------

    def push(self, entry: FrontierEntry) -> bool:
        """Enqueue *entry* unless it is too deep or already visited."""
        if entry.depth > self.max_depth:
            logger.debug("Not queued (depth %d > %d): %s", entry.depth, self.max_depth, entry.url)
            return False
        if entry.url in self._visited:
            return False
        self._queue.append(entry)
        return True

    def extend(self, entries: Iterable[FrontierEntry]) -> int:
        return sum(1 for e in entries if self.push(e))

    def pop(self) -> Optional[FrontierEntry]:
        """Return the next admissible entry, marking it visited and reserving a page slot.

        Entries that were visited after being queued, or that exceed
        ``max_depth``, are discarded. Returns ``None`` when the queue is empty
        or every page slot is taken.
        """
        if self.budget_left <= 0:
            return None
        while self._queue:
            entry = self._queue.popleft()
            if entry.url in self._visited:
                continue
            if entry.depth > self.max_depth:
                continue
            self.mark_visited(entry.url)
            self._reserved += 1
            return entry
        return None

    # -- visited set ------------------------------------------------------

    def mark_visited(self, url: str) -> bool:
        """Add *url* to the visited set; False if it was already there."""
        if url in self._visited:
            return False
        self._visited.add(url)
        self._visit_order.append(url)
        return True

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    # -- page budget ------------------------------------------------------

    def commit(self, page_url: str) -> bool:
        """Turn a reserved slot into a recorded page.

        Fails (and releases the slot) when a page with *page_url* was already
        recorded, e.g. two URLs redirecting to the same target.
        """
        self._reserved -= 1
        self.mark_visited(page_url)
        if page_url in self._recorded:
            return False
        self._recorded.add(page_url)
        self._committed += 1
        return True

    def release(self) -> None:
        """Give back a reserved slot without recording a page."""
        self._reserved -= 1

    @property
    def budget_left(self) -> int:
        return self.max_pages - self._committed - self._reserved

    @property
    def pages_recorded(self) -> int:
        return self._committed

    @property
    def in_flight(self) -> int:
        return self._reserved

    @property
    def exhausted(self) -> bool:
        return self._committed >= self.max_pages

    @property
    def visited(self) -> tuple[str, ...]:
        return tuple(self._visit_order)

    @property
    def pending(self) -> int:
        return len(self._queue)
