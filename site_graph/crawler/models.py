# site_graph/crawler/models.py
"""
Data models for the SiteGraph crawler.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple


HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class FetchResult:
    """What the page fetcher returns for a completed HTTP exchange (any status)."""

    html: str
    final_url: str
    status: int
    load_time_ms: float
    redirected: bool = False
    # media type without parameters; "" when the server sent none
    content_type: str = "text/html"

    @property
    def is_html(self) -> bool:
        return not self.content_type or self.content_type in HTML_CONTENT_TYPES


@dataclass(frozen=True, slots=True)
class FrontierEntry:
    """A pending visit: normalized URL, distance from the seed and the page that linked to it."""

    url: str
    depth: int
    parent_url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class BrokenLink:
    """An internal link whose target answered >= 400 or could not be fetched (status 0)."""

    url: str
    status: int
    error: str = ""


@dataclass(frozen=True, slots=True)
class CrawledPage:
    """One fetched and parsed page. Created once per normalized URL and never modified."""

    url: str
    requested_url: str
    title: str
    status_code: int
    depth: int
    parent_url: Optional[str]
    outgoing_links: Tuple[str, ...] = ()
    anchors: Tuple[Tuple[str, str], ...] = ()
    internal_link_count: int = 0
    external_link_count: int = 0
    image_count: int = 0
    h1_count: int = 0
    h2_count: int = 0
    meta_description: str = ""
    word_count: int = 0
    issues: Tuple[str, ...] = ()
    load_time_ms: float = 0.0
    redirected: bool = False
    content_type: str = "text/html"
    nofollow_links: Tuple[str, ...] = ()
    broken_links: Tuple[BrokenLink, ...] = ()
    crawled_at: datetime = field(default_factory=_utcnow)

    @property
    def is_redirected(self) -> bool:
        return self.redirected or 300 <= self.status_code < 400 or self.url != self.requested_url

    @property
    def link_density(self) -> float:
        """Links per 100 words of visible text."""
        if not self.word_count:
            return 0.0
        return round(len(self.outgoing_links) / self.word_count * 100, 2)

    @property
    def is_broken(self) -> bool:
        return self.status_code >= 400

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["outgoing_links"] = list(self.outgoing_links)
        data["anchors"] = [{"href": href, "text": text} for href, text in self.anchors]
        data["issues"] = list(self.issues)
        data["nofollow_links"] = list(self.nofollow_links)
        data["broken_links"] = [asdict(link) for link in self.broken_links]
        data["link_density"] = self.link_density
        data["crawled_at"] = self.crawled_at.isoformat()
        return data


class CrawlStatus(str, Enum):
    IDLE = "idle"
    CRAWLING = "crawling"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class CrawlProgress:
    """Snapshot sent to a progress observer."""

    current: int
    total: int
    current_url: str
    status: CrawlStatus


@dataclass(frozen=True, slots=True)
class CrawlResult:
    """Terminal output of one crawl run. Pages are in crawl (completion) order."""

    start_url: str
    pages: Tuple[CrawledPage, ...] = ()
    robots_found: bool = False
    robots_content: str = ""
    sitemap_found: bool = False
    sitemap_url: Optional[str] = None
    sitemap_url_count: int = 0
    errors: Tuple[str, ...] = ()
    visited: Tuple[str, ...] = ()
    cancelled: bool = False

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    @property
    def total_links(self) -> int:
        return sum(len(p.outgoing_links) for p in self.pages)

    def page(self, url: str) -> Optional[CrawledPage]:
        """Return the crawled page with the given normalized URL, if any."""
        for p in self.pages:
            if p.url == url:
                return p
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_url": self.start_url,
            "pages": [p.to_dict() for p in self.pages],
            "robots_found": self.robots_found,
            "robots_content": self.robots_content,
            "sitemap_found": self.sitemap_found,
            "sitemap_url": self.sitemap_url,
            "sitemap_url_count": self.sitemap_url_count,
            "total_pages": self.total_pages,
            "total_links": self.total_links,
            "errors": list(self.errors),
            "cancelled": self.cancelled,
        }
