# site_graph/crawler/probe.py
"""
Site probe: checks whether robots.txt and a sitemap exist at the site root.

Only existence is checked; robots directives are not interpreted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from site_graph.config import DEFAULT_TIMEOUT
from site_graph.crawler.fetcher import PageFetcher
from site_graph.crawler.models import FetchResult
from site_graph.errors import FetchError
from site_graph.logger import get_logger
from site_graph.parser.sitemap_parser import parse_sitemap

logger = get_logger("probe")

SITEMAP_PATHS: Sequence[str] = ("/sitemap.xml", "/sitemap_index.xml")


@dataclass(frozen=True, slots=True)
class ProbeResult:
    robots_found: bool = False
    robots_content: str = ""
    sitemap_found: bool = False
    sitemap_url: Optional[str] = None
    sitemap_url_count: int = 0


async def _get(fetcher: PageFetcher, url: str, timeout: float) -> Optional[FetchResult]:
    """Fetch *url*; None unless the answer is 2xx."""
    try:
        result = await fetcher.fetch(url, timeout)
    except FetchError as exc:
        logger.debug("Probe %s failed: %s", url, exc)
        return None
    if not 200 <= result.status < 300:
        logger.debug("Probe %s -> HTTP %s", url, result.status)
        return None
    return result


async def probe_site(origin: str, fetcher: PageFetcher, timeout: float = DEFAULT_TIMEOUT) -> ProbeResult:
    """Look for ``/robots.txt`` then ``/sitemap.xml`` (falling back to ``/sitemap_index.xml``)."""
    origin = origin.rstrip("/")

    robots = await _get(fetcher, f"{origin}/robots.txt", timeout)

    sitemap: Optional[FetchResult] = None
    sitemap_url: Optional[str] = None
    for path in SITEMAP_PATHS:
        candidate = f"{origin}{path}"
        sitemap = await _get(fetcher, candidate, timeout)
        if sitemap is not None:
            sitemap_url = candidate
            break

    result = ProbeResult(
        robots_found=robots is not None,
        robots_content=robots.html if robots is not None else "",
        sitemap_found=sitemap is not None,
        sitemap_url=sitemap_url,
        sitemap_url_count=len(parse_sitemap(sitemap.html)) if sitemap is not None else 0,
    )
    logger.info(
        "Probe %s: robots.txt %s, sitemap %s",
        origin,
        "found" if result.robots_found else "missing",
        sitemap_url or "missing",
    )
    return result
