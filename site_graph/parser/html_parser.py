# === FILE: site_graph/parser/html_parser.py ===
"""HTML parsing utilities for SiteGraph.

:func:`parse_html` turns raw markup into :class:`PageFacts`, the structural
facts the crawler records for every page:

* title: first ``<title>`` text or ``""`` if absent.
* meta description, heading counts per level and image count.
* word count of the visible text (``<script>``, ``<style>`` etc. removed).
* links: every ``<a href>`` resolved to an absolute URL, in document order,
  fragment removed, *not* deduplicated and not yet classified.
* nofollow: the subset of links marked ``rel="nofollow"``.

Parsing is pure and never raises on malformed markup. Markup rejected by
``html.parser`` is retried with lxml; whatever cannot be found is reported
with an empty default.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag

from site_graph.logger import get_logger
from site_graph.utils import try_normalize

logger = get_logger("parser")

__all__: Sequence[str] = ("PageFacts", "parse_html")

_INVISIBLE_TAGS = ("script", "style", "noscript", "template")
_HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")


@dataclass(slots=True)
class PageFacts:
    """Facts extracted from one HTML document."""

    title: str = ""
    meta_description: str = ""
    headings: Dict[str, int] = field(default_factory=dict)
    image_count: int = 0
    word_count: int = 0
    links: List[str] = field(default_factory=list)
    anchors: List[Tuple[str, str]] = field(default_factory=list)
    # hrefs of links marked rel="nofollow", in document order
    nofollow: List[str] = field(default_factory=list)

    @property
    def h1_count(self) -> int:
        return self.headings.get("h1", 0)

    @property
    def h2_count(self) -> int:
        return self.headings.get("h2", 0)


def _meta_description(soup: BeautifulSoup) -> str:
    for tag in soup.find_all("meta"):
        if not isinstance(tag, Tag):
            continue
        name = tag.get("name")
        if isinstance(name, str) and name.strip().lower() == "description":
            content = tag.get("content")
            return content.strip() if isinstance(content, str) else ""
    return ""


def _is_nofollow(tag: Tag) -> bool:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return any(value.lower() == "nofollow" for value in rel)


def _links(soup: BeautifulSoup, page_url: str) -> List[Tuple[str, str, bool]]:
    anchors: List[Tuple[str, str, bool]] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        absolute = try_normalize(href_val, page_url)
        if absolute is None:
            continue
        text = " ".join(tag.get_text(" ", strip=True).split())
        anchors.append((absolute, text, _is_nofollow(tag)))
    return anchors


def _make_soup(html: str, page_url: str) -> Optional[BeautifulSoup]:
    """html.parser first, lxml for markup it rejects; None if both give up."""
    for features in ("html.parser", "lxml"):
        try:
            return BeautifulSoup(html, features)
        except ParserRejectedMarkup as exc:
            logger.debug("%s rejected markup of %s: %s", features, page_url, exc)
    logger.warning("Unparseable markup at %s, page recorded without facts", page_url)
    return None


def parse_html(html: str, page_url: str) -> PageFacts:
    """Parse *html* served at *page_url* into :class:`PageFacts`."""
    soup = _make_soup(html or "", page_url)
    if soup is None:
        return PageFacts()

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""

    headings = {name: len(soup.find_all(name)) for name in _HEADING_TAGS}
    image_count = len(soup.find_all("img"))
    description = _meta_description(soup)
    anchors = _links(soup, page_url)

    for element in soup(list(_INVISIBLE_TAGS)):
        element.decompose()
    # the <title> text is not part of the page body
    for element in soup("title"):
        element.decompose()
    word_count = len(soup.get_text(" ").split())

    return PageFacts(
        title=title,
        meta_description=description,
        headings=headings,
        image_count=image_count,
        word_count=word_count,
        links=[href for href, _, _ in anchors],
        anchors=[(href, text) for href, text, _ in anchors],
        nofollow=[href for href, _, nofollow in anchors if nofollow],
    )
