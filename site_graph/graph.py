# File: site_graph/graph.py
"""site_graph.graph: Internal link graph built from the pages of a finished crawl.

The graph is computed once, after traversal, by folding over every page's
anchors; nothing in here is updated during the crawl.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from site_graph.crawler.link_classifier import is_internal
from site_graph.crawler.models import CrawledPage
from site_graph.logger import get_logger
from site_graph.utils import extract_host

logger = get_logger("graph")

INTERNAL = "internal"
EXTERNAL = "external"


@dataclass(frozen=True, slots=True)
class LinkEdge:
    source: str
    target: str
    anchor_text: str
    type: str


@dataclass(frozen=True, slots=True)
class LinkNode:
    url: str
    title: str
    depth: int
    incoming_links: int
    outgoing_links: int
    is_orphan: bool
    page_type: str
    status_code: int


@dataclass(frozen=True, slots=True)
class LinkGraph:
    seed_url: str
    nodes: Tuple[LinkNode, ...] = ()
    edges: Tuple[LinkEdge, ...] = ()
    orphan_pages: Tuple[str, ...] = ()
    # referenced internal URLs that were never crawled, with their incoming counts
    uncrawled_targets: Dict[str, int] = field(default_factory=dict)

    def node(self, url: str) -> Optional[LinkNode]:
        for n in self.nodes:
            if n.url == url:
                return n
        return None

    @property
    def internal_edges(self) -> List[LinkEdge]:
        return [e for e in self.edges if e.type == INTERNAL]

    @property
    def external_edges(self) -> List[LinkEdge]:
        return [e for e in self.edges if e.type == EXTERNAL]

    def to_dict(self) -> dict:
        return {
            "seed_url": self.seed_url,
            "nodes": [
                {
                    "url": n.url,
                    "title": n.title,
                    "depth": n.depth,
                    "incoming_links": n.incoming_links,
                    "outgoing_links": n.outgoing_links,
                    "is_orphan": n.is_orphan,
                    "page_type": n.page_type,
                    "status_code": n.status_code,
                }
                for n in self.nodes
            ],
            "edges": [
                {"source": e.source, "target": e.target, "anchor_text": e.anchor_text, "type": e.type}
                for e in self.edges
            ],
            "orphan_pages": list(self.orphan_pages),
            "uncrawled_targets": dict(self.uncrawled_targets),
        }


def classify_page_type(url: str) -> str:
    """Rough page category guessed from the URL path."""
    lowered = url.lower()
    path = urlsplit(lowered).path
    if "/blog/" in lowered or "/article/" in lowered:
        return "blog"
    if "/product/" in lowered or "/shop/" in lowered:
        return "product"
    if "/category/" in lowered:
        return "category"
    if "/about" in lowered or "/contact" in lowered:
        return "information"
    if path in ("", "/"):
        return "homepage"
    return "page"


def _seed_of(pages: Sequence[CrawledPage]) -> str:
    for page in pages:
        if page.parent_url is None:
            return page.url
    return pages[0].url if pages else ""


def build_graph(pages: Sequence[CrawledPage], seed_url: Optional[str] = None) -> LinkGraph:
    """Fold crawled pages into nodes, edges and orphan flags.

    One edge is emitted per distinct (source, target) pair, carrying the
    first anchor text seen; self-links are ignored. Links to a URL that
    redirected during the crawl are credited to the page it landed on.
    Internal edges to pages that were never crawled still count and are
    listed in ``uncrawled_targets``.
    """
    seed = seed_url if seed_url is not None else _seed_of(pages)
    site_host = extract_host(seed)

    crawled: Dict[str, CrawledPage] = {}
    for page in pages:
        crawled.setdefault(page.url, page)
    aliases = {p.requested_url: p.url for p in pages if p.requested_url != p.url}
    # a seed that redirected is identified by the page it landed on
    seed = aliases.get(seed, seed)

    incoming: Dict[str, int] = {}
    outgoing: Dict[str, int] = {url: 0 for url in crawled}
    edges: List[LinkEdge] = []
    seen_pairs: set[Tuple[str, str]] = set()

    for page in crawled.values():
        for href, text in page.anchors:
            target = aliases.get(href, href)
            if target == page.url or (page.url, target) in seen_pairs:
                continue
            seen_pairs.add((page.url, target))
            internal = is_internal(target, site_host)
            edges.append(LinkEdge(page.url, target, text, INTERNAL if internal else EXTERNAL))
            if internal:
                incoming[target] = incoming.get(target, 0) + 1
                outgoing[page.url] += 1

    nodes: List[LinkNode] = []
    orphans: List[str] = []
    for url, page in crawled.items():
        count = incoming.get(url, 0)
        orphan = count == 0 and url != seed
        if orphan:
            orphans.append(url)
        nodes.append(
            LinkNode(
                url=url,
                title=page.title,
                depth=page.depth,
                incoming_links=count,
                outgoing_links=outgoing[url],
                is_orphan=orphan,
                page_type=classify_page_type(url),
                status_code=page.status_code,
            )
        )

    uncrawled = {url: n for url, n in incoming.items() if url not in crawled}
    logger.debug(
        "Graph: %d nodes, %d edges, %d orphans, %d uncrawled targets",
        len(nodes), len(edges), len(orphans), len(uncrawled),
    )
    return LinkGraph(
        seed_url=seed,
        nodes=tuple(nodes),
        edges=tuple(edges),
        orphan_pages=tuple(orphans),
        uncrawled_targets=uncrawled,
    )


@dataclass(frozen=True, slots=True)
class GraphStats:
    total_pages: int
    total_links: int
    avg_links_per_page: float
    max_depth: int


def graph_stats(graph: LinkGraph) -> GraphStats:
    total_pages = len(graph.nodes)
    total_links = len(graph.internal_edges)
    avg = round(total_links / total_pages, 1) if total_pages else 0.0
    return GraphStats(
        total_pages=total_pages,
        total_links=total_links,
        avg_links_per_page=avg,
        max_depth=max((n.depth for n in graph.nodes), default=0),
    )


@dataclass(slots=True)
class LinkDistribution:
    well_linked: List[LinkNode] = field(default_factory=list)
    under_linked: List[LinkNode] = field(default_factory=list)
    over_linked: List[LinkNode] = field(default_factory=list)
    hubs: List[LinkNode] = field(default_factory=list)
    authorities: List[LinkNode] = field(default_factory=list)


def analyze_link_distribution(nodes: Iterable[LinkNode]) -> LinkDistribution:
    """Bucket nodes relative to the average incoming/outgoing link counts."""
    nodes = list(nodes)
    if not nodes:
        return LinkDistribution()
    avg_in = sum(n.incoming_links for n in nodes) / len(nodes)
    avg_out = sum(n.outgoing_links for n in nodes) / len(nodes)
    return LinkDistribution(
        well_linked=[
            n
            for n in nodes
            if n.incoming_links >= avg_in * 0.5 and avg_out * 0.5 <= n.outgoing_links <= avg_out * 2
        ],
        under_linked=[n for n in nodes if n.incoming_links < avg_in * 0.3],
        over_linked=[n for n in nodes if n.outgoing_links > avg_out * 3],
        hubs=[n for n in nodes if n.outgoing_links > avg_out * 2],
        authorities=[n for n in nodes if n.incoming_links > avg_in * 2],
    )


@dataclass(frozen=True, slots=True)
class LinkSuggestion:
    from_page: str
    to_page: str
    reason: str
    priority: str


def suggest_internal_links(nodes: Iterable[LinkNode], limit: int = 10) -> List[LinkSuggestion]:
    """Propose links towards orphan and under-linked pages."""
    nodes = list(nodes)
    suggestions: List[LinkSuggestion] = []

    for orphan in (n for n in nodes if n.is_orphan):
        donor = next(
            (n for n in nodes if n.page_type == orphan.page_type and n.url != orphan.url and not n.is_orphan),
            None,
        )
        if donor is not None:
            suggestions.append(
                LinkSuggestion(
                    from_page=donor.url,
                    to_page=orphan.url,
                    reason=f"Link to orphan page from similar {orphan.page_type} page",
                    priority="high",
                )
            )

    for page in nodes:
        if page.incoming_links >= 2 or page.is_orphan or page.page_type == "homepage":
            continue
        hub = next((n for n in nodes if n.outgoing_links > 5 and n.url != page.url), None)
        if hub is not None:
            suggestions.append(
                LinkSuggestion(
                    from_page=hub.url,
                    to_page=page.url,
                    reason=f"Increase visibility of under-linked {page.page_type}",
                    priority="medium",
                )
            )

    return suggestions[:limit]
