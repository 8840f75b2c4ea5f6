# File: site_graph/aggregator.py
"""site_graph.aggregator: Сводная статистика обхода и итоговый отчёт SiteReport."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

from site_graph.crawler.models import CrawledPage, CrawlResult
from site_graph.graph import (
    LinkGraph,
    analyze_link_distribution,
    build_graph,
    graph_stats,
    suggest_internal_links,
)


@dataclass(frozen=True, slots=True)
class CrawlSummary:
    """Агрегированные показатели по всем страницам одного обхода."""

    total_pages: int = 0
    successful_pages: int = 0
    failed_pages: int = 0
    redirected_pages: int = 0
    avg_load_time_ms: float = 0.0
    total_internal_links: int = 0
    total_external_links: int = 0
    total_issues: int = 0
    pages_with_issues: int = 0
    total_broken_links: int = 0
    total_nofollow_links: int = 0
    avg_link_density: float = 0.0


def summarize(pages: Sequence[CrawledPage], errors: Sequence[str] = ()) -> CrawlSummary:
    """Чистая свёртка списка страниц (и ошибок загрузки) в CrawlSummary.

    Неудачные страницы: ответы со статусом >= 400 плюс каждая ошибка
    загрузки, для которой страница не была создана.
    """
    total = len(pages)
    return CrawlSummary(
        total_pages=total,
        successful_pages=sum(1 for p in pages if 200 <= p.status_code < 300),
        failed_pages=sum(1 for p in pages if p.is_broken) + len(errors),
        redirected_pages=sum(1 for p in pages if p.is_redirected),
        avg_load_time_ms=(sum(p.load_time_ms for p in pages) / total) if total else 0.0,
        total_internal_links=sum(p.internal_link_count for p in pages),
        total_external_links=sum(p.external_link_count for p in pages),
        total_issues=sum(len(p.issues) for p in pages),
        pages_with_issues=sum(1 for p in pages if p.issues),
        total_broken_links=sum(len(p.broken_links) for p in pages),
        total_nofollow_links=sum(len(p.nofollow_links) for p in pages),
        avg_link_density=round(sum(p.link_density for p in pages) / total, 2) if total else 0.0,
    )


@dataclass(slots=True)
class SiteReport:
    """Результат обхода сайта вместе со сводкой и графом ссылок."""

    result: CrawlResult
    summary: CrawlSummary
    graph: LinkGraph

    @property
    def broken_pages(self) -> List[CrawledPage]:
        return [p for p in self.result.pages if p.is_broken]

    @property
    def redirected_pages(self) -> List[CrawledPage]:
        return [p for p in self.result.pages if p.is_redirected]

    def to_dict(self) -> Dict[str, Any]:
        distribution = analyze_link_distribution(self.graph.nodes)
        return {
            **self.result.to_dict(),
            "summary": asdict(self.summary),
            "graph": self.graph.to_dict(),
            "graph_stats": asdict(graph_stats(self.graph)),
            "link_distribution": {
                name: [n.url for n in getattr(distribution, name)]
                for name in ("well_linked", "under_linked", "over_linked", "hubs", "authorities")
            },
            "suggestions": [asdict(s) for s in suggest_internal_links(self.graph.nodes)],
        }

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def build_report(result: CrawlResult, graph: Optional[LinkGraph] = None) -> SiteReport:
    """Собирает SiteReport из результата обхода."""
    return SiteReport(
        result=result,
        summary=summarize(result.pages, result.errors),
        graph=graph if graph is not None else build_graph(result.pages, result.start_url),
    )
