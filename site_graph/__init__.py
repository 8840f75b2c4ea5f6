"""
SiteGraph package initializer.
Defines package version and exposes the crawler API.
"""
__version__ = "0.1.0"

from site_graph.aggregator import SiteReport, build_report, summarize
from site_graph.config import CrawlConfig, load_config
from site_graph.crawler.crawler import SiteCrawler
from site_graph.graph import build_graph
from site_graph.utils import normalize_url

__all__ = [
    "__version__",
    "CrawlConfig",
    "SiteCrawler",
    "SiteReport",
    "build_graph",
    "build_report",
    "load_config",
    "normalize_url",
    "summarize",
]
