# site_graph/crawler/link_classifier.py
"""
Split a page's outgoing links into internal and external ones.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from site_graph.utils import extract_host, remove_duplicates, try_normalize


@dataclass(frozen=True, slots=True)
class ClassifiedLinks:
    internal: List[str]
    external: List[str]


def is_internal(url: str, site_host: str) -> bool:
    """True when *url* lives on exactly *site_host* (``blog.example.com`` is not ``example.com``)."""
    return extract_host(url) == site_host.lower()


def classify_links(links: Iterable[str], site_host: str) -> ClassifiedLinks:
    """
    Partition *links* by host.

    Both lists are deduplicated keeping first-occurrence order. Links that
    fail normalization are dropped silently.
    """
    host = site_host.lower()
    internal: List[str] = []
    external: List[str] = []
    for raw in links:
        url = try_normalize(raw)
        if url is None:
            continue
        (internal if extract_host(url) == host else external).append(url)
    return ClassifiedLinks(internal=remove_duplicates(internal), external=remove_duplicates(external))
