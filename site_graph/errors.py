# File: site_graph/errors.py
"""site_graph.errors: Exception hierarchy of the crawler."""

from __future__ import annotations

from enum import Enum

__all__ = [
    "SiteGraphError",
    "InvalidUrlError",
    "InvalidSeedError",
    "FetchErrorKind",
    "FetchError",
]


class SiteGraphError(Exception):
    """Base class for every error raised by site_graph."""


class InvalidUrlError(SiteGraphError, ValueError):
    """A string could not be parsed as an absolute http(s) URL."""

    def __init__(self, url: str, reason: str = "invalid URL") -> None:
        super().__init__(f"{reason}: {url!r}")
        self.url = url
        self.reason = reason


class InvalidSeedError(SiteGraphError, ValueError):
    """The start URL of a crawl is invalid; the run is aborted before any fetch."""

    def __init__(self, url: str, reason: str = "invalid URL") -> None:
        super().__init__(f"Invalid start URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


class FetchErrorKind(str, Enum):
    TIMEOUT = "timeout"
    CONNECTION_FAILED = "connection_failed"
    MALFORMED_RESPONSE = "malformed_response"


class FetchError(SiteGraphError):
    """Network-level failure of a single fetch. HTTP error statuses are not FetchErrors."""

    def __init__(self, url: str, kind: FetchErrorKind, detail: str = "") -> None:
        message = f"{kind.value}: {detail}" if detail else kind.value
        super().__init__(message)
        self.url = url
        self.kind = kind
        self.detail = detail
