# File: site_graph/utils.py
"""site_graph.utils: URL normalisation and small helpers shared by the crawler and graph builder."""

from __future__ import annotations

from typing import Collection, List, Optional, Sequence
from urllib.parse import urljoin, urlsplit, urlunsplit

from site_graph.errors import InvalidUrlError
from site_graph.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "try_normalize",
    "extract_host",
    "site_origin",
    "remove_duplicates",
)

_ALLOWED_SCHEMES = ("http", "https")


def normalize_url(raw: str, base: Optional[str] = None) -> str:
    """Canonicalise *raw* (resolved against *base* when relative).

    The fragment is dropped, trailing slashes are stripped from the path
    (the root ``/`` is kept), the query string is kept verbatim and only the
    host is lower-cased. Raises :class:`InvalidUrlError` for anything that is
    not an absolute http(s) URL.
    """
    if not isinstance(raw, str):
        raise InvalidUrlError(str(raw), "not a string")
    candidate = raw.strip()
    if not candidate and base is None:
        raise InvalidUrlError(raw, "empty URL")

    try:
        absolute = urljoin(base, candidate) if base else candidate
        parts = urlsplit(absolute)
        # accessing .port validates the numeric port
        parts.port
    except ValueError as exc:
        raise InvalidUrlError(raw, str(exc)) from exc

    scheme = parts.scheme.lower()
    if scheme not in _ALLOWED_SCHEMES:
        raise InvalidUrlError(raw, f"unsupported scheme {scheme or '<none>'!r}")
    if not parts.hostname:
        raise InvalidUrlError(raw, "missing host")
    _check_host(raw, parts.hostname)

    netloc = _lower_host(parts.netloc)
    # "/a//" must not become "/a/" or normalisation would not be idempotent
    path = parts.path.rstrip("/") or "/"

    return urlunsplit((scheme, netloc, path, parts.query, ""))


def try_normalize(raw: str, base: Optional[str] = None) -> Optional[str]:
    """Like :func:`normalize_url` but returns ``None`` for invalid input."""
    try:
        return normalize_url(raw, base)
    except InvalidUrlError as exc:
        logger.debug("Dropped URL %r: %s", raw, exc.reason)
        return None


def _check_host(raw: str, hostname: str) -> None:
    """Reject hosts that cannot be put on the wire (empty or over-long labels)."""
    if hostname.startswith("[") or ":" in hostname:
        # IPv6 literal, already validated by urlsplit
        return
    labels = hostname.rstrip(".").split(".")
    if any(not label for label in labels):
        raise InvalidUrlError(raw, f"empty label in host {hostname!r}")
    try:
        hostname.encode("idna")
    except UnicodeError as exc:
        raise InvalidUrlError(raw, f"invalid host {hostname!r}: {exc}") from exc


def _lower_host(netloc: str) -> str:
    """Lower-case the host portion of *netloc*, leaving userinfo untouched."""
    userinfo, sep, hostport = netloc.rpartition("@")
    return f"{userinfo}{sep}{hostport.lower()}"


def extract_host(url: str) -> str:
    """Return the lower-cased host of a URL (without port or userinfo)."""
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def site_origin(url: str) -> str:
    """Return ``scheme://host[:port]`` for *url*."""
    parts = urlsplit(normalize_url(url))
    hostport = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{hostport}"


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
