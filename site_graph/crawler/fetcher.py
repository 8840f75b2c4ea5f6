# site_graph/crawler/fetcher.py
"""
Fetcher module: the page-fetching contract used by the crawler and its
default aiohttp implementation (redirects, per-request timeout, rate limit).
"""
from __future__ import annotations

import asyncio
import time
from typing import Optional, Protocol, runtime_checkable

from aiohttp import (
    ClientConnectionError,
    ClientError,
    ClientPayloadError,
    ClientResponseError,
    ClientSession,
    ClientTimeout,
    InvalidURL,
)

from site_graph.config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from site_graph.crawler.models import FetchResult
from site_graph.errors import FetchError, FetchErrorKind
from site_graph.logger import get_logger

logger = get_logger("fetcher")


def _is_textual(mime: str) -> bool:
    return not mime or mime.startswith("text/") or mime.endswith(("xml", "json"))


@runtime_checkable
class PageFetcher(Protocol):
    """Anything that can GET a URL.

    Implementations follow redirects, report the final URL and never raise
    for HTTP error statuses; only network-level failures raise
    :class:`~site_graph.errors.FetchError`.
    """

    async def fetch(self, url: str, timeout: float) -> FetchResult:
        ...


class AiohttpFetcher:
    """Handles HTTP fetching with a shared session, rate limit and per-request timeout."""

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        rate_limit: Optional[float] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.user_agent = user_agent
        self.rate_limit = rate_limit
        self.session = session
        self._owns_session = session is None
        self._rate_lock = asyncio.Lock()
        self._last_request_ts = 0.0

    async def __aenter__(self) -> AiohttpFetcher:
        if self.session is None:
            self.session = ClientSession(
                headers={"User-Agent": self.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str, timeout: float = DEFAULT_TIMEOUT) -> FetchResult:
        """GET *url*; returns a :class:`FetchResult` for any HTTP status."""
        if self.session is None:
            raise RuntimeError("Session not initialized, use 'async with AiohttpFetcher()'")
        await self._wait_for_rate_limit()
        start = time.perf_counter()
        try:
            async with self.session.get(
                url, timeout=ClientTimeout(total=timeout), allow_redirects=True
            ) as resp:
                mime = resp.content_type if "Content-Type" in resp.headers else ""
                # binary bodies (images, PDF, archives) are not downloaded
                html = await resp.text(errors="replace") if _is_textual(mime) else ""
                logger.debug("GET %s -> %s %s (%s)", url, resp.status, resp.url, mime or "no content type")
                return FetchResult(
                    html=html,
                    final_url=str(resp.url),
                    status=resp.status,
                    load_time_ms=(time.perf_counter() - start) * 1000,
                    redirected=bool(resp.history),
                    content_type=mime,
                )
        except asyncio.TimeoutError as exc:
            raise FetchError(url, FetchErrorKind.TIMEOUT, f"no response within {timeout:g}s") from exc
        except (InvalidURL, ClientPayloadError, ClientResponseError) as exc:
            raise FetchError(url, FetchErrorKind.MALFORMED_RESPONSE, str(exc) or type(exc).__name__) from exc
        except (ClientConnectionError, OSError) as exc:
            raise FetchError(url, FetchErrorKind.CONNECTION_FAILED, str(exc) or type(exc).__name__) from exc
        except (ClientError, LookupError, ValueError) as exc:
            # LookupError: unknown charset announced by the server
            # ValueError: URL the HTTP stack refuses, e.g. a host IDNA cannot encode
            raise FetchError(url, FetchErrorKind.MALFORMED_RESPONSE, str(exc) or type(exc).__name__) from exc

    async def _wait_for_rate_limit(self) -> None:
        if not self.rate_limit:
            return
        interval = 1 / self.rate_limit
        async with self._rate_lock:
            now = time.monotonic()
            wait = interval - (now - self._last_request_ts)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request_ts = time.monotonic()
