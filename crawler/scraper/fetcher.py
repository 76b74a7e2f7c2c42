"""Async HTTP page fetcher.

Only transport-level problems (DNS, connect, timeout, too many redirects)
raise.  Any HTTP status, 4xx and 5xx included, is an ordinary result.
"""

from __future__ import annotations

import logging
import time

import httpx

from crawler.scraper.models import FetchResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
MAX_REDIRECTS = 4
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; url-crawler/1.0)"


def _is_html(response: httpx.Response) -> bool:
    """Return ``True`` if the response declares an HTML content type."""
    return "text/html" in response.headers.get("content-type", "").lower()


class PageFetcher:
    """Fetch single pages over HTTP(S).

    Pass a shared :class:`httpx.AsyncClient` to reuse connections across
    fetches; without one, a short-lived client is opened per call.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._max_redirects = max_redirects
        self._headers = {"User-Agent": user_agent}

    @classmethod
    def with_client(
        cls,
        timeout: float = DEFAULT_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> "PageFetcher":
        """Build a fetcher that owns one long-lived client (see :meth:`aclose`)."""
        client = httpx.AsyncClient(
            headers={"User-Agent": user_agent},
            timeout=timeout,
            follow_redirects=True,
            max_redirects=max_redirects,
        )
        return cls(client, timeout, max_redirects, user_agent)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def fetch(self, url: str) -> FetchResult:
        """GET *url* and return a :class:`FetchResult`.

        Raises:
            httpx.RequestError: On DNS, connection, timeout or redirect-limit
                failures.
        """
        start = time.perf_counter()
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(
                    headers=self._headers,
                    timeout=self._timeout,
                    follow_redirects=True,
                    max_redirects=self._max_redirects,
                ) as client:
                    response = await client.get(url)
        except httpx.RequestError as exc:
            elapsed = int((time.perf_counter() - start) * 1000)
            logger.error("Failed to fetch %s after %dms: %s", url, elapsed, exc)
            raise

        duration_ms = int((time.perf_counter() - start) * 1000)
        return FetchResult(
            status_code=response.status_code,
            body=response.text if _is_html(response) else "",
            duration_ms=duration_ms,
            final_url=str(response.url),
        )
