"""Async fetch client used by every detector."""

import logging
import time
from dataclasses import dataclass

import httpx

from sentinelscan.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "SentinelScan/1.0"


@dataclass(frozen=True)
class FetchResult:
    """One HTTP response as seen by a detector."""

    url: str
    status: int
    headers: httpx.Headers
    body: str
    elapsed_ms: float

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500


class FetchClient:
    """Async HTTP client that reports statuses and raises only on transport failure."""

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        verify_ssl: bool = False,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self.verify_ssl = verify_ssl
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            verify=self.verify_ssl,
            headers={"User-Agent": self.user_agent},
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()
            self.client = None

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        follow_redirects: bool = True,
    ) -> FetchResult:
        """Issue one request; HTTP error statuses are returned, not raised."""
        if not self.client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        start = time.perf_counter()
        try:
            response = await self.client.request(
                method=method,
                url=url,
                headers=headers,
                timeout=timeout if timeout is not None else self.timeout,
                follow_redirects=follow_redirects,
            )
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            elapsed_ms = (time.perf_counter() - start) * 1000
            reason = str(exc) or exc.__class__.__name__
            logger.debug("%s %s failed after %.0fms: %s", method, url, elapsed_ms, reason)
            raise TransportError(
                f"Failed to fetch {method} {url}: {reason}", url=url, elapsed_ms=elapsed_ms
            ) from exc

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug("%s %s -> %s (%.0fms)", method, url, response.status_code, elapsed_ms)
        return FetchResult(
            url=str(response.url),
            status=response.status_code,
            headers=response.headers,
            body=response.text,
            elapsed_ms=elapsed_ms,
        )

    async def get(
        self,
        url: str,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> FetchResult:
        """Make a GET request."""
        return await self.fetch(url, "GET", timeout=timeout, headers=headers)

    async def head(
        self,
        url: str,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> FetchResult:
        """Make a HEAD request."""
        return await self.fetch(url, "HEAD", timeout=timeout, headers=headers)
