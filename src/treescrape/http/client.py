"""Async HTTP client with retry logic."""

from __future__ import annotations

import asyncio
import logging
import random
from types import TracebackType
from typing import Any

import aiohttp

from ..errors import TransportError
from .protocols import HttpResponse

logger = logging.getLogger(__name__)


class AsyncHttpClient:
    """
    aiohttp session wrapper used for both the page fetch and the gate call.

    Transient failures (429/5xx, dropped connections, timeouts) are retried
    with exponential backoff. Bodies are capped at ``max_content_size``.

    Every failure (network error, timeout, HTTP error status once retries are
    exhausted, oversized body) is raised as ``TransportError``. Task
    cancellation is never converted and propagates unchanged.

    Example:
        async with AsyncHttpClient(proxy="http://proxy:8080") as client:
            response = await client.get("https://linktr.ee/alice")
            print(response.content.decode())
    """

    # Status codes that warrant a retry
    RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

    # Exceptions that warrant a retry
    RETRYABLE_EXCEPTIONS = (
        aiohttp.ClientConnectionError,
        aiohttp.ClientPayloadError,
        asyncio.TimeoutError,
        ConnectionError,
    )

    def __init__(
        self,
        max_retries: int = 2,
        retry_base_delay: float = 1.0,
        max_content_size: int = 10 * 1024 * 1024,
        user_agent: str | None = None,
        proxy: str | None = None,
        default_timeout: float = 30.0,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            max_retries: Maximum retry attempts for failed requests
            retry_base_delay: Base delay for exponential backoff (seconds)
            max_content_size: Maximum response size in bytes
            user_agent: Custom User-Agent string
            proxy: Proxy URL (http://)
            default_timeout: Default request timeout in seconds
        """
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._max_content_size = max_content_size
        self._proxy = proxy
        self._default_timeout = default_timeout

        if user_agent is None:
            user_agent = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (treescrape/1.0)"
        self._user_agent = user_agent

        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> AsyncHttpClient:
        """Enter async context and create session."""
        self._session = aiohttp.ClientSession(headers={"User-Agent": self._user_agent})
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _calculate_retry_delay(self, attempt: int) -> float:
        """
        Calculate delay for exponential backoff with jitter.

        Args:
            attempt: Current attempt number (0-indexed)

        Returns:
            Delay in seconds
        """
        delay: float = self._retry_base_delay * (2**attempt)
        jitter: float = random.uniform(0, self._retry_base_delay)
        return delay + jitter

    async def _read_body(self, response: aiohttp.ClientResponse, url: str) -> bytes:
        content_length = response.headers.get("Content-Length")
        if content_length and content_length.isdigit() and int(content_length) > self._max_content_size:
            raise TransportError(f"Content too large: {content_length} bytes", url=url)

        content = b""
        async for chunk in response.content.iter_chunked(8192):
            content += chunk
            if len(content) > self._max_content_size:
                raise TransportError(
                    f"Content size limit exceeded: >{self._max_content_size} bytes",
                    url=url,
                )
        return content

    async def _request(
        self,
        method: str,
        url: str,
        *,
        timeout: float | None,
        headers: dict[str, str] | None,
        json: Any = None,
    ) -> HttpResponse:
        if self._session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        timeout_val = timeout or self._default_timeout
        attempts = self._max_retries + 1

        for attempt in range(attempts):
            try:
                async with self._session.request(
                    method,
                    url,
                    json=json,
                    timeout=aiohttp.ClientTimeout(total=timeout_val),
                    headers=headers,
                    proxy=self._proxy,
                    allow_redirects=True,
                ) as response:
                    if response.status in self.RETRYABLE_STATUS_CODES and attempt < self._max_retries:
                        delay = self._calculate_retry_delay(attempt)
                        logger.warning(
                            f"Got {response.status} for {method} {url}, retrying in {delay:.1f}s "
                            f"(attempt {attempt + 1}/{attempts})"
                        )
                        await asyncio.sleep(delay)
                        continue

                    if response.status >= 400:
                        raise TransportError(
                            f"HTTP {response.status} for {method} {url}",
                            url=url,
                            status_code=response.status,
                        )

                    content = await self._read_body(response, url)
                    return HttpResponse(
                        status_code=response.status,
                        content=content,
                        content_type=response.headers.get("Content-Type", ""),
                        headers=dict(response.headers),
                        url=str(response.url),
                    )

            except self.RETRYABLE_EXCEPTIONS as e:
                if attempt < self._max_retries:
                    delay = self._calculate_retry_delay(attempt)
                    logger.warning(
                        f"Error on {method} {url}: {e!r}, retrying in {delay:.1f}s "
                        f"(attempt {attempt + 1}/{attempts})"
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"HTTP {method} error for {url} after {attempts} attempts: {e!r}")
                raise TransportError(f"{method} {url} failed: {e!r}", url=url) from e

            except aiohttp.ClientError as e:
                # Non-retryable client error (invalid URL, bad proxy, ...)
                raise TransportError(f"{method} {url} failed: {e!r}", url=url) from e

        raise TransportError(f"{method} {url} failed after {attempts} attempts", url=url)

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform an HTTP GET request with retry logic.

        Args:
            url: The URL to fetch
            timeout: Request timeout in seconds (uses default if None)
            headers: Optional additional headers

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            TransportError: On network errors after retries exhausted, HTTP
                error statuses, or content size exceeded
        """
        return await self._request("GET", url, timeout=timeout, headers=headers)

    async def post(
        self,
        url: str,
        *,
        json: Any = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform an HTTP POST request with a JSON body and retry logic.

        Args:
            url: The URL to post to
            json: JSON-serializable request body
            timeout: Request timeout in seconds (uses default if None)
            headers: Optional additional headers

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            TransportError: On network errors after retries exhausted, HTTP
                error statuses, or content size exceeded
        """
        return await self._request("POST", url, json=json, timeout=timeout, headers=headers)
