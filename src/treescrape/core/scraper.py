"""Main Scraper class tying fetch, extraction, normalization and link resolution."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Any, Optional

from ..errors import CoercionError, ResolutionError, SchemaError, TreescrapeError
from ..extraction import PagePropsExtractor
from ..http import AsyncHttpClient, HttpClient
from ..links import LinkResolver, parse_link_entries, partition_links
from ..models.config import ScraperConfig
from ..models.profile import ScrapeResult
from ..normalize import normalize_profile
from ..security import UrlValidator, resolve_profile_url

logger = logging.getLogger(__name__)


class Scraper:
    """
    Primary API for treescrape.

    Fetches a profile page, extracts its embedded state, normalizes the
    account and resolves its links, including links hidden behind the
    sensitive-content gate.

    Failures that leave no account identity (bad input, page fetch failure,
    missing payload, missing account) are raised. Failures while resolving
    links are absorbed and reported on ``ScrapeResult.link_error``. A failed
    unlock call keeps the visible links; a malformed links array leaves none.

    Example:
        async with Scraper() as scraper:
            result = await scraper.get_profile(username="alice")
            for link in result.profile.links:
                print(link.url)
            if result.is_partial:
                print(f"Links unavailable: {result.link_error}")
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        http_client: Optional[HttpClient] = None,
    ):
        """
        Initialize the Scraper.

        Args:
            config: Scraper configuration (defaults apply when omitted)
            http_client: HTTP client to use instead of an owned
                AsyncHttpClient; the caller manages its lifecycle
        """
        self.config = config or ScraperConfig()
        self._http_client: Optional[HttpClient] = http_client
        self._owned_client: Optional[AsyncHttpClient] = None
        self._extractor = PagePropsExtractor()
        self._validator = UrlValidator()

    async def __aenter__(self) -> Scraper:
        """Enter async context and create the HTTP client if none was given."""
        if self._http_client is None:
            network = self.config.network
            self._owned_client = AsyncHttpClient(
                max_retries=network.max_retries,
                retry_base_delay=network.retry_base_delay,
                max_content_size=network.max_content_size,
                user_agent=network.user_agent,
                proxy=network.proxy,
                default_timeout=network.timeout,
            )
            await self._owned_client.__aenter__()
            self._http_client = self._owned_client
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close the owned HTTP client."""
        if self._owned_client:
            await self._owned_client.__aexit__(exc_type, exc_val, exc_tb)
            self._owned_client = None
            self._http_client = None

    def _client(self) -> HttpClient:
        if self._http_client is None:
            raise RuntimeError("Scraper not initialized. Use 'async with' context manager.")
        return self._http_client

    async def fetch_page_props(self, url: str, *, timeout: Optional[float] = None) -> dict[str, Any]:
        """
        Fetch a profile page and return its ``pageProps`` tree.

        Raises:
            TransportError: If the page cannot be fetched
            ExtractionError: If the page has no embedded payload
        """
        logger.info(f"Fetching profile page {url}")
        response = await self._client().get(url, timeout=timeout)
        return self._extractor.extract(response.content)

    async def get_profile(
        self,
        url: Optional[str] = None,
        username: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ) -> ScrapeResult:
        """
        Scrape a profile by URL or username.

        Args:
            url: Full profile URL; takes precedence over ``username``
            username: Profile handle, used to build the URL when ``url`` is empty
            timeout: Per-request timeout in seconds for both network calls

        Returns:
            ScrapeResult with the profile and the raw ``pageProps`` tree

        Raises:
            InputError: If neither url nor username is usable
            TransportError: If the profile page cannot be fetched
            ExtractionError: If the page has no embedded payload
            SchemaError: If the payload has no account or username; the
                exception's ``raw`` attribute holds the ``pageProps`` tree
        """
        target = resolve_profile_url(url, username, self.config.host, self._validator)
        page_props = await self.fetch_page_props(target, timeout=timeout)

        profile = normalize_profile(page_props, source_url=url or None, host=self.config.host)

        link_error: Optional[TreescrapeError] = None
        resolver = LinkResolver(self._client(), self.config)
        try:
            visible, gated_ids = partition_links(parse_link_entries(page_props.get("links")))
        except (SchemaError, CoercionError) as e:
            link_error = e
        else:
            # Visible links survive a failed unlock call
            profile.links = visible
            try:
                profile.links = visible + await resolver.unlock(profile.account_id, gated_ids, timeout=timeout)
            except ResolutionError as e:
                link_error = e

        if link_error is not None:
            link_error.raw = page_props
            logger.warning(f"Error getting links for {profile.username}: {link_error}")

        return ScrapeResult(profile=profile, raw=page_props, link_error=link_error)


def get_profile_blocking(
    url: Optional[str] = None,
    username: Optional[str] = None,
    *,
    timeout: Optional[float] = None,
    config: Optional[ScraperConfig] = None,
) -> ScrapeResult:
    """
    Blocking profile scrape.

    This is a convenience wrapper for sync code that can't use async/await.
    For async code, use the Scraper class directly.

    WARNING: Do not call from within an existing event loop (e.g., Jupyter,
    asyncio-based frameworks). Use the async Scraper API instead.

    Example:
        result = get_profile_blocking(username="alice")
        print(result.profile.link_urls)
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError("get_profile_blocking() called from async context. Use 'async with Scraper()' instead.")

    async def _run() -> ScrapeResult:
        async with Scraper(config) as scraper:
            return await scraper.get_profile(url, username, timeout=timeout)

    return asyncio.run(_run())
