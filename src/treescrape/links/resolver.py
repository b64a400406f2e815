"""Two-phase resolution of visible and gated profile links."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any, Optional

from ..errors import ResolutionError, TransportError
from ..http.protocols import HttpClient
from ..models.config import ScraperConfig
from ..models.profile import Link
from ..normalize.nodes import as_list, as_mapping, as_str
from .entries import LinkEntry, parse_link_entries

logger = logging.getLogger(__name__)


def partition_links(entries: Iterable[LinkEntry]) -> tuple[list[Link], list[int]]:
    """
    Split link entries into visible links and gated link ids.

    Entries are visited in order. Payment entries are dropped, entries with a
    URL become visible links, locked entries without a URL contribute their id
    to the unlock request, and anything else is dropped.

    Returns:
        Tuple of (visible links in original order, gated ids without duplicates)

    Raises:
        CoercionError: If a gated entry has an id that cannot be sent
    """
    visible: list[Link] = []
    gated_ids: list[int] = []

    for entry in entries:
        if entry.is_payment:
            continue
        if entry.url is not None:
            visible.append(Link(url=entry.url))
        elif entry.is_gated:
            link_id = entry.gated_id()
            if link_id not in gated_ids:
                gated_ids.append(link_id)
        else:
            logger.debug(f"Dropping link {entry.id!r}: no URL and not locked")

    return visible, gated_ids


def build_unlock_body(account_id: int, link_ids: list[int]) -> dict[str, Any]:
    """Request body accepting the sensitive content of ``link_ids``."""
    return {
        "accountId": account_id,
        "validationInput": {"acceptedSensitiveContent": list(link_ids)},
        "requestSource": {"referrer": None},
    }


def parse_unlocked_links(payload: Any) -> list[Link]:
    """
    Read ``links`` from a gate-unlock response.

    Entries without a string ``url`` are skipped. A response without a
    ``links`` array unlocks nothing.
    """
    response = as_mapping(payload)
    items = as_list(response.get("links")) if response is not None else None
    if items is None:
        return []

    links: list[Link] = []
    for item in items:
        entry = as_mapping(item)
        url = as_str(entry.get("url")) if entry is not None else None
        if url is None:
            continue
        links.append(Link(url=url))
    return links


class LinkResolver:
    """
    Resolves a profile's links, revealing gated links through the unlock API.

    Links the page publishes directly come first, in page order, followed by
    the links revealed by the unlock call, in response order.

    Example:
        resolver = LinkResolver(http_client, config)
        links = await resolver.resolve_links(account_id, page_props["links"])
    """

    def __init__(self, http_client: HttpClient, config: Optional[ScraperConfig] = None):
        """
        Initialize the resolver.

        Args:
            http_client: HTTP client used for the unlock call
            config: Scraper configuration (host, gate endpoint and headers)
        """
        self._client = http_client
        self._config = config or ScraperConfig()

    async def unlock(
        self,
        account_id: int,
        link_ids: list[int],
        *,
        timeout: Optional[float] = None,
    ) -> list[Link]:
        """
        Accept the sensitive-content gate for ``link_ids`` and return their links.

        Raises:
            ResolutionError: If the request fails or the response is not JSON
        """
        if not link_ids:
            return []

        url = self._config.gate_url
        body = build_unlock_body(account_id, link_ids)
        logger.debug(f"Unlocking {len(link_ids)} gated link(s) for account {account_id}")

        try:
            response = await self._client.post(
                url,
                json=body,
                timeout=timeout,
                headers=self._config.gate_headers(),
            )
        except TransportError as e:
            raise ResolutionError(f"gate unlock failed: {e}") from e

        try:
            payload = json.loads(response.content)
        except ValueError as e:
            raise ResolutionError("gate unlock returned invalid JSON") from e

        if as_mapping(payload) is None:
            raise ResolutionError("gate unlock returned unexpected payload")

        return parse_unlocked_links(payload)

    async def resolve_links(
        self,
        account_id: int,
        raw_links: Any,
        *,
        timeout: Optional[float] = None,
    ) -> list[Link]:
        """
        Resolve ``pageProps.links`` into the final ordered link list.

        Args:
            account_id: Normalized account id, sent with the unlock call
            raw_links: The untyped ``links`` array from ``pageProps``
            timeout: Timeout for the unlock call in seconds

        Returns:
            Visible links followed by unlocked gated links

        Raises:
            SchemaError: If ``raw_links`` is not a list of mappings
            CoercionError: If a gated entry has an unusable id
            ResolutionError: If the unlock call fails
        """
        entries = parse_link_entries(raw_links)
        visible, gated_ids = partition_links(entries)

        unlocked = await self.unlock(account_id, gated_ids, timeout=timeout)
        logger.debug(f"Resolved {len(visible)} visible and {len(unlocked)} unlocked link(s)")
        return visible + unlocked
