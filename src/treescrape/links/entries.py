"""Raw link records from the page payload."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from ..errors import CoercionError, SchemaError
from ..normalize.nodes import as_bool, as_int, as_list, as_mapping, as_str, field_or_default

# Payment widgets are listed alongside links but are not outbound links
COMMERCE_PAY = "COMMERCE_PAY"


@dataclass(frozen=True)
class LinkEntry:
    """
    One link record as published in ``pageProps.links``.

    Attributes:
        id: Link id, a number or numeric string depending on payload version
        url: Target URL, None when the page withholds it
        locked: Whether the link sits behind the sensitive-content gate
        type: Link type, e.g. "CLASSIC" or "COMMERCE_PAY"
    """

    id: Union[int, str, None]
    url: Optional[str]
    locked: bool = False
    type: str = ""

    @property
    def is_payment(self) -> bool:
        return self.type == COMMERCE_PAY

    @property
    def is_gated(self) -> bool:
        """True when the URL is withheld until the gate is accepted."""
        return self.url is None and self.locked

    def gated_id(self) -> int:
        """
        Return the id to send in the unlock request.

        Raises:
            CoercionError: If the id is neither a number nor a numeric string
        """
        link_id = as_int(self.id)
        if link_id is None:
            raise CoercionError(f"unexpected link id {self.id!r} for gated link")
        return link_id


def parse_link_entry(node: Any) -> LinkEntry:
    """Parse one mapping from ``pageProps.links``."""
    mapping = as_mapping(node)
    if mapping is None:
        raise SchemaError(f"invalid link entry: {type(node).__name__}")

    raw_id = mapping.get("id")
    if isinstance(raw_id, float):
        raw_id = as_int(raw_id)
    elif isinstance(raw_id, bool) or not isinstance(raw_id, (int, str)):
        raw_id = None

    return LinkEntry(
        id=raw_id,
        url=as_str(mapping.get("url")),
        locked=field_or_default(mapping, "locked", as_bool, False),
        type=field_or_default(mapping, "type", as_str, ""),
    )


def parse_link_entries(raw_links: Any) -> list[LinkEntry]:
    """
    Parse ``pageProps.links`` into ``LinkEntry`` records, keeping order.

    Raises:
        SchemaError: If ``raw_links`` is not a list of mappings
    """
    items = as_list(raw_links)
    if items is None:
        raise SchemaError("invalid links structure")
    return [parse_link_entry(item) for item in items]
