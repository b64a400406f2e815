"""Link parsing and gated-link resolution."""

from .entries import COMMERCE_PAY, LinkEntry, parse_link_entries, parse_link_entry
from .resolver import LinkResolver, build_unlock_body, parse_unlocked_links, partition_links

__all__ = [
    "COMMERCE_PAY",
    "LinkEntry",
    "LinkResolver",
    "build_unlock_body",
    "parse_link_entries",
    "parse_link_entry",
    "parse_unlocked_links",
    "partition_links",
]
