"""Embedded payload extraction for treescrape."""

from .extractor import PAYLOAD_SELECTOR, PagePropsExtractor, extract_page_props

__all__ = [
    "PAYLOAD_SELECTOR",
    "PagePropsExtractor",
    "extract_page_props",
]
