"""Embedded application-state extraction from profile pages."""

import json
import logging
import re
from typing import Any, Optional, Union

from bs4 import BeautifulSoup, Tag

from ..errors import ExtractionError

logger = logging.getLogger(__name__)

# Next.js serializes the initial page state into this element
PAYLOAD_SELECTOR = "script#__NEXT_DATA__"

NO_PAYLOAD_MESSAGE = "no pageProps payload found"


class PagePropsExtractor:
    """
    Extracts the ``props.pageProps`` subtree from a profile page.

    The page bootstraps its client-side state from a JSON document embedded
    in a ``<script id="__NEXT_DATA__">`` element. Everything the scraper needs
    lives under ``props.pageProps`` of that document.

    Example:
        extractor = PagePropsExtractor()
        page_props = extractor.extract(html_bytes)
        account = page_props["account"]
    """

    def __init__(self, selector: str = PAYLOAD_SELECTOR):
        """
        Initialize the extractor.

        Args:
            selector: CSS selector of the script element holding the payload
        """
        self._selector = selector

    def _detect_encoding(self, html: bytes) -> str:
        """Detect character encoding from HTML content."""
        head = html[:2048].decode("latin-1", errors="ignore")
        charset_match = re.search(r'charset=["\']?([^"\'\s>;]+)', head, re.IGNORECASE)
        if charset_match:
            return charset_match.group(1).strip()
        return "utf-8"

    def _decode(self, html: Union[str, bytes]) -> str:
        if isinstance(html, str):
            return html
        encoding = self._detect_encoding(html)
        try:
            return html.decode(encoding, errors="replace")
        except LookupError:
            return html.decode("utf-8", errors="replace")

    def _find_payload_text(self, soup: BeautifulSoup) -> Optional[str]:
        element = soup.select_one(self._selector)
        if not isinstance(element, Tag):
            return None
        content = element.string
        return str(content) if content is not None else ""

    def extract(self, html: Union[str, bytes]) -> dict[str, Any]:
        """
        Extract the ``pageProps`` mapping from HTML.

        Args:
            html: Raw HTML, as text or bytes

        Returns:
            The ``props.pageProps`` mapping as parsed JSON

        Raises:
            ExtractionError: If the script element is absent, its content is
                not valid JSON, or ``props.pageProps`` is not a mapping
        """
        soup = BeautifulSoup(self._decode(html), "html.parser")

        text = self._find_payload_text(soup)
        if text is None:
            logger.debug(f"No element matches {self._selector}")
            raise ExtractionError(NO_PAYLOAD_MESSAGE)

        try:
            data = json.loads(text)
        except ValueError as e:
            logger.debug(f"Embedded payload is not valid JSON: {e}")
            raise ExtractionError(NO_PAYLOAD_MESSAGE) from e

        props = data.get("props") if isinstance(data, dict) else None
        page_props = props.get("pageProps") if isinstance(props, dict) else None
        if not isinstance(page_props, dict):
            logger.debug("Embedded payload has no props.pageProps mapping")
            raise ExtractionError(NO_PAYLOAD_MESSAGE)

        return page_props


def extract_page_props(html: Union[str, bytes]) -> dict[str, Any]:
    """Extract ``props.pageProps`` with the default selector."""
    return PagePropsExtractor().extract(html)
