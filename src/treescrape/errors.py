"""Exception hierarchy for treescrape.

Every failure raised by the library derives from ``TreescrapeError``. Errors
raised after the embedded payload has been extracted carry the raw
``pageProps`` tree on their ``raw`` attribute so callers can inspect what was
actually retrieved.
"""

from __future__ import annotations

from typing import Any, Optional


class TreescrapeError(Exception):
    """Base class for all treescrape errors."""

    def __init__(self, message: str, *, raw: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.raw = raw


class InputError(TreescrapeError):
    """Neither a URL nor a username was supplied, or the input is malformed."""


class TransportError(TreescrapeError):
    """Network, DNS, timeout or HTTP status failure on an outbound request."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        raw: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, raw=raw)
        self.url = url
        self.status_code = status_code


class ExtractionError(TreescrapeError):
    """The embedded application-state payload was not found or not parseable."""


class SchemaError(TreescrapeError):
    """A required structural field is missing or has the wrong shape."""


class CoercionError(TreescrapeError):
    """A present value could not be converted where no default applies."""


class ResolutionError(TreescrapeError):
    """The gate-unlock call for censored links failed."""
