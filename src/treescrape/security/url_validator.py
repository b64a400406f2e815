"""Validation of the profile URL or username a caller asks for."""

from __future__ import annotations

import ipaddress
import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

from ..errors import InputError
from ..models.config import build_profile_url


@dataclass
class UrlValidationResult:
    """Result of URL validation."""

    is_valid: bool
    rejection_reason: str | None = None

    @staticmethod
    def valid() -> UrlValidationResult:
        return UrlValidationResult(is_valid=True)

    @staticmethod
    def invalid(reason: str) -> UrlValidationResult:
        return UrlValidationResult(is_valid=False, rejection_reason=reason)


class UrlValidator:
    """
    Validates profile URLs before they are fetched.

    The scraper is often fed user input (a CLI argument, a service request),
    so besides the scheme check it refuses localhost and private/internal
    addresses.

    Example:
        validator = UrlValidator()
        result = validator.validate("https://linktr.ee/alice")
        if not result.is_valid:
            print(f"Rejected: {result.rejection_reason}")
    """

    DEFAULT_ALLOWED_SCHEMES = {"http", "https"}
    INTERNAL_SUFFIXES = {".internal", ".local", ".localhost", ".localdomain"}
    LOCALHOST_NAMES = {"localhost", "localhost.localdomain"}

    # Handles are short path segments: letters, digits, '.', '_' and '-'
    USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

    def __init__(
        self,
        allowed_schemes: set[str] | None = None,
        allowed_domains: set[str] | None = None,
        block_private_ips: bool = True,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the URL validator.

        Args:
            allowed_schemes: Set of allowed URL schemes (default: {"http", "https"})
            allowed_domains: If set, only these domains are allowed
            block_private_ips: Whether to block private/internal IPs (default: True)
            logger: Optional logger for validation messages
        """
        self.allowed_schemes = allowed_schemes or self.DEFAULT_ALLOWED_SCHEMES
        self.allowed_domains = allowed_domains
        self.block_private_ips = block_private_ips
        self.logger = logger or logging.getLogger(__name__)

    def validate(self, url: str) -> UrlValidationResult:
        """
        Validate a profile URL.

        Args:
            url: The URL to validate

        Returns:
            UrlValidationResult with is_valid and optional rejection_reason
        """
        try:
            parsed = urlparse(url)
            hostname = (parsed.hostname or "").lower()
        except ValueError:
            return UrlValidationResult.invalid("Invalid URL format")

        if parsed.scheme not in self.allowed_schemes:
            return UrlValidationResult.invalid(
                f"Scheme '{parsed.scheme}' not allowed (allowed: {sorted(self.allowed_schemes)})"
            )

        if not hostname:
            return UrlValidationResult.invalid("URL has no domain")

        if self.allowed_domains is not None and hostname not in self.allowed_domains:
            return UrlValidationResult.invalid(f"Domain '{hostname}' not in allowed list")

        if hostname in self.LOCALHOST_NAMES:
            return UrlValidationResult.invalid("Localhost URLs not allowed")

        for suffix in self.INTERNAL_SUFFIXES:
            if hostname.endswith(suffix):
                return UrlValidationResult.invalid(f"Internal domain suffix '{suffix}' not allowed")

        if self.block_private_ips:
            try:
                ip = ipaddress.ip_address(hostname)
            except ValueError:
                ip = None
            if ip is not None and (ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved):
                return UrlValidationResult.invalid(f"Internal IP address '{hostname}' not allowed")

        return UrlValidationResult.valid()

    def validate_username(self, username: str) -> UrlValidationResult:
        """Check that a username can be used as a profile path segment."""
        if not self.USERNAME_PATTERN.match(username):
            return UrlValidationResult.invalid(f"Invalid username '{username}'")
        return UrlValidationResult.valid()

    def is_valid(self, url: str) -> bool:
        return self.validate(url).is_valid


def resolve_profile_url(
    url: str | None,
    username: str | None,
    host: str,
    validator: UrlValidator | None = None,
) -> str:
    """
    Return the URL to fetch for a URL-or-username request.

    A supplied URL wins; otherwise the URL is derived from the username.

    Raises:
        InputError: If neither is supplied, or the supplied one is invalid
    """
    validator = validator or UrlValidator()

    if url:
        result = validator.validate(url)
        if not result.is_valid:
            raise InputError(f"Invalid profile URL: {result.rejection_reason}")
        return url

    if username:
        username = username.strip().lstrip("@")
        result = validator.validate_username(username)
        if not result.is_valid:
            raise InputError(result.rejection_reason or "Invalid username")
        return build_profile_url(host, username)

    raise InputError("Please pass linktree username or url")
