"""Input validation for treescrape."""

from .url_validator import UrlValidationResult, UrlValidator, resolve_profile_url

__all__ = ["UrlValidator", "UrlValidationResult", "resolve_profile_url"]
