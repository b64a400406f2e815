"""Scraper orchestration."""

from .scraper import Scraper, get_profile_blocking

__all__ = ["Scraper", "get_profile_blocking"]
