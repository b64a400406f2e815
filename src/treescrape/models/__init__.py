"""Treescrape configuration and profile models."""

from .config import BROWSER_USER_AGENT, DEFAULT_HOST, GateConfig, NetworkConfig, ScraperConfig, build_profile_url
from .profile import DEFAULT_TIER, Link, Profile, ScrapeResult

__all__ = [
    # Config
    "BROWSER_USER_AGENT",
    "DEFAULT_HOST",
    "GateConfig",
    "NetworkConfig",
    "ScraperConfig",
    "build_profile_url",
    # Profile
    "DEFAULT_TIER",
    "Link",
    "Profile",
    "ScrapeResult",
]
