"""
treescrape - Extract profile data and links from linktr.ee pages.

Usage:
    from treescrape import Scraper

    async with Scraper() as scraper:
        result = await scraper.get_profile(username="alice")
        print(result.profile.username, result.profile.link_urls)
"""

__version__ = "1.0.0"

from .core.scraper import Scraper, get_profile_blocking
from .errors import (
    CoercionError,
    ExtractionError,
    InputError,
    ResolutionError,
    SchemaError,
    TransportError,
    TreescrapeError,
)
from .models.config import GateConfig, NetworkConfig, ScraperConfig
from .models.profile import Link, Profile, ScrapeResult

__all__ = [
    "__version__",
    # Core
    "Scraper",
    "get_profile_blocking",
    # Config
    "ScraperConfig",
    "NetworkConfig",
    "GateConfig",
    # Models
    "Link",
    "Profile",
    "ScrapeResult",
    # Errors
    "TreescrapeError",
    "InputError",
    "TransportError",
    "ExtractionError",
    "SchemaError",
    "CoercionError",
    "ResolutionError",
]
