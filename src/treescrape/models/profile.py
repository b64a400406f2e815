"""Typed records produced by a profile scrape."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..errors import TreescrapeError

DEFAULT_TIER = "Unknown"


@dataclass(frozen=True)
class Link:
    """A single outbound link from a profile."""

    url: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url}


@dataclass
class Profile:
    """
    Normalized account metadata and links for one profile.

    Only ``username`` is required; every other field carries a default so a
    malformed secondary field in the page payload degrades to that default.

    Attributes:
        username: Account handle
        source_url: Profile page URL (derived from username when not supplied)
        avatar_image_url: Profile picture URL, empty if absent
        account_id: Numeric account id, 0 if missing or untypeable
        tier: Account tier, "Unknown" if absent or empty
        is_active: Whether the account is active
        description: Profile bio text
        created_at: Creation timestamp (ms since epoch as published), 0 if absent
        updated_at: Last update timestamp, 0 if absent
        links: Outbound links, visible links first then unlocked gated links
    """

    username: str
    source_url: str = ""
    avatar_image_url: str = ""
    account_id: int = 0
    tier: str = DEFAULT_TIER
    is_active: bool = False
    description: str = ""
    created_at: int = 0
    updated_at: int = 0
    links: list[Link] = field(default_factory=list)

    @property
    def link_urls(self) -> list[str]:
        """Plain list of link URLs, in order."""
        return [link.url for link in self.links]

    def to_dict(self) -> dict[str, Any]:
        """Convert profile to dictionary for JSON serialization."""
        return {
            "username": self.username,
            "url": self.source_url,
            "avatar_image": self.avatar_image_url,
            "id": self.account_id,
            "tier": self.tier,
            "is_active": self.is_active,
            "description": self.description,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "links": [link.to_dict() for link in self.links],
        }


@dataclass
class ScrapeResult:
    """
    Outcome of a successful profile scrape.

    ``raw`` is the ``pageProps`` tree the profile was built from. When link
    resolution failed, ``link_error`` holds the absorbed error and
    ``profile.links`` is empty.
    """

    profile: Profile
    raw: dict[str, Any]
    link_error: Optional[TreescrapeError] = None

    @property
    def is_partial(self) -> bool:
        """True when some or all of the links could not be resolved."""
        return self.link_error is not None
