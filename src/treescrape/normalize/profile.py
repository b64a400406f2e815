"""Normalization of the ``pageProps`` tree into a ``Profile``."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..errors import SchemaError
from ..models.config import DEFAULT_HOST, build_profile_url
from ..models.profile import DEFAULT_TIER, Profile
from .nodes import (
    as_bool,
    as_int,
    as_mapping,
    as_nonempty_str,
    as_number,
    as_str,
    field_or_default,
)

logger = logging.getLogger(__name__)


def get_account(page_props: Any) -> dict[str, Any]:
    """
    Return the ``account`` mapping of a ``pageProps`` tree.

    Raises:
        SchemaError: If ``account`` is absent or not a mapping
    """
    props = as_mapping(page_props)
    account = as_mapping(props.get("account")) if props is not None else None
    if account is None:
        raise SchemaError("invalid account structure", raw=props)
    return account


def normalize_profile(
    page_props: Any,
    source_url: Optional[str] = None,
    host: str = DEFAULT_HOST,
) -> Profile:
    """
    Build a ``Profile`` from the ``pageProps`` tree of a profile page.

    Only the account mapping and its username are required. Every other field
    falls back to its default when absent or of an unexpected type. The
    returned profile has no links; those are resolved separately.

    Args:
        page_props: The ``props.pageProps`` tree extracted from the page
        source_url: URL the page was fetched from, if known
        host: Profile host used to derive ``source_url`` from the username

    Returns:
        Normalized profile with an empty ``links`` list

    Raises:
        SchemaError: If the account mapping or username is missing
    """
    account = get_account(page_props)

    username = as_nonempty_str(account.get("username"))
    if username is None:
        raise SchemaError("invalid username", raw=as_mapping(page_props))

    if not source_url:
        source_url = build_profile_url(host, username)

    profile = Profile(
        username=username,
        source_url=source_url,
        avatar_image_url=field_or_default(account, "profilePictureUrl", as_str, ""),
        account_id=field_or_default(account, "id", as_int, 0),
        tier=field_or_default(account, "tier", as_nonempty_str, DEFAULT_TIER),
        is_active=field_or_default(account, "isActive", as_bool, False),
        description=field_or_default(account, "description", as_str, ""),
        created_at=field_or_default(account, "createdAt", as_number, 0),
        updated_at=field_or_default(account, "updatedAt", as_number, 0),
    )
    logger.debug(f"Normalized account {profile.username!r} (id={profile.account_id})")
    return profile
