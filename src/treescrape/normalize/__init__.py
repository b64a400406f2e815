"""Untyped-tree access and profile normalization."""

from .nodes import (
    JSONNode,
    as_bool,
    as_int,
    as_list,
    as_mapping,
    as_nonempty_str,
    as_number,
    as_str,
    coerce_or_default,
    field_or_default,
)
from .profile import get_account, normalize_profile

__all__ = [
    "JSONNode",
    "as_bool",
    "as_int",
    "as_list",
    "as_mapping",
    "as_nonempty_str",
    "as_number",
    "as_str",
    "coerce_or_default",
    "field_or_default",
    "get_account",
    "normalize_profile",
]
