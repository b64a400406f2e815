"""
Typed access to untyped JSON trees.

The page payload is loosely typed: the same field may be a number on one
account and a numeric string on another, or missing altogether. Every read
from the tree goes through one of the ``as_*`` accessors below, which return
the value in the requested type or ``None`` when the node does not have that
shape. They never raise.

``coerce_or_default`` is the single place where a ``None`` from an accessor
is replaced by a field's default value.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable, Mapping, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

# Plain ASCII decimal, optional sign; no whitespace, underscores or other digit sets
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

JSONScalar = Union[str, int, float, bool, None]
JSONNode = Union[JSONScalar, list["JSONNode"], dict[str, "JSONNode"]]

T = TypeVar("T")


def as_mapping(node: Any) -> Optional[dict[str, Any]]:
    """Return the node if it is a JSON object."""
    return node if isinstance(node, dict) else None


def as_list(node: Any) -> Optional[list[Any]]:
    """Return the node if it is a JSON array."""
    return node if isinstance(node, list) else None


def as_str(node: Any) -> Optional[str]:
    """Return the node if it is a JSON string."""
    return node if isinstance(node, str) else None


def as_nonempty_str(node: Any) -> Optional[str]:
    """Return the node if it is a non-empty JSON string."""
    return node if isinstance(node, str) and node else None


def as_bool(node: Any) -> Optional[bool]:
    """Return the node if it is a JSON boolean."""
    return node if isinstance(node, bool) else None


def as_number(node: Any) -> Optional[int]:
    """
    Return a JSON number truncated to ``int``.

    Booleans are not numbers here, and NaN/infinity have no integer value.
    """
    if isinstance(node, bool):
        return None
    if isinstance(node, int):
        return node
    if isinstance(node, float) and math.isfinite(node):
        return int(node)
    return None


def as_int(node: Any) -> Optional[int]:
    """
    Return a JSON number or a strict base-10 integer string as ``int``.

    Numeric identifiers show up in both forms across payload versions.
    """
    number = as_number(node)
    if number is not None:
        return number
    if isinstance(node, str) and INTEGER_PATTERN.fullmatch(node):
        return int(node)
    return None


def coerce_or_default(
    node: Any,
    accessor: Callable[[Any], Optional[T]],
    default: T,
    *,
    name: str = "value",
) -> T:
    """
    Coerce a node with ``accessor``, substituting ``default`` on mismatch.

    A missing node (``None``) and a node of the wrong type both produce the
    default; only the latter is logged, since it means the payload changed
    shape.
    """
    value = accessor(node)
    if value is not None:
        return value
    if node is not None:
        logger.debug(f"Unexpected {type(node).__name__} for {name!r} ({node!r}), using default {default!r}")
    return default


def field_or_default(
    mapping: Mapping[str, Any],
    key: str,
    accessor: Callable[[Any], Optional[T]],
    default: T,
) -> T:
    """Read ``mapping[key]`` through ``coerce_or_default``."""
    return coerce_or_default(mapping.get(key), accessor, default, name=key)
