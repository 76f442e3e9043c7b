"""Structured query-string construction.

Optional query parameters are passed around as mappings of parameter name to
optional value. Missing values (None) are dropped and the rest are serialized
in the mapping's own order, so the same mapping always yields the same string.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlencode


if TYPE_CHECKING:
    from collections.abc import Mapping


__all__ = ["build_query", "with_query"]


def build_query(params: Mapping[str, object | None] | None) -> str:
    """Serialize query parameters, skipping those without a value.

    Args:
        params: Parameter names mapped to values. None values are omitted.

    Returns:
        Percent-encoded query string without a leading "?", or "" if empty.

    Example:
        >>> build_query({"gatewayId": None, "pageNo": 0, "status": "ONLINE"})
        'pageNo=0&status=ONLINE'
    """
    if not params:
        return ""
    return urlencode([(name, str(value)) for name, value in params.items() if value is not None])


def with_query(path: str, params: Mapping[str, object | None] | None) -> str:
    """Append a query string to ``path`` when there is anything to append."""
    query = build_query(params)
    if not query:
        return path
    return f"{path}?{query}"
