"""Utility helpers for the Repliers client."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Tuple

from .constants import BODY_SNIPPET_LENGTH


def compact_dict(values: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``values`` without the keys whose value is ``None``."""

    return {key: value for key, value in values.items() if value is not None}


def query_pairs(values: Iterable[Tuple[str, Any]]) -> Tuple[Tuple[str, str], ...]:
    """Return query string pairs with absent values dropped and the rest rendered."""

    pairs: list[Tuple[str, str]] = []
    seen: set[str] = set()
    for key, value in values:
        if value is None:
            continue
        if key in seen:
            raise ValueError(f"duplicate query parameter {key!r}")
        seen.add(key)
        pairs.append((key, render_query_value(value)))
    return tuple(pairs)


def render_query_value(value: Any) -> str:
    """Render a scalar the way the API expects it in a query string."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def body_snippet(body: Optional[bytes], limit: int = BODY_SNIPPET_LENGTH) -> str:
    """Return the beginning of a response body for use in error messages."""

    if not body:
        return ""
    text = body.decode("utf-8", errors="replace")
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()
