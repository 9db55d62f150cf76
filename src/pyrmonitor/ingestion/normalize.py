"""Normalization helpers.

Centralizes permissive field parsing. Feed fields are positional, often
absent and loosely typed, so nothing here raises on bad input.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pyrmonitor._constants import DEFAULT_FLAG, QUOTE


def safe_int(value: Any) -> int | None:
    """Parse a base-10 integer; decimals and exponents are not integers."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def count_or_zero(value: Any) -> int:
    """Parse a lap count or position; anything unusable becomes ``0``."""
    parsed = safe_int(value)
    if parsed is None or parsed < 0:
        return 0
    return parsed


def field_at(fields: Sequence[str], index: int) -> str:
    """Positional field, or ``""`` when the packet is shorter than that."""
    if index < len(fields):
        return fields[index]
    return ""


def strip_quotes(value: str) -> str:
    """Remove one pair of surrounding double quotes, if present."""
    text = value.strip()
    if len(text) >= 2 and text.startswith(QUOTE) and text.endswith(QUOTE):
        return text[1:-1]
    return text


def normalize_flag(value: str) -> str:
    flag = value.strip().upper()
    return flag or DEFAULT_FLAG
