"""Shared utility functions for the battle engine."""
from __future__ import annotations

import math
from typing import Any


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity.

    Python's built-in round() uses banker's rounding, which makes decayed
    values like 2.5 and 3.5 land on different sides. Every per-turn amount
    in the engine goes through this instead.
    """
    return int(math.floor(value + 0.5))


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def safe_get(obj: Any, key: str, default: Any = None) -> Any:
    """Read a field from a template that may be a dict or a model.

    A missing or null field yields ``default``.
    """
    if obj is None:
        return default
    if isinstance(obj, dict):
        value = obj.get(key, default)
    else:
        value = getattr(obj, key, default)
    return default if value is None else value


def enum_value(value: Any) -> Any:
    """Plain value of an enum member, or the value itself.

    Lets lookups accept either ``Rarity.EPIC`` or ``"Epic"``.
    """
    return getattr(value, "value", value)
