"""Environment variable parsing utilities."""

from __future__ import annotations

import math

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def parse_bool_env(value: str | None) -> bool | None:
    """True for 1/true/yes/on in any case; None when the variable is unset."""
    if value is None:
        return None
    return value.strip().lower() in _TRUTHY


def parse_float_env(value: str | None) -> float | None:
    """Parse a finite float.

    Unset, malformed, NaN and infinite values all come back as None so the
    caller falls through to its default.
    """
    if value is None:
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def parse_str_env(value: str | None) -> str | None:
    """Return a stripped string, or None for unset/blank values."""
    if value is None:
        return None
    return value.strip() or None
