"""Utility helpers for calculator modules."""

from __future__ import annotations

import math


def clamp_non_negative(value: float) -> float:
    """Return ``value`` or ``0.0`` when it is negative, NaN or infinite."""

    if not math.isfinite(value) or value < 0:
        return 0.0
    return float(value)


def round_currency(value: float) -> int:
    """Round a monetary amount to the nearest whole krone.

    Halves round up (``2.5 -> 3``) rather than to even. Non-finite and
    negative amounts collapse to ``0``.
    """

    safe = clamp_non_negative(value)
    return int(math.floor(safe + 0.5))


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = round(value * 100, 4)
    if float(int(percentage)) == percentage:
        return f"{int(percentage)}%"
    return f"{percentage:.2f}%"


def format_currency(value: float) -> str:
    """Format kroner with a thin grouping separator, e.g. ``641,200``."""

    return f"{round_currency(value):,}"
