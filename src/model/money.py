"""Integer-cent money helpers.

Every monetary amount in the engine is an ``int`` number of cents. Products of
a balance and a rate are rounded half-up back to whole cents, so the same input
always produces the same cents regardless of how Python rounds ties.
"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding toward +infinity."""
    return int(math.floor(value + 0.5))


def cents_to_dollars(cents: int) -> float:
    return cents / 100


def dollars_to_cents(dollars: float) -> int:
    return round_half_up(dollars * 100)


def format_currency(cents: int) -> str:
    """Format cents as ``$1,234.56`` (negative amounts as ``-$1,234.56``)."""
    sign = '-' if cents < 0 else ''
    return f"{sign}${abs(cents) / 100:,.2f}"


def format_whole_dollars(cents: int) -> str:
    sign = '-' if cents < 0 else ''
    return f"{sign}${round_half_up(abs(cents) / 100):,}"


def format_axis_value(cents: int) -> str:
    """Compact chart-axis label: ``$1.2M``, ``$350K`` or ``$900``."""
    dollars = cents / 100
    if abs(dollars) >= 1_000_000:
        return f"${dollars / 1_000_000:.1f}M"
    if abs(dollars) >= 1_000:
        return f"${dollars / 1_000:.0f}K"
    return f"${dollars:.0f}"
