"""Inflation helpers. Rates are whole percentages; amounts are cents."""

from model.money import round_half_up

DEFAULT_INFLATION_RATE = 2.5


def inflation_factor(years: int, rate: float = DEFAULT_INFLATION_RATE) -> float:
    return (1 + rate / 100) ** years


def adjust_for_inflation(amount: int, years: int, rate: float = DEFAULT_INFLATION_RATE) -> int:
    """Grow ``amount`` by ``years`` of inflation."""
    return round_half_up(amount * inflation_factor(years, rate))


def deflate(amount: int, years: int, rate: float = DEFAULT_INFLATION_RATE) -> int:
    """Express a future amount in today's money."""
    return round_half_up(amount / inflation_factor(years, rate))
