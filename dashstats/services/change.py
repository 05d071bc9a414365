"""Period-over-period change arithmetic and its display form."""

import math
from typing import NamedTuple, Optional, Union

Number = Union[int, float]


class ChangeDisplay(NamedTuple):
    text: str
    is_positive: bool


def percent_change(current: Number, previous: Number) -> Optional[float]:
    """Percentage change from ``previous`` to ``current``.

    A zero baseline has no meaningful ratio: growth from zero is reported as
    +100 and zero-to-zero as None.
    """
    if previous == 0:
        return 100.0 if current > 0 else None
    return (current - previous) / previous * 100


def _round_half_up(value: float) -> int:
    # Ties go toward +inf: 10.5 -> 11, -10.5 -> -10
    return math.floor(value + 0.5)


def format_change(change: Optional[float], higher_is_better: bool = True) -> ChangeDisplay:
    """Render a change as ``+12%`` / ``-3%`` / ``0%``.

    ``higher_is_better`` only flips which direction is flagged favourable;
    the text always carries the arithmetic sign.
    """
    if change is None or change == 0:
        return ChangeDisplay("0%", False)

    increased = change > 0
    sign = "+" if increased else ""
    text = f"{sign}{_round_half_up(change)}%"
    return ChangeDisplay(text, increased if higher_is_better else not increased)


def format_number(value: Number) -> str:
    """Compact dashboard form of a count: 999, 1.5K, 12.3M."""
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return str(value)
