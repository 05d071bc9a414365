"""Analytics-related enums.

This module contains enums used by the analytics report:
- Period: Symbolic reporting window selected by the caller
- BucketInterval: Sampling granularity of a visitor time series
"""

import enum
from typing import Optional


class Period(str, enum.Enum):
    """Symbolic reporting window."""

    DAY = "day"
    WEEK = "7d"
    MONTH = "30d"
    YEAR = "12mo"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Period":
        """Map a raw selector to a Period; anything unrecognized is 7d."""
        try:
            return cls(value)
        except ValueError:
            return cls.WEEK


class BucketInterval(str, enum.Enum):
    """Sampling granularity understood by the provider."""

    HOUR = "hour"
    DAY = "day"
    MONTH = "month"
