"""Reporting window arithmetic.

A symbolic Period maps to a concrete current window ending at ``now`` and a
previous window of the same length ending where the current one starts.
Fixed-length periods are measured in hours; ``12mo`` moves back one calendar
year instead, clamping days that do not exist in the target month (Feb 29).
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from dashstats.models.analytics_enums import BucketInterval, Period
from dashstats.schemas.analytics import TimeWindow

_FIXED_DURATIONS = {
    Period.DAY: timedelta(hours=24),
    Period.WEEK: timedelta(days=7),
    Period.MONTH: timedelta(days=30),
}

PeriodLike = Union[Period, str, None]


def parse_period(value: PeriodLike) -> Period:
    if isinstance(value, Period):
        return value
    return Period.parse(value)


def shift_years(moment: datetime, years: int) -> datetime:
    """Move ``moment`` back by whole calendar years, clamping the day of month."""
    return moment - relativedelta(years=years)


def _step_back(period: Period, moment: datetime) -> datetime:
    if period == Period.YEAR:
        return shift_years(moment, 1)
    return moment - _FIXED_DURATIONS[period]


def current_window(period: PeriodLike, now: datetime) -> TimeWindow:
    """Window ending at ``now`` and covering one period."""
    resolved = parse_period(period)
    return TimeWindow(start=_step_back(resolved, now), end=now)


def previous_window(period: PeriodLike, now: datetime) -> TimeWindow:
    """Window of the same period immediately preceding the current window."""
    resolved = parse_period(period)
    current = current_window(resolved, now)
    return TimeWindow(start=_step_back(resolved, current.start), end=current.start)


def bucket_interval(period: PeriodLike) -> BucketInterval:
    """Sampling granularity used for the visitor trend of a period."""
    resolved = parse_period(period)
    if resolved == Period.DAY:
        return BucketInterval.HOUR
    if resolved == Period.YEAR:
        return BucketInterval.MONTH
    return BucketInterval.DAY


def report_windows(period: PeriodLike, now: Optional[datetime] = None) -> tuple[TimeWindow, TimeWindow]:
    """Return (current, previous) windows for a period."""
    if now is None:
        now = datetime.now(timezone.utc)
    return current_window(period, now), previous_window(period, now)
