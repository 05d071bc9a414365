"""Conversion of validated PostHog responses into report rows.

Shape problems are caught earlier by the response schemas. What remains here
are values that cannot be interpreted at all (bucket timestamps that do not
parse, a series whose data and labels disagree); those raise
UpstreamPayloadError.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from dateutil.parser import parse as dateutil_parse

from dashstats.schemas.analytics import BreakdownRow, EventRow, MetricPoint, Number
from dashstats.schemas.posthog import PostHogEventsResponse, PostHogTrendResponse
from dashstats.utils.exceptions import UpstreamPayloadError

# Fields missing from a label ("Jan 2024") are filled from here, not from today
_LABEL_DEFAULT = datetime(2000, 1, 1)


def parse_bucket_timestamp(raw: str) -> datetime:
    try:
        parsed = dateutil_parse(str(raw), default=_LABEL_DEFAULT)
    except (TypeError, ValueError, OverflowError):
        raise UpstreamPayloadError(f"Unparseable bucket timestamp: {raw!r}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_timeseries(trend: Optional[PostHogTrendResponse]) -> list[MetricPoint]:
    if trend is None or not trend.result:
        return []

    series = trend.result[0]
    if not series.data:
        return []

    stamps = series.days or series.labels
    if len(stamps) != len(series.data):
        raise UpstreamPayloadError(
            f"Trend series has {len(series.data)} values but {len(stamps)} bucket labels"
        )

    return [
        MetricPoint(timestamp=parse_bucket_timestamp(stamp), value=value)
        for stamp, value in zip(stamps, series.data)
    ]


def extract_aggregated_value(trend: Optional[PostHogTrendResponse]) -> Number:
    if trend is None or not trend.result:
        return 0
    series = trend.result[0]
    return series.aggregated_value or series.count or 0


def _dimension_value(raw: Any) -> Optional[str]:
    if raw is None or isinstance(raw, str):
        return raw
    return str(raw)


def parse_breakdown_rows(trend: Optional[PostHogTrendResponse]) -> list[BreakdownRow]:
    if trend is None:
        return []
    return [
        BreakdownRow(dimension_value=_dimension_value(item.breakdown_value), count=item.count or 0)
        for item in trend.result
    ]


def parse_event_rows(events: Optional[PostHogEventsResponse]) -> list[EventRow]:
    if events is None:
        return []
    return [
        EventRow(event=item.event, count=item.count or 0, unique_users=item.distinct_id_count or 0)
        for item in events.results
    ]
