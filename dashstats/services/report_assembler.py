"""Builds the final AnalyticsReport from reduced query results."""

from typing import Optional, Sequence

from dashstats.schemas.analytics import (
    AggregatedMetric,
    AnalyticsReport,
    BreakdownRow,
    EventRow,
    MetricPoint,
    Number,
    ReportStats,
)
from dashstats.services.breakdowns import extract_events, extract_pages, extract_sources
from dashstats.services.change import percent_change


def aggregated_metric(current: Number, previous: Number) -> AggregatedMetric:
    return AggregatedMetric(value=current, change_percent=percent_change(current, previous))


def assemble_report(
    *,
    visitors: Number,
    previous_visitors: Number,
    page_views: Number,
    previous_page_views: Number,
    timeseries: Sequence[MetricPoint],
    page_rows: Optional[Sequence[BreakdownRow]] = None,
    source_rows: Optional[Sequence[BreakdownRow]] = None,
    event_rows: Optional[Sequence[EventRow]] = None,
) -> AnalyticsReport:
    """Combine totals, the current-window series and breakdowns into a report.

    Only the current window's series is surfaced; previous-window data enters
    the report solely through the change percentages.
    """
    return AnalyticsReport(
        stats=ReportStats(
            visitors=aggregated_metric(visitors, previous_visitors),
            page_views=aggregated_metric(page_views, previous_page_views),
        ),
        timeseries=list(timeseries),
        pages=extract_pages(page_rows),
        sources=extract_sources(source_rows),
        events=extract_events(event_rows),
    )
