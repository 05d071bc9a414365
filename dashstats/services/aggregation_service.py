"""Analytics aggregation: fan out provider queries and reduce them to a report."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from dashstats.integrations.base import AnalyticsSource
from dashstats.schemas.analytics import AnalyticsReport, MetricPoint, Number
from dashstats.services.periods import PeriodLike, bucket_interval, parse_period, report_windows
from dashstats.services.report_assembler import assemble_report
from dashstats.utils.exceptions import AnalyticsUnavailableException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryOutcome:
    """Settled result of one upstream query: a value (possibly None) or an error."""

    name: str
    value: Any = None
    error: Optional[BaseException] = None


async def _settle(name: str, query: Awaitable[Any]) -> QueryOutcome:
    try:
        return QueryOutcome(name=name, value=await query)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        return QueryOutcome(name=name, error=exc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def total_visitors(points: Optional[list[MetricPoint]]) -> Number:
    return sum(point.value for point in points or [])


class AnalyticsAggregationService:
    """Builds an AnalyticsReport for a period from an AnalyticsSource.

    The seven provider queries run concurrently and are all awaited before
    reduction. A query answering ``None`` degrades only its own metric; a
    query raising, or the reduction itself failing, fails the whole report.
    """

    def __init__(
        self,
        source: AnalyticsSource,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = source
        self._timeout = timeout
        self._clock = clock

    async def _dispatch(self, period: PeriodLike, now: datetime) -> dict[str, QueryOutcome]:
        current, previous = report_windows(period, now)
        interval = bucket_interval(period)
        source = self._source

        queries = {
            "visitors": source.visitor_trend(current, interval),
            "pageviews": source.pageview_total(current),
            "pages": source.top_pages(current),
            "sources": source.traffic_sources(current),
            "events": source.events(),
            "previous_visitors": source.visitor_trend(previous, interval),
            "previous_pageviews": source.pageview_total(previous),
        }
        outcomes = await asyncio.gather(*(_settle(name, query) for name, query in queries.items()))
        return {outcome.name: outcome for outcome in outcomes}

    async def build_report(self, period: PeriodLike = None, now: Optional[datetime] = None) -> AnalyticsReport:
        resolved = parse_period(period)
        if now is None:
            now = self._clock()

        try:
            outcomes = await asyncio.wait_for(self._dispatch(resolved, now), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Analytics aggregation timed out after %ss (period=%s)", self._timeout, resolved.value)
            raise AnalyticsUnavailableException("Analytics request timed out") from exc

        failed = [outcome for outcome in outcomes.values() if outcome.error is not None]
        if failed:
            for outcome in failed:
                logger.error(
                    "Analytics query %s failed: %r",
                    outcome.name,
                    outcome.error,
                    exc_info=outcome.error,
                )
            raise AnalyticsUnavailableException() from failed[0].error

        unavailable = [name for name, outcome in outcomes.items() if outcome.value is None]
        if unavailable:
            logger.warning("Analytics queries unavailable, using defaults: %s", ", ".join(sorted(unavailable)))

        try:
            return self._reduce(outcomes)
        except Exception as exc:
            logger.exception("Failed to reduce analytics results (period=%s)", resolved.value)
            raise AnalyticsUnavailableException() from exc

    @staticmethod
    def _reduce(outcomes: dict[str, QueryOutcome]) -> AnalyticsReport:
        timeseries = outcomes["visitors"].value or []
        return assemble_report(
            visitors=total_visitors(timeseries),
            previous_visitors=total_visitors(outcomes["previous_visitors"].value),
            page_views=outcomes["pageviews"].value or 0,
            previous_page_views=outcomes["previous_pageviews"].value or 0,
            timeseries=timeseries,
            page_rows=outcomes["pages"].value,
            source_rows=outcomes["sources"].value,
            event_rows=outcomes["events"].value,
        )
