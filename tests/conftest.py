"""Shared fixtures: a fixed clock, an in-memory AnalyticsSource and PostHog payloads."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from dashstats.integrations.base import AnalyticsSource
from dashstats.models.analytics_enums import BucketInterval
from dashstats.schemas.analytics import BreakdownRow, EventRow, MetricPoint, TimeWindow

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def daily_points(values: list[float], start: datetime = NOW - timedelta(days=7)) -> list[MetricPoint]:
    return [MetricPoint(timestamp=start + timedelta(days=i), value=v) for i, v in enumerate(values)]


class FakeSource(AnalyticsSource):
    """AnalyticsSource answering from canned values.

    A value that is an exception instance is raised instead of returned.
    Windows ending at ``now`` count as current, anything else as previous.
    """

    def __init__(
        self,
        now: datetime = NOW,
        visitors: Any = None,
        previous_visitors: Any = None,
        pageviews: Any = None,
        previous_pageviews: Any = None,
        pages: Any = None,
        sources: Any = None,
        events: Any = None,
        delays: Optional[dict[str, float]] = None,
    ) -> None:
        self.now = now
        self.answers = {
            "visitors": visitors,
            "previous_visitors": previous_visitors,
            "pageviews": pageviews,
            "previous_pageviews": previous_pageviews,
            "pages": pages,
            "sources": sources,
            "events": events,
        }
        self.delays = delays or {}
        self.calls: list[tuple[str, Optional[TimeWindow], Optional[BucketInterval]]] = []
        self.completed: list[str] = []
        self.cancelled: list[str] = []

    async def _answer(self, key: str) -> Any:
        try:
            delay = self.delays.get(key, 0.0)
            if delay:
                await asyncio.sleep(delay)
        except asyncio.CancelledError:
            self.cancelled.append(key)
            raise
        self.completed.append(key)
        answer = self.answers[key]
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def _key(self, base: str, window: TimeWindow) -> str:
        return base if window.end == self.now else f"previous_{base}"

    async def visitor_trend(self, window: TimeWindow, interval: BucketInterval) -> Optional[list[MetricPoint]]:
        key = self._key("visitors", window)
        self.calls.append((key, window, interval))
        return await self._answer(key)

    async def pageview_total(self, window: TimeWindow):
        key = self._key("pageviews", window)
        self.calls.append((key, window, None))
        return await self._answer(key)

    async def top_pages(self, window: TimeWindow) -> Optional[list[BreakdownRow]]:
        self.calls.append(("pages", window, None))
        return await self._answer("pages")

    async def traffic_sources(self, window: TimeWindow) -> Optional[list[BreakdownRow]]:
        self.calls.append(("sources", window, None))
        return await self._answer("sources")

    async def events(self) -> Optional[list[EventRow]]:
        self.calls.append(("events", None, None))
        return await self._answer("events")


def trend_payload(
    data: list[float],
    days: Optional[list[str]] = None,
    count: Optional[float] = None,
    aggregated_value: Optional[float] = None,
) -> dict:
    if days is None:
        days = [f"2024-01-{i + 1:02d}" for i in range(len(data))]
    series: dict[str, Any] = {
        "label": "$pageview",
        "count": sum(data) if count is None else count,
        "data": data,
        "labels": days,
        "days": days,
    }
    if aggregated_value is not None:
        series["aggregated_value"] = aggregated_value
    return {"result": [series]}


def breakdown_payload(rows: list[tuple[Optional[str], float]]) -> dict:
    return {
        "result": [
            {"label": value or "", "count": count, "data": [], "labels": [], "days": [], "breakdown_value": value}
            for value, count in rows
        ]
    }


def events_payload(rows: list[tuple[Optional[str], float, float]]) -> dict:
    return {
        "results": [
            {"id": f"evt-{i}", "event": event, "count": count, "distinct_id_count": users}
            for i, (event, count, users) in enumerate(rows)
        ]
    }

