"""
AnalyticsSource ABC: the read-only queries the aggregation needs from a
provider. Every method returns ``None`` when the provider could not answer.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from dashstats.models.analytics_enums import BucketInterval
from dashstats.schemas.analytics import BreakdownRow, EventRow, MetricPoint, Number, TimeWindow


class AnalyticsSource(ABC):

    @abstractmethod
    async def visitor_trend(self, window: TimeWindow, interval: BucketInterval) -> Optional[List[MetricPoint]]:
        """Unique visitors per bucket within the window."""

    @abstractmethod
    async def pageview_total(self, window: TimeWindow) -> Optional[Number]:
        """Total pageviews within the window."""

    @abstractmethod
    async def top_pages(self, window: TimeWindow) -> Optional[List[BreakdownRow]]:
        """Pageviews broken down by page URL."""

    @abstractmethod
    async def traffic_sources(self, window: TimeWindow) -> Optional[List[BreakdownRow]]:
        """Pageviews broken down by referrer."""

    @abstractmethod
    async def events(self) -> Optional[List[EventRow]]:
        """Event summary, not bound to a window."""
