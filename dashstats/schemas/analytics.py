"""Analytics report schemas returned to the dashboard."""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, model_validator

Number = Union[int, float]


class TimeWindow(BaseModel):
    """Half-open [from, to) range of instants."""

    start: datetime = Field(..., alias="from")
    end: datetime = Field(..., alias="to")

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindow":
        if self.start >= self.end:
            raise ValueError("window start must precede its end")
        return self


class MetricPoint(BaseModel):
    """A single bucket of a time series."""

    timestamp: datetime
    value: Number

    class Config:
        frozen = True


class BreakdownRow(BaseModel):
    """Raw breakdown row as reported by the provider."""

    dimension_value: Optional[str] = None
    count: Number = 0

    class Config:
        frozen = True


class EventRow(BaseModel):
    """Raw event summary row as reported by the provider."""

    event: Optional[str] = None
    count: Number = 0
    unique_users: Number = 0

    class Config:
        frozen = True


class AggregatedMetric(BaseModel):
    """Scalar total with its change against the previous period."""

    value: Number
    change_percent: Optional[float] = Field(None, alias="changePercent")

    class Config:
        populate_by_name = True
        frozen = True


class BreakdownEntry(BaseModel):
    """Normalized, ranked breakdown entry."""

    label: str
    value: Number

    class Config:
        frozen = True


class EventEntry(BaseModel):
    """Normalized event summary entry."""

    label: str
    count: Number
    unique_users: Number = Field(..., alias="uniqueUsers")

    class Config:
        populate_by_name = True
        frozen = True


class ReportStats(BaseModel):
    """Headline metrics of the report."""

    visitors: AggregatedMetric
    page_views: AggregatedMetric = Field(..., alias="pageViews")

    class Config:
        populate_by_name = True
        frozen = True


class AnalyticsReport(BaseModel):
    """Analytics report consumed by the dashboard."""

    stats: ReportStats
    timeseries: list[MetricPoint] = Field(default_factory=list)
    pages: list[BreakdownEntry] = Field(default_factory=list)
    sources: list[BreakdownEntry] = Field(default_factory=list)
    events: list[EventEntry] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        frozen = True
