"""PostHog response schemas.

Only the fields the report needs are declared; everything else the API
returns is ignored.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field

Number = Union[int, float]


class PostHogTrendResult(BaseModel):
    """One series of an insights/trend response."""

    label: Optional[str] = None
    count: Optional[Number] = None
    data: list[Number] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    days: list[str] = Field(default_factory=list)
    breakdown_value: Optional[Any] = None
    aggregated_value: Optional[Number] = None


class PostHogTrendResponse(BaseModel):
    """Response of POST /api/projects/{id}/insights/trend/."""

    result: list[PostHogTrendResult] = Field(default_factory=list)
    next: Optional[str] = None
    timezone: Optional[str] = None
    is_cached: Optional[bool] = None


class PostHogEvent(BaseModel):
    """One entry of the events listing."""

    event: Optional[str] = None
    count: Optional[Number] = None
    distinct_id_count: Optional[Number] = None


class PostHogEventsResponse(BaseModel):
    """Response of GET /api/projects/{id}/events/."""

    results: list[PostHogEvent] = Field(default_factory=list)
    next: Optional[str] = None
