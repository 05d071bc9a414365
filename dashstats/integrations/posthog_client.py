import logging
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from dashstats.core.config import PostHogConfig
from dashstats.integrations.base import AnalyticsSource
from dashstats.integrations.posthog_parsing import (
    extract_aggregated_value,
    parse_breakdown_rows,
    parse_event_rows,
    parse_timeseries,
)
from dashstats.models.analytics_enums import BucketInterval
from dashstats.schemas.analytics import BreakdownRow, EventRow, MetricPoint, Number, TimeWindow
from dashstats.schemas.posthog import PostHogEventsResponse, PostHogTrendResponse
from dashstats.utils.exceptions import UpstreamPayloadError

logger = logging.getLogger(__name__)

_Response = TypeVar("_Response", bound=BaseModel)


class PostHogClient(AnalyticsSource):
    """Read-only wrapper around the PostHog query API.

    Non-success statuses, transport errors and responses that do not match the
    expected schema are logged and reported as ``None``. A body that is not
    JSON at all raises UpstreamPayloadError.
    """

    def __init__(self, config: PostHogConfig, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self._config = config
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=config.timeout)

    async def __aenter__(self) -> "PostHogClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }

    def _url(self, path: str) -> str:
        return f"{self._config.api_host}/api/projects/{self._config.project_id}/{path}"

    async def _request(self, kind: str, method: str, path: str, body: Optional[dict] = None) -> Optional[Any]:
        try:
            response = await self._http.request(method, self._url(path), headers=self._headers, json=body)
        except httpx.RequestError as exc:
            logger.error("PostHog API request failed (%s): %s", kind, exc)
            return None

        if not response.is_success:
            logger.error(
                "PostHog API error (%s): %s %s",
                kind,
                response.status_code,
                response.reason_phrase,
            )
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamPayloadError(f"PostHog returned a non-JSON body ({kind})") from exc

    @staticmethod
    def _validate(kind: str, payload: Optional[Any], schema: Type[_Response]) -> Optional[_Response]:
        if payload is None:
            return None
        try:
            return schema.model_validate(payload)
        except ValidationError as exc:
            logger.warning("PostHog response did not match schema (%s): %s", kind, exc.errors()[:3])
            return None

    # Raw provider queries

    async def get_trend(
        self,
        events: list[dict[str, str]],
        window: TimeWindow,
        interval: Optional[BucketInterval] = None,
        breakdown: Optional[str] = None,
        kind: str = "trend",
    ) -> Optional[PostHogTrendResponse]:
        query: dict[str, Any] = {
            "events": events,
            "date_from": window.start.isoformat(),
            "date_to": window.end.isoformat(),
        }
        if interval is not None:
            query["interval"] = interval.value
        if breakdown is not None:
            query["breakdown"] = breakdown

        payload = await self._request(kind, "POST", "insights/trend/", query)
        return self._validate(kind, payload, PostHogTrendResponse)

    async def get_visitors_trend(self, window: TimeWindow, interval: BucketInterval) -> Optional[PostHogTrendResponse]:
        return await self.get_trend([{"id": "$pageview", "math": "dau"}], window, interval=interval, kind="visitors")

    async def get_pageviews_total(self, window: TimeWindow) -> Optional[PostHogTrendResponse]:
        return await self.get_trend([{"id": "$pageview", "math": "total"}], window, kind="pageviews")

    async def get_top_pages(self, window: TimeWindow) -> Optional[PostHogTrendResponse]:
        return await self.get_trend([{"id": "$pageview"}], window, breakdown="$current_url", kind="top pages")

    async def get_traffic_sources(self, window: TimeWindow) -> Optional[PostHogTrendResponse]:
        return await self.get_trend([{"id": "$pageview"}], window, breakdown="$referrer", kind="sources")

    async def get_events(self) -> Optional[PostHogEventsResponse]:
        payload = await self._request("events", "GET", "events/")
        return self._validate("events", payload, PostHogEventsResponse)

    # AnalyticsSource

    async def visitor_trend(self, window: TimeWindow, interval: BucketInterval) -> Optional[list[MetricPoint]]:
        trend = await self.get_visitors_trend(window, interval)
        return None if trend is None else parse_timeseries(trend)

    async def pageview_total(self, window: TimeWindow) -> Optional[Number]:
        trend = await self.get_pageviews_total(window)
        return None if trend is None else extract_aggregated_value(trend)

    async def top_pages(self, window: TimeWindow) -> Optional[list[BreakdownRow]]:
        trend = await self.get_top_pages(window)
        return None if trend is None else parse_breakdown_rows(trend)

    async def traffic_sources(self, window: TimeWindow) -> Optional[list[BreakdownRow]]:
        trend = await self.get_traffic_sources(window)
        return None if trend is None else parse_breakdown_rows(trend)

    async def events(self) -> Optional[list[EventRow]]:
        listing = await self.get_events()
        return None if listing is None else parse_event_rows(listing)
