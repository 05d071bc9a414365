"""FastAPI dependencies for configuration and the analytics pipeline."""

from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request

from dashstats.core.config import PostHogConfig, Settings, build_posthog_config, settings
from dashstats.integrations.base import AnalyticsSource
from dashstats.integrations.posthog_client import PostHogClient
from dashstats.services.aggregation_service import AnalyticsAggregationService


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return getattr(request.app.state, "settings", settings)


def get_posthog_config(
    cfg: Annotated[Settings, Depends(get_settings)],
) -> PostHogConfig:
    """Resolve PostHog credentials; raises ConfigurationException when missing."""
    return build_posthog_config(cfg)


async def get_analytics_source(
    config: Annotated[PostHogConfig, Depends(get_posthog_config)],
) -> AsyncGenerator[AnalyticsSource, None]:
    """PostHog client scoped to a single request."""
    async with PostHogClient(config) as client:
        yield client


def get_aggregation_service(
    source: Annotated[AnalyticsSource, Depends(get_analytics_source)],
    cfg: Annotated[Settings, Depends(get_settings)],
) -> AnalyticsAggregationService:
    return AnalyticsAggregationService(source, timeout=cfg.ANALYTICS_REQUEST_TIMEOUT)


# Convenience type aliases
AppSettings = Annotated[Settings, Depends(get_settings)]
AggregationService = Annotated[AnalyticsAggregationService, Depends(get_aggregation_service)]
