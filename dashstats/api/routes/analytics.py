"""Analytics report routes."""

import logging

from fastapi import APIRouter, Query

from dashstats.api.deps import AggregationService
from dashstats.services.periods import parse_period

router = APIRouter(tags=["analytics"])

logger = logging.getLogger(__name__)


@router.get("", response_model=dict)
async def get_analytics_data(
    service: AggregationService,
    period: str = Query("7d", description="One of day, 7d, 30d, 12mo"),
):
    """Get the analytics report (stats, visitor series, top pages, sources and events)."""
    resolved = parse_period(period)
    if resolved.value != period:
        logger.info("Unrecognized analytics period %r, using %s", period, resolved.value)

    report = await service.build_report(resolved)
    return report.model_dump(by_alias=True, mode="json")
