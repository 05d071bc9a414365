"""Health check endpoints for monitoring."""

from fastapi import APIRouter

from dashstats.api.deps import AppSettings
from dashstats.core.config import is_posthog_configured

router = APIRouter(tags=["health"])


@router.get("/health", response_model=dict)
async def health_check(cfg: AppSettings):
    """Health check endpoint for load balancers and monitoring."""
    analytics_status = "configured" if is_posthog_configured(cfg) else "not configured"

    return {
        "status": "ok" if analytics_status == "configured" else "degraded",
        "service": cfg.APP_NAME,
        "analytics": analytics_status,
    }


@router.get("/health/ready", response_model=dict)
async def readiness_check(cfg: AppSettings):
    """Kubernetes readiness probe."""
    return {"ready": is_posthog_configured(cfg)}


@router.get("/health/live", response_model=dict)
async def liveness_check():
    """Kubernetes liveness probe."""
    return {"alive": True}
