import logging

from fastapi import APIRouter, Request

from consult_invoice.config import get_settings
from consult_invoice.middleware.rate_limit import HEALTH_RATE_LIMIT, limiter
from consult_invoice.models import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
@limiter.limit(HEALTH_RATE_LIMIT)
async def health_check(request: Request) -> HealthResponse:
    settings = get_settings()
    reconciler = getattr(request.app.state, "reconciler", None)

    if reconciler is None:
        return HealthResponse(
            status="unhealthy",
            environment=settings.env,
            checks={"reconciler": "not_initialized"},
        )

    checks = reconciler.source_checks()
    # Sources degrade to empty lists, so a missing one is degraded, not down
    if all(v == "not_configured" for v in checks.values()):
        status = "unhealthy"
    elif any(v == "not_configured" for v in checks.values()):
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(status=status, environment=settings.env, checks=checks)
