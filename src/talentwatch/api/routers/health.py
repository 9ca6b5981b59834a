"""Health check endpoints."""

import time
from datetime import UTC, datetime

from fastapi import APIRouter

from talentwatch import __version__
from talentwatch.api.dependencies import ServicesDep
from talentwatch.api.schemas.health import ComponentHealth, HealthResponse, HealthStatus
from talentwatch.services import Services

router = APIRouter(tags=["health"])

HEALTH_PROBE_KEY = "health:probe"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns liveness and blob store status. No authentication required.",
)
async def health_check(services: ServicesDep) -> HealthResponse:
    """Liveness check including a blob store round trip."""
    storage = await _check_storage(services)
    return HealthResponse(
        status=HealthStatus.HEALTHY if storage.status == HealthStatus.HEALTHY else HealthStatus.DEGRADED,
        version=__version__,
        timestamp=datetime.now(UTC),
        storage=storage,
    )


async def _check_storage(services: Services) -> ComponentHealth:
    start = time.perf_counter()
    try:
        await services.store.set(HEALTH_PROBE_KEY, datetime.now(UTC).isoformat())
        await services.store.get(HEALTH_PROBE_KEY)
    except Exception as e:
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"Blob store check failed: {str(e)[:100]}",
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message=f"{services.settings.storage_backend.value} store reachable",
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
    )
