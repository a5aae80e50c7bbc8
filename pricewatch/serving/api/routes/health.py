"""
Health Check Endpoints
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pricewatch.serving.api.deps import AppState, get_app_state

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
def health_check(state: AppState = Depends(get_app_state)) -> HealthResponse:
    """
    Health check endpoint.

    Reports the catalog size; an empty catalog is "degraded", not down.
    """
    items = state.catalog.load()
    catalog_status = "healthy" if items else "empty"

    return HealthResponse(
        status="healthy" if items else "degraded",
        version=state.settings.version,
        environment=state.settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks={"catalog": {"status": catalog_status, "items": len(items)}},
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Liveness check endpoint."""
    return {"status": "alive"}
