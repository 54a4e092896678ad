"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_distance_service_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.distance_client import check_health
    return check_health


@router.get("/health/distance-service", status_code=status.HTTP_200_OK)
def health_distance_service() -> dict:
    """Check the road distance service."""
    if not settings.maps_api_key:
        return {"service": "distance-matrix", "configured": False, "healthy": False}
    check_health = _get_distance_service_check()
    return {"service": "distance-matrix", "configured": True, "healthy": check_health()}
