# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints — health, readiness, metrics.
Pure HTTP layer — no business logic.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from team_service.core.config import settings
from team_service.core.dependencies import get_idea_repo, get_role_catalog

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Liveness probe for Docker and orchestration."""
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "storage": settings.STORAGE_BACKEND,
    }


@router.get("/health/ready")
def readiness_check():
    """Readiness probe — the idea store answers and the catalog is loaded."""
    try:
        ideas = get_idea_repo().count()
    except Exception as exc:
        raise HTTPException(status_code=503, detail=f"Idea store unavailable: {exc}")
    catalog_size = get_role_catalog().count()
    return {
        "status": "ready",
        "service": settings.SERVICE_NAME,
        "ideas_count": ideas,
        "catalog_loaded": catalog_size > 0,
        "catalog_roles": catalog_size,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
