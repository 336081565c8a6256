# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Role catalog endpoints.
"""

from fastapi import APIRouter, Depends

from team_service.core.dependencies import get_catalog_service
from team_service.services.catalog_service import RoleCatalogService

router = APIRouter(prefix="/api/v1/roles", tags=["Roles"])


@router.get("/stats")
def role_stats(service: RoleCatalogService = Depends(get_catalog_service)):
    """Catalog size, per-category usage and the most used roles."""
    return service.get_role_stats()
