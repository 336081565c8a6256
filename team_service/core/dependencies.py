# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire repositories and services.
"""

from typing import Optional

from fastapi import Header, HTTPException
from sqlalchemy import create_engine

from team_service.core.config import settings
from team_service.repositories import IdeaRepository, RoleCatalogRepository, SqlIdeaRepository
from team_service.services.approach_service import ApproachService
from team_service.services.catalog_service import RoleCatalogService
from team_service.services.collaboration_client import CollaborationClient
from team_service.services.identity_client import IdentityClient
from team_service.services.idea_service import IdeaService
from team_service.services.resolution import ResolutionStrategyEngine
from team_service.services.suggestion_service import RoleSuggestionService
from team_service.services.team_service import TeamService


def _build_idea_repo():
    if settings.STORAGE_BACKEND == "sql":
        engine = create_engine(
            settings.DATABASE_URL,
            pool_pre_ping=True,
            pool_size=settings.POOL_SIZE,
            max_overflow=settings.MAX_OVERFLOW,
            pool_recycle=settings.POOL_RECYCLE,
        )
        return SqlIdeaRepository(engine)
    return IdeaRepository()


# ── Singleton repository instances ──
_idea_repo = _build_idea_repo()
_role_catalog = RoleCatalogRepository()
_identity_client = IdentityClient()
_collaboration_client = CollaborationClient()

# ── Service instances (with injected dependencies) ──
_catalog_service = RoleCatalogService(catalog=_role_catalog)
_suggestion_service = RoleSuggestionService(catalog=_role_catalog)
_resolution_engine = ResolutionStrategyEngine()
_idea_service = IdeaService(idea_repo=_idea_repo)
_approach_service = ApproachService(
    idea_repo=_idea_repo,
    suggestion_service=_suggestion_service,
    engine=_resolution_engine,
    catalog_service=_catalog_service,
)
_team_service = TeamService(
    idea_repo=_idea_repo,
    suggestion_service=_suggestion_service,
    identity_client=_identity_client,
)


# ── FastAPI dependency functions ──
def get_idea_service() -> IdeaService:
    return _idea_service


def get_approach_service() -> ApproachService:
    return _approach_service


def get_team_service() -> TeamService:
    return _team_service


def get_catalog_service() -> RoleCatalogService:
    return _catalog_service


def get_collaboration_client() -> CollaborationClient:
    return _collaboration_client


def get_idea_repo():
    return _idea_repo


def get_role_catalog() -> RoleCatalogRepository:
    return _role_catalog


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Authenticated caller, as forwarded by the API gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-ID header")
    return x_user_id.strip()
