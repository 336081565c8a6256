# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package — re-exports the idea and role catalog stores."""
from team_service.repositories.idea_repository import IdeaRepository
from team_service.repositories.role_repository import RoleCatalogRepository
from team_service.repositories.sql_idea_repository import SqlIdeaRepository

__all__ = ["IdeaRepository", "RoleCatalogRepository", "SqlIdeaRepository"]
