# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Idea registration: creates the aggregate that owns a team.
"""

from typing import Any, Optional

from team_service.core.logging import get_logger
from team_service.metrics.prometheus import IDEAS_CREATED
from team_service.models.domain import AccessLevel, IdeaAggregate, utcnow
from team_service.services import completion, composition
from team_service.services.permissions import can_view, require_view

logger = get_logger(__name__)


class IdeaService:
    """Business logic for ideas."""

    def __init__(self, idea_repo) -> None:
        self._ideas = idea_repo

    def create_idea(
        self,
        author_id: str,
        title: str,
        description: str = "",
        category: Optional[str] = None,
        access_level: AccessLevel | str = AccessLevel.PUBLIC,
        roles_needed: Optional[list[dict[str, Any]]] = None,
    ) -> IdeaAggregate:
        """Register an idea with its declared roles.
        Raises ValidationError for duplicate role names or bad priorities."""
        idea = IdeaAggregate(
            author_id=author_id,
            title=title.strip(),
            description=description,
            category=category,
            access_level=AccessLevel(access_level),
        )
        for role in roles_needed or []:
            composition.add_role_needed(
                idea,
                role["role_type"],
                is_core=role.get("is_core", True),
                max_positions=role.get("max_positions", 1),
                priority=role.get("priority", 2),
                skills_required=role.get("skills_required"),
                description=role.get("description", ""),
            )
        completion.refresh_max_team_size(idea)
        completion.recompute(idea, utcnow())

        created = self._ideas.create(idea)
        IDEAS_CREATED.inc()
        logger.info(
            "Idea created: id=%s, author=%s, roles=%d",
            created.id, author_id, len(created.roles_needed),
        )
        return created

    def get_idea(self, idea_id: str, viewer_id: str) -> IdeaAggregate:
        idea = self._ideas.load(idea_id)
        require_view(idea, viewer_id)
        return idea

    def list_ideas(
        self,
        viewer_id: Optional[str] = None,
        author_id: Optional[str] = None,
    ) -> list[IdeaAggregate]:
        """Private ideas are left out unless the viewer is on their team."""
        ideas = self._ideas.get_all(author_id=author_id)
        return [i for i in ideas if can_view(i, viewer_id)]
