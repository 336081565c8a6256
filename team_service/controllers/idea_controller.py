# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Idea and approach endpoints.
Thin HTTP layer — delegates ALL logic to IdeaService / ApproachService.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from team_service.core.dependencies import (
    get_approach_service,
    get_collaboration_client,
    get_current_user_id,
    get_idea_service,
)
from team_service.models.domain import ApproachStatus
from team_service.schemas.team import (
    ApproachCreateRequest,
    ApproachStatusUpdateRequest,
    IdeaCreateRequest,
)
from team_service.services.approach_service import ApproachService
from team_service.services.collaboration_client import CollaborationClient
from team_service.services.completion import get_team_metrics
from team_service.services.idea_service import IdeaService

router = APIRouter(prefix="/api/v1", tags=["Ideas"])


# ── Ideas ──

@router.post("/ideas", status_code=status.HTTP_201_CREATED)
def create_idea(
    payload: IdeaCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service),
):
    """Register an idea with the roles its team needs."""
    idea = service.create_idea(
        author_id=user_id,
        title=payload.title,
        description=payload.description,
        category=payload.category,
        access_level=payload.access_level,
        roles_needed=[r.model_dump() for r in payload.roles_needed],
    )
    return idea.model_dump(mode="json")


@router.get("/ideas")
def list_ideas(
    author_id: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service),
):
    ideas = service.list_ideas(viewer_id=user_id, author_id=author_id)
    return [i.model_dump(mode="json") for i in ideas]


@router.get("/ideas/{idea_id}")
def get_idea(
    idea_id: str,
    user_id: str = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service),
):
    idea = service.get_idea(idea_id, user_id)
    body = idea.model_dump(mode="json")
    body["team_metrics"] = get_team_metrics(idea).model_dump()
    return body


# ── Approaches ──

@router.post("/ideas/{idea_id}/approaches", status_code=status.HTTP_201_CREATED)
def submit_approach(
    idea_id: str,
    payload: ApproachCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: ApproachService = Depends(get_approach_service),
):
    """Apply for a role on an idea."""
    approach = service.submit_approach(
        user_id=user_id,
        idea_id=idea_id,
        role=payload.role,
        description=payload.description,
    )
    return approach.model_dump(mode="json")


@router.get("/ideas/{idea_id}/approaches")
def list_approaches(
    idea_id: str,
    status_filter: Optional[ApproachStatus] = Query(default=None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    service: ApproachService = Depends(get_approach_service),
):
    approaches = service.list_approaches(user_id, idea_id, status=status_filter)
    return [a.model_dump(mode="json") for a in approaches]


@router.patch("/ideas/{idea_id}/approaches/{approach_id}/status")
def update_approach_status(
    idea_id: str,
    approach_id: str,
    payload: ApproachStatusUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: ApproachService = Depends(get_approach_service),
    collaboration: CollaborationClient = Depends(get_collaboration_client),
):
    """Move an approach through its lifecycle.

    A role conflict without ``resolution`` answers 200 with ``success: false``
    and the conflict report; nothing is changed.
    """
    outcome = service.update_approach_status(
        actor_id=user_id,
        idea_id=idea_id,
        approach_id=approach_id,
        target_status=payload.status,
        resolution=payload.resolution,
    )
    if outcome.intent is not None:
        collaboration.dispatch(outcome.intent)
    return outcome.model_dump(mode="json")
