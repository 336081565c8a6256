# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Team structure endpoints.
Thin HTTP layer — delegates ALL logic to TeamService.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from team_service.core.dependencies import get_current_user_id, get_team_service
from team_service.schemas.team import (
    LeadershipUpdateRequest,
    MemberRoleUpdateRequest,
    RoleCreateRequest,
    SubroleCreateRequest,
)
from team_service.services.team_service import TeamService

router = APIRouter(prefix="/api/v1/teams", tags=["Teams"])


# Registered before "/{idea_id}/..." routes so the literal path wins.
@router.get("/subrole-options")
def subrole_options(
    role_type: str = Query(..., min_length=1),
    service: TeamService = Depends(get_team_service),
):
    """Subrole titles a member can offer under ``role_type``."""
    return {"role_type": role_type, "options": service.get_subrole_options(role_type)}


@router.get("/{idea_id}/structure")
def team_structure(
    idea_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    return service.get_team_structure(idea_id, user_id)


# ── Declared roles ──

@router.post("/{idea_id}/roles", status_code=status.HTTP_201_CREATED)
def add_role(
    idea_id: str,
    payload: RoleCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    return service.add_role(user_id, idea_id, **payload.model_dump())


@router.delete("/{idea_id}/roles/{role_id}")
def remove_role(
    idea_id: str,
    role_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    return service.remove_role(user_id, idea_id, role_id)


@router.get("/{idea_id}/check-conflict")
def check_conflict(
    idea_id: str,
    role: str = Query(..., min_length=1),
    project_type: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    """Would a candidate for ``role`` collide with the current team?"""
    return service.check_conflict(user_id, idea_id, role, {"project_type": project_type})


@router.get("/{idea_id}/role-suggestions")
def role_suggestions(
    idea_id: str,
    role: str = Query(..., min_length=1),
    project_type: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    return service.get_suggestions(user_id, idea_id, role, {"project_type": project_type})


@router.get("/{idea_id}/search-users")
def search_users(
    idea_id: str,
    q: str = Query(..., min_length=2),
    limit: Optional[int] = Query(default=None, ge=1, le=50),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    """Directory search for people who are not on the team yet."""
    users = service.search_candidates(user_id, idea_id, q, limit)
    return {"users": users, "count": len(users)}


# ── Members ──

@router.patch("/{idea_id}/members/{member_id}/role")
def update_member_role(
    idea_id: str,
    member_id: str,
    payload: MemberRoleUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    return service.update_member_role(
        user_id, idea_id, member_id, payload.new_role, is_lead=payload.is_lead
    )


@router.patch("/{idea_id}/members/{member_id}/leadership")
def update_leadership(
    idea_id: str,
    member_id: str,
    payload: LeadershipUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    return service.update_member_leadership(user_id, idea_id, member_id, payload.is_lead)


@router.delete("/{idea_id}/members/{member_id}")
def remove_member(
    idea_id: str,
    member_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    """Remove a member and everyone in a subrole under them."""
    return service.remove_member(user_id, idea_id, member_id)


# ── Subroles ──

@router.post("/{idea_id}/members/{member_id}/subroles", status_code=status.HTTP_201_CREATED)
def add_subrole_member(
    idea_id: str,
    member_id: str,
    payload: SubroleCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    return service.add_subrole_member(
        user_id, idea_id, member_id, payload.user_id,
        title=payload.title, level=payload.level,
    )


@router.get("/{idea_id}/members/{member_id}/subroles")
def list_subroles(
    idea_id: str,
    member_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    return service.get_subroles_for_member(user_id, idea_id, member_id)


@router.delete("/{idea_id}/members/{member_id}/subroles/{subrole_id}")
def remove_subrole_member(
    idea_id: str,
    member_id: str,
    subrole_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    return service.remove_subrole_member(user_id, idea_id, member_id, subrole_id)
