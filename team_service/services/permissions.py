# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Permission evaluation: pure computation, no side effects.

Capability matrix over the three team roles (author, team leader, member)
plus outsiders. The author is never part of ``team_composition``; their
role is derived from ``IdeaAggregate.author_id``.
"""

from enum import Enum
from typing import NamedTuple, Optional

from team_service.core.exceptions import PermissionError
from team_service.models.domain import AccessLevel, IdeaAggregate


class TeamRole(str, Enum):
    AUTHOR = "author"
    TEAM_LEADER = "team_leader"
    MEMBER = "member"
    OUTSIDER = "outsider"


class Action(str, Enum):
    ADD_ROLE = "add_role"
    REMOVE_ROLE = "remove_role"
    CHANGE_LEADERSHIP = "change_leadership"
    UPDATE_MEMBER_ROLE = "update_member_role"
    MANAGE_APPROACH = "manage_approach"
    REMOVE_MEMBER = "remove_member"
    ADD_SUBROLE = "add_subrole"
    REMOVE_SUBROLE = "remove_subrole"
    VIEW_SUBROLES = "view_subroles"


class Decision(NamedTuple):
    allowed: bool
    reason: Optional[str] = None


ALLOW = Decision(True)

AUTHOR_ONLY: dict[Action, str] = {
    Action.ADD_ROLE: "Only the idea author can add roles",
    Action.REMOVE_ROLE: "Only the idea author can remove roles",
    Action.CHANGE_LEADERSHIP: "Only the idea author can promote or demote team leaders",
    Action.UPDATE_MEMBER_ROLE: "Only the idea author can change a member's role",
    Action.MANAGE_APPROACH: "Only the idea author can manage approaches",
}


def role_of(idea: IdeaAggregate, user_id: str) -> TeamRole:
    """Derive the caller's team role from the aggregate."""
    if user_id == idea.author_id:
        return TeamRole.AUTHOR
    member = idea.active_member_for_user(user_id)
    if member is None:
        return TeamRole.OUTSIDER
    return TeamRole.TEAM_LEADER if member.is_lead else TeamRole.MEMBER


def evaluate(
    action: Action,
    actor_role: TeamRole,
    target_role: Optional[TeamRole] = None,
    is_owner: bool = False,
) -> Decision:
    """
    Decide whether ``actor_role`` may perform ``action`` on ``target_role``.
    ``is_owner`` marks that the target subrole hangs under the actor's own
    primary role.
    """
    if action in AUTHOR_ONLY:
        if actor_role == TeamRole.AUTHOR:
            return ALLOW
        return Decision(False, AUTHOR_ONLY[action])

    if action == Action.REMOVE_MEMBER:
        if target_role == TeamRole.AUTHOR:
            return Decision(False, "Cannot remove the idea author from the team")
        if actor_role == TeamRole.AUTHOR:
            return ALLOW
        if actor_role != TeamRole.TEAM_LEADER:
            return Decision(False, "Only the idea author or team leaders can remove team members")
        if target_role == TeamRole.TEAM_LEADER:
            return Decision(
                False,
                "Team leaders cannot remove other team leaders. "
                "Only the idea author can remove team leaders.",
            )
        return ALLOW

    if action in (Action.ADD_SUBROLE, Action.REMOVE_SUBROLE):
        if actor_role == TeamRole.AUTHOR:
            return ALLOW
        if actor_role in (TeamRole.TEAM_LEADER, TeamRole.MEMBER) and is_owner:
            return ALLOW
        return Decision(False, "Only the idea author or the parent member can manage subroles")

    if action == Action.VIEW_SUBROLES:
        if actor_role == TeamRole.OUTSIDER:
            return Decision(False, "Only team members can view subroles")
        return ALLOW

    return Decision(False, f"Unknown action '{action}'")


def require(
    action: Action,
    actor_role: TeamRole,
    target_role: Optional[TeamRole] = None,
    is_owner: bool = False,
) -> None:
    """Raise PermissionError when ``evaluate`` denies."""
    decision = evaluate(action, actor_role, target_role, is_owner)
    if not decision.allowed:
        raise PermissionError(decision.reason)


def can_view(idea: IdeaAggregate, viewer_id: Optional[str]) -> bool:
    """Private ideas are visible to the author and active members only."""
    if idea.access_level != AccessLevel.PRIVATE:
        return True
    return viewer_id is not None and role_of(idea, viewer_id) != TeamRole.OUTSIDER


def require_view(idea: IdeaAggregate, viewer_id: str) -> None:
    if not can_view(idea, viewer_id):
        raise PermissionError("Access denied to private idea")
