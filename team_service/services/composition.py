# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Team composition: in-aggregate membership and declared roles.
Pure mutation of an already-loaded IdeaAggregate: no I/O, no permission
checks. Callers persist the aggregate afterwards.

Invariants kept here:
  * ``RoleNeeded.current_positions`` equals the number of active members
    whose normalized role matches it.
  * A subrole points at an active member that is not itself a subrole.
  * Removing a member cascades to its active subroles.
"""

from datetime import datetime
from typing import Optional

from team_service.core.exceptions import CapacityError, NotFoundError, ValidationError
from team_service.models.domain import (
    IdeaAggregate,
    MemberStatus,
    RoleNeeded,
    TeamMember,
    normalize_role,
    utcnow,
)
from team_service.services.completion import refresh_max_team_size


def occupied_positions(idea: IdeaAggregate, normalized_role: str) -> int:
    return sum(
        1 for m in idea.active_members() if m.normalized_role_type == normalized_role
    )


def positions_consistent(idea: IdeaAggregate) -> bool:
    """True when every declared role's counter matches its active occupants."""
    return all(
        r.current_positions == occupied_positions(idea, r.normalized_role_type)
        for r in idea.roles_needed
    )


# ── Declared roles ──

def add_role_needed(
    idea: IdeaAggregate,
    role_type: str,
    is_core: bool = True,
    max_positions: int = 1,
    priority: int = 2,
    skills_required: Optional[list[str]] = None,
    description: str = "",
) -> RoleNeeded:
    """Declare a role. Members already holding it (ad hoc) are counted in."""
    role_type = role_type.strip()
    if not role_type:
        raise ValidationError("Role type is required", details={"role_type": "empty"})
    if idea.role_needed_for(role_type) is not None:
        raise ValidationError(
            f"Role '{role_type}' is already part of the team structure",
            details={"role_type": role_type},
        )
    if priority not in (1, 2, 3):
        raise ValidationError(
            "Priority must be 1 (Critical), 2 (Important), or 3 (Nice-to-have)",
            details={"priority": priority},
        )

    role = RoleNeeded(
        role_type=role_type,
        is_core=is_core,
        max_positions=max_positions,
        priority=priority,
        skills_required=list(skills_required or []),
        description=description,
    )
    role.current_positions = occupied_positions(idea, role.normalized_role_type)
    idea.roles_needed.append(role)
    refresh_max_team_size(idea)
    return role


def remove_role_needed(idea: IdeaAggregate, role_id: str) -> RoleNeeded:
    role = idea.find_role(role_id)
    if role is None:
        raise NotFoundError("Role", role_id)
    if occupied_positions(idea, role.normalized_role_type) > 0:
        raise CapacityError(
            f"Cannot remove role '{role.role_type}' that has active team members"
        )
    idea.roles_needed = [r for r in idea.roles_needed if r.id != role_id]
    refresh_max_team_size(idea)
    return role


def expand_role_capacity(idea: IdeaAggregate, role: str) -> RoleNeeded:
    """Raise a declared role's capacity by one, declaring it with two seats
    when it did not exist yet."""
    existing = idea.role_needed_for(role)
    if existing is not None:
        existing.max_positions += 1
        refresh_max_team_size(idea)
        return existing
    return add_role_needed(idea, role, max_positions=2, priority=2)


# ── Members ──

def _validate_parent(idea: IdeaAggregate, parent_role_id: str) -> TeamMember:
    parent = idea.find_member(parent_role_id)
    if parent is None:
        raise NotFoundError("Parent team member", parent_role_id)
    if parent.is_subrole:
        raise ValidationError(
            "Subroles cannot have subroles of their own",
            details={"parent_role_id": parent_role_id},
        )
    return parent


def add_team_member(
    idea: IdeaAggregate,
    user_id: str,
    role: str,
    assigned_by: str,
    is_lead: bool = False,
    parent_role_id: Optional[str] = None,
    approach_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TeamMember:
    """Append an active member and bump the matching declared role, if any.

    Ad hoc roles with no RoleNeeded entry are accepted as-is.
    """
    if user_id == idea.author_id:
        raise ValidationError("The idea author is already part of the team")
    if parent_role_id is not None:
        _validate_parent(idea, parent_role_id)

    member = TeamMember(
        user_id=user_id,
        assigned_role=role.strip(),
        role_type=role.strip(),
        is_lead=is_lead,
        parent_role_id=parent_role_id,
        approach_id=approach_id,
        assigned_at=now or utcnow(),
        assigned_by=assigned_by,
    )
    declared = idea.role_needed_for(member.normalized_role_type)
    if declared is not None:
        declared.current_positions += 1
    idea.team_composition.append(member)
    return member


def _retire(idea: IdeaAggregate, member: TeamMember, removed_by: str, now: datetime) -> None:
    member.status = MemberStatus.REMOVED
    member.removed_at = now
    member.removed_by = removed_by
    declared = idea.role_needed_for(member.normalized_role_type)
    if declared is not None and declared.current_positions > 0:
        declared.current_positions -= 1


def active_subroles(idea: IdeaAggregate, parent_id: str) -> list[TeamMember]:
    return [m for m in idea.active_members() if m.parent_role_id == parent_id]


def remove_team_member(
    idea: IdeaAggregate,
    member_id: str,
    removed_by: str,
    now: Optional[datetime] = None,
) -> tuple[TeamMember, list[TeamMember]]:
    """Soft-remove a member and every active subrole under it.
    Returns (removed member, cascaded subroles)."""
    member = idea.find_member(member_id)
    if member is None:
        raise NotFoundError("Team member", member_id)
    now = now or utcnow()
    cascaded = active_subroles(idea, member.id)
    _retire(idea, member, removed_by, now)
    for subrole in cascaded:
        _retire(idea, subrole, removed_by, now)
    return member, cascaded


def change_member_role(idea: IdeaAggregate, member: TeamMember, new_role: str) -> TeamMember:
    """Move an active member to another role, keeping both counters right."""
    previous = idea.role_needed_for(member.normalized_role_type)
    if previous is not None and previous.current_positions > 0:
        previous.current_positions -= 1
    member.assigned_role = new_role.strip()
    member.role_type = new_role.strip()
    member.normalized_role_type = normalize_role(new_role)
    target = idea.role_needed_for(member.normalized_role_type)
    if target is not None:
        target.current_positions += 1
    return member
