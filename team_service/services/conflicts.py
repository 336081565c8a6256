# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Role conflict detection: pure reads, no side effects.

A conflict is returned as data. The caller decides how to resolve it; this
module never picks an outcome on its own.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from team_service.models.domain import IdeaAggregate, RoleNeeded, TeamMember, normalize_role


class ConflictType(str, Enum):
    EXACT = "exact"
    CAPACITY = "capacity"


class RoleConflict(BaseModel):
    has_conflict: bool
    conflict_type: Optional[ConflictType] = None
    requested_role: str
    existing_member: Optional[TeamMember] = None
    role_needed: Optional[RoleNeeded] = None
    message: str


class ResolutionOption(BaseModel):
    kind: str
    title: str
    description: str
    suggested_role: Optional[str] = None
    current_member_id: Optional[str] = None
    current_capacity: Optional[int] = None


def check_role_conflict(idea: IdeaAggregate, requested_role: str) -> RoleConflict:
    key = normalize_role(requested_role)

    existing = next(
        (m for m in idea.active_members() if m.normalized_role_type == key), None
    )
    if existing is not None:
        return RoleConflict(
            has_conflict=True,
            conflict_type=ConflictType.EXACT,
            requested_role=requested_role,
            existing_member=existing,
            role_needed=idea.role_needed_for(key),
            message=f"Role '{existing.assigned_role}' is already filled",
        )

    declared = idea.role_needed_for(key)
    if declared is not None and declared.current_positions >= declared.max_positions:
        return RoleConflict(
            has_conflict=True,
            conflict_type=ConflictType.CAPACITY,
            requested_role=requested_role,
            role_needed=declared,
            message=(
                f"Role '{declared.role_type}' is at capacity "
                f"({declared.current_positions}/{declared.max_positions})"
            ),
        )

    return RoleConflict(
        has_conflict=False,
        requested_role=requested_role,
        role_needed=declared,
        message="No conflict",
    )


def resolution_options(conflict: RoleConflict) -> list[ResolutionOption]:
    """The strategies that make sense for a detected conflict."""
    if not conflict.has_conflict:
        return []
    role = conflict.requested_role.strip()
    options = [
        ResolutionOption(
            kind="create_subrole",
            title="Add as Specialized Role",
            description=f"Create a specialized version of {role}",
            suggested_role=f"Senior {role}",
        )
    ]
    if conflict.existing_member is not None:
        options.append(ResolutionOption(
            kind="replace_existing",
            title="Replace Current Member",
            description=f"Replace {conflict.existing_member.assigned_role} with new applicant",
            current_member_id=conflict.existing_member.id,
        ))
    options.append(ResolutionOption(
        kind="decline",
        title="Decline Application",
        description="Politely decline this approach",
    ))
    if conflict.role_needed is not None:
        options.append(ResolutionOption(
            kind="expand_capacity",
            title="Increase Team Capacity",
            description=f"Allow multiple {role}s on the team",
            current_capacity=conflict.role_needed.max_positions,
        ))
    return options
