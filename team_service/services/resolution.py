# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Conflict resolution strategies.

A resolution is a closed tagged union: each variant names one strategy and
carries only the fields that strategy needs. FastAPI parses it straight from
the request body through the ``kind`` discriminator.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from team_service.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from team_service.core.logging import get_logger
from team_service.metrics.prometheus import RESOLUTIONS_APPLIED
from team_service.models.domain import (
    Approach,
    ApproachStatus,
    IdeaAggregate,
    RoleNeeded,
    TeamMember,
    normalize_role,
    utcnow,
)
from team_service.services import completion, composition
from team_service.services.conflicts import RoleConflict, check_role_conflict
from team_service.services.permissions import Action, require, role_of

logger = get_logger(__name__)


class CreateSubrole(BaseModel):
    kind: Literal["create_subrole"] = "create_subrole"
    suggested_role: Optional[str] = Field(default=None, max_length=255)
    is_lead: bool = False


class ReplaceExisting(BaseModel):
    kind: Literal["replace_existing"] = "replace_existing"
    member_id: Optional[str] = None


class ExpandCapacity(BaseModel):
    kind: Literal["expand_capacity"] = "expand_capacity"


class Decline(BaseModel):
    kind: Literal["decline"] = "decline"


Resolution = Annotated[
    Union[CreateSubrole, ReplaceExisting, ExpandCapacity, Decline],
    Field(discriminator="kind"),
]

RESOLVABLE_STATUSES = (ApproachStatus.PENDING, ApproachStatus.QUEUED)


class ResolutionResult(BaseModel):
    action: str
    member: Optional[TeamMember] = None
    removed_member: Optional[TeamMember] = None
    removed_subroles: list[TeamMember] = Field(default_factory=list)
    expanded_role: Optional[RoleNeeded] = None
    message: str


class ResolutionStrategyEngine:
    """Applies one explicit strategy to a detected role conflict."""

    def __init__(self) -> None:
        self._handlers = {
            CreateSubrole: self._create_subrole,
            ReplaceExisting: self._replace_existing,
            ExpandCapacity: self._expand_capacity,
            Decline: self._decline,
        }

    def apply(
        self,
        idea: IdeaAggregate,
        approach: Approach,
        conflict: RoleConflict,
        resolution: Resolution,
        actor_id: str,
        now: Optional[datetime] = None,
    ) -> ResolutionResult:
        """
        Mutates ``idea`` in memory; the caller persists it.
        Raises PermissionError, InvalidTransitionError, NotFoundError or
        ValidationError before touching anything.
        """
        require(Action.MANAGE_APPROACH, role_of(idea, actor_id))
        if approach.status not in RESOLVABLE_STATUSES:
            raise InvalidTransitionError(
                approach.status.value,
                ApproachStatus.SELECTED.value,
                [s.value for s in RESOLVABLE_STATUSES],
            )

        now = now or utcnow()
        result = self._handlers[type(resolution)](idea, approach, conflict, resolution, actor_id, now)

        approach.status = (
            ApproachStatus.DECLINED if isinstance(resolution, Decline) else ApproachStatus.SELECTED
        )
        approach.status_updated_at = now
        approach.status_updated_by = actor_id
        if not isinstance(resolution, Decline):
            completion.recompute(idea, now)

        RESOLUTIONS_APPLIED.labels(strategy=resolution.kind).inc()
        logger.info(
            "Resolution applied: idea=%s, approach=%s, strategy=%s",
            idea.id, approach.id, resolution.kind,
        )
        return result

    # ── Strategies ──

    def _create_subrole(self, idea, approach, conflict, resolution, actor_id, now):
        requested = approach.role.strip()
        title = (resolution.suggested_role or "").strip() or f"Senior {requested}"
        if normalize_role(title) == normalize_role(requested):
            raise ValidationError(
                "A subrole needs a name distinct from the contested role",
                details={"suggested_role": title},
            )
        clash = check_role_conflict(idea, title)
        if clash.has_conflict:
            raise ValidationError(
                f"Subrole '{title}' is not available: {clash.message}",
                details={"suggested_role": title},
            )

        holder = conflict.existing_member or next(
            (m for m in idea.active_members()
             if m.normalized_role_type == normalize_role(requested)),
            None,
        )
        parent_id = None
        if holder is not None:
            parent_id = holder.parent_role_id or holder.id

        member = composition.add_team_member(
            idea, approach.user_id, title, actor_id,
            is_lead=resolution.is_lead,
            parent_role_id=parent_id,
            approach_id=approach.id,
            now=now,
        )
        return ResolutionResult(
            action="subrole_created",
            member=member,
            message=f"Candidate added as {title}",
        )

    def _replace_existing(self, idea, approach, conflict, resolution, actor_id, now):
        key = normalize_role(approach.role)
        if resolution.member_id:
            holder = idea.find_member(resolution.member_id)
            if holder is None or holder.normalized_role_type != key:
                raise NotFoundError("Team member holding role", resolution.member_id)
        else:
            holder = conflict.existing_member
            if holder is None:
                raise NotFoundError("Team member holding role", approach.role)

        removed, cascaded = composition.remove_team_member(idea, holder.id, actor_id, now=now)
        member = composition.add_team_member(
            idea, approach.user_id, approach.role, actor_id,
            is_lead=removed.is_lead,
            parent_role_id=removed.parent_role_id,
            approach_id=approach.id,
            now=now,
        )
        return ResolutionResult(
            action="member_replaced",
            member=member,
            removed_member=removed,
            removed_subroles=cascaded,
            message=f"Candidate replaced {removed.assigned_role}",
        )

    def _expand_capacity(self, idea, approach, conflict, resolution, actor_id, now):
        expanded = composition.expand_role_capacity(idea, approach.role)
        member = composition.add_team_member(
            idea, approach.user_id, approach.role, actor_id,
            approach_id=approach.id,
            now=now,
        )
        return ResolutionResult(
            action="capacity_expanded",
            member=member,
            expanded_role=expanded,
            message=f"Team capacity expanded. Candidate added as {approach.role}",
        )

    def _decline(self, idea, approach, conflict, resolution, actor_id, now):
        return ResolutionResult(action="approach_declined", message="Approach declined")
