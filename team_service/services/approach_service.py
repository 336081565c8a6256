# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Approach lifecycle: the state machine that turns a candidate's
application into a team seat.

Status table (no way back to pending, no self-transitions):
    pending  ─► selected | declined | queued
    selected ─► declined | queued
    declined ─► selected | queued
    queued   ─► selected | declined

Selecting runs conflict detection first. A conflict without an explicit
resolution aborts with NO mutation and hands the conflict back to the
caller; with a resolution the strategy engine takes over. Every mutation is
saved as one versioned write of the whole aggregate.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from team_service.core.exceptions import (
    ConcurrencyError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from team_service.core.logging import get_logger
from team_service.metrics.prometheus import (
    APPROACH_TRANSITIONS,
    APPROACHES_SUBMITTED,
    ROLE_CONFLICTS,
    VERSION_CONFLICTS,
)
from team_service.models.domain import (
    Approach,
    ApproachStatus,
    IdeaAggregate,
    TeamMember,
    normalize_role,
    utcnow,
)
from team_service.services import completion, composition
from team_service.services.completion import TeamMetrics
from team_service.services.conflicts import (
    ResolutionOption,
    RoleConflict,
    check_role_conflict,
    resolution_options,
)
from team_service.services.permissions import Action, require, require_view, role_of
from team_service.services.resolution import Resolution, ResolutionResult, ResolutionStrategyEngine
from team_service.services.suggestion_service import RoleSuggestionService, RoleSuggestions

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: dict[ApproachStatus, set[ApproachStatus]] = {
    ApproachStatus.PENDING: {ApproachStatus.SELECTED, ApproachStatus.DECLINED, ApproachStatus.QUEUED},
    ApproachStatus.SELECTED: {ApproachStatus.DECLINED, ApproachStatus.QUEUED},
    ApproachStatus.DECLINED: {ApproachStatus.SELECTED, ApproachStatus.QUEUED},
    ApproachStatus.QUEUED: {ApproachStatus.SELECTED, ApproachStatus.DECLINED},
}


class CollaborationIntent(BaseModel):
    """Handed to the collaboration collaborator once a candidate is selected."""
    author_id: str
    candidate_id: str
    idea_id: str
    approach_id: str


class ConflictReport(BaseModel):
    conflict: RoleConflict
    suggestions: Optional[RoleSuggestions] = None
    resolution_options: list[ResolutionOption] = Field(default_factory=list)


class ApproachOutcome(BaseModel):
    success: bool
    approach: Approach
    previous_status: ApproachStatus
    conflict: Optional[ConflictReport] = None
    resolution: Optional[ResolutionResult] = None
    member: Optional[TeamMember] = None
    removed_members: list[TeamMember] = Field(default_factory=list)
    intent: Optional[CollaborationIntent] = None
    team_metrics: TeamMetrics
    message: str


def validate_transition(current: ApproachStatus, target: ApproachStatus) -> None:
    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidTransitionError(current.value, target.value, [s.value for s in allowed])


def build_conflict_report(
    conflict: RoleConflict,
    idea: IdeaAggregate,
    suggestions: RoleSuggestionService,
    context: Optional[dict[str, Any]] = None,
) -> ConflictReport:
    """Conflict descriptor enriched with suggestions and applicable strategies."""
    if not conflict.has_conflict:
        return ConflictReport(conflict=conflict)
    return ConflictReport(
        conflict=conflict,
        suggestions=suggestions.generate_resolution_suggestions(
            conflict.requested_role, idea, context
        ),
        resolution_options=resolution_options(conflict),
    )


class ApproachService:
    """Business logic for candidate approaches."""

    def __init__(
        self,
        idea_repo,
        suggestion_service: RoleSuggestionService,
        engine: ResolutionStrategyEngine,
        catalog_service=None,
    ) -> None:
        self._ideas = idea_repo
        self._suggestions = suggestion_service
        self._engine = engine
        self._catalog = catalog_service

    # ── Commands ──

    def submit_approach(
        self,
        user_id: str,
        idea_id: str,
        role: str,
        description: str = "",
    ) -> Approach:
        """A candidate applies for a role. Raises ValidationError on bad input."""
        idea = self._ideas.load(idea_id)
        role = role.strip()
        if not role:
            raise ValidationError("Role is required", details={"role": "empty"})
        if user_id == idea.author_id:
            raise ValidationError("The idea author cannot approach their own idea")
        if idea.active_member_for_user(user_id) is not None:
            raise ValidationError("User is already a team member")
        duplicate = next(
            (a for a in idea.approaches
             if a.user_id == user_id
             and a.status in (ApproachStatus.PENDING, ApproachStatus.QUEUED)
             and normalize_role(a.role) == normalize_role(role)),
            None,
        )
        if duplicate is not None:
            raise ValidationError(
                f"An open approach for '{role}' already exists",
                details={"approach_id": duplicate.id},
            )

        approach = Approach(user_id=user_id, role=role, description=description)
        idea.approaches.append(approach)
        self._save(idea)

        APPROACHES_SUBMITTED.inc()
        logger.info("Approach submitted: idea=%s, user=%s, role=%s", idea.id, user_id, role)
        return approach

    def update_approach_status(
        self,
        actor_id: str,
        idea_id: str,
        approach_id: str,
        target_status: ApproachStatus | str,
        resolution: Optional[Resolution] = None,
    ) -> ApproachOutcome:
        """
        Drive one approach through the status table.
        Raises PermissionError, NotFoundError, InvalidTransitionError,
        ConcurrencyError. A role conflict is NOT raised: it comes back in
        ``ApproachOutcome.conflict`` with ``success=False``.
        """
        idea = self._ideas.load(idea_id)
        require(Action.MANAGE_APPROACH, role_of(idea, actor_id))

        approach = idea.find_approach(approach_id)
        if approach is None:
            raise NotFoundError("Approach", approach_id)

        target = ApproachStatus(target_status)
        previous = approach.status
        validate_transition(previous, target)

        now = utcnow()
        member: Optional[TeamMember] = None
        removed: list[TeamMember] = []
        result: Optional[ResolutionResult] = None

        if target == ApproachStatus.SELECTED:
            conflict = check_role_conflict(idea, approach.role)
            if conflict.has_conflict:
                ROLE_CONFLICTS.labels(conflict_type=conflict.conflict_type.value).inc()
                if resolution is None:
                    logger.info(
                        "Selection blocked by %s conflict: idea=%s, approach=%s, role=%s",
                        conflict.conflict_type.value, idea.id, approach.id, approach.role,
                    )
                    report = build_conflict_report(conflict, idea, self._suggestions)
                    return ApproachOutcome(
                        success=False,
                        approach=approach,
                        previous_status=previous,
                        conflict=report,
                        team_metrics=completion.get_team_metrics(idea),
                        message=conflict.message,
                    )
                result = self._engine.apply(idea, approach, conflict, resolution, actor_id, now)
                member = result.member
                if result.removed_member is not None:
                    removed = [result.removed_member, *result.removed_subroles]
            else:
                member = composition.add_team_member(
                    idea, approach.user_id, approach.role, actor_id,
                    approach_id=approach.id, now=now,
                )
                self._stamp(approach, ApproachStatus.SELECTED, actor_id, now)
                completion.recompute(idea, now)
        else:
            if previous == ApproachStatus.SELECTED:
                removed = self._release_seat(idea, approach, actor_id, now)
                completion.recompute(idea, now)
            self._stamp(approach, target, actor_id, now)

        self._save(idea)
        if member is not None and self._catalog is not None:
            self._catalog.record_usage(member.role_type)
        APPROACH_TRANSITIONS.labels(
            from_status=previous.value, to_status=approach.status.value
        ).inc()
        logger.info(
            "Approach status updated: idea=%s, approach=%s, %s -> %s",
            idea.id, approach.id, previous.value, approach.status.value,
        )

        intent = None
        if approach.status == ApproachStatus.SELECTED:
            intent = CollaborationIntent(
                author_id=idea.author_id,
                candidate_id=approach.user_id,
                idea_id=idea.id,
                approach_id=approach.id,
            )
        message = result.message if result else f"Approach {approach.status.value} successfully"
        return ApproachOutcome(
            success=True,
            approach=approach,
            previous_status=previous,
            resolution=result,
            member=member,
            removed_members=removed,
            intent=intent,
            team_metrics=completion.get_team_metrics(idea),
            message=message,
        )

    # ── Queries ──

    def list_approaches(
        self,
        viewer_id: str,
        idea_id: str,
        status: Optional[ApproachStatus] = None,
    ) -> list[Approach]:
        idea = self._ideas.load(idea_id)
        require_view(idea, viewer_id)
        if status is None:
            return idea.approaches
        return [a for a in idea.approaches if a.status == status]

    # ── Internal ──

    @staticmethod
    def _stamp(approach: Approach, status: ApproachStatus, actor_id: str, now) -> None:
        approach.status = status
        approach.status_updated_at = now
        approach.status_updated_by = actor_id

    @staticmethod
    def _release_seat(idea: IdeaAggregate, approach: Approach, actor_id: str, now) -> list[TeamMember]:
        """Un-selecting an approach frees the seat it produced, if still held."""
        seat = next(
            (m for m in idea.active_members() if m.approach_id == approach.id), None
        )
        if seat is None:
            return []
        removed, cascaded = composition.remove_team_member(idea, seat.id, actor_id, now=now)
        return [removed, *cascaded]

    def _save(self, idea: IdeaAggregate) -> IdeaAggregate:
        try:
            return self._ideas.save(idea)
        except ConcurrencyError:
            VERSION_CONFLICTS.inc()
            logger.warning("Stale write rejected: idea=%s, version=%s", idea.id, idea.version)
            raise
