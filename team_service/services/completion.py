# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Team completion tracking: pure computation over the aggregate.

``team_formation_date`` records when the team was *first* complete. It is
stamped once and survives later removals that make the team incomplete.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from team_service.metrics.prometheus import TEAMS_COMPLETED
from team_service.models.domain import IdeaAggregate, utcnow


class TeamMetrics(BaseModel):
    max_team_size: int
    current_size: int
    open_positions: int
    completion_percentage: int
    core_roles_filled: int
    total_core_roles: int


def refresh_max_team_size(idea: IdeaAggregate) -> None:
    """Author plus every declared position. Ad hoc members never change it."""
    idea.max_team_size = 1 + sum(r.max_positions for r in idea.roles_needed)


def recompute(idea: IdeaAggregate, now: Optional[datetime] = None) -> bool:
    """
    Refresh completeness flags after a structural mutation.
    Returns True when this call stamped ``team_formation_date``.
    """
    now = now or utcnow()
    idea.current_team_size = 1 + len(idea.active_members())

    filled = sum(r.current_positions for r in idea.roles_needed)
    capacity = sum(r.max_positions for r in idea.roles_needed)
    idea.is_team_complete = filled >= capacity
    idea.last_team_update = now

    if idea.is_team_complete and idea.team_formation_date is None:
        idea.team_formation_date = now
        TEAMS_COMPLETED.inc()
        return True
    return False


def get_team_metrics(idea: IdeaAggregate) -> TeamMetrics:
    capacity = sum(r.max_positions for r in idea.roles_needed)
    filled = sum(min(r.current_positions, r.max_positions) for r in idea.roles_needed)
    open_positions = sum(
        max(r.max_positions - r.current_positions, 0) for r in idea.roles_needed
    )
    percentage = round(filled / capacity * 100) if capacity else 100
    core_roles = [r for r in idea.roles_needed if r.is_core]
    return TeamMetrics(
        max_team_size=idea.max_team_size,
        current_size=1 + len(idea.active_members()),
        open_positions=open_positions,
        completion_percentage=min(percentage, 100),
        core_roles_filled=sum(1 for r in core_roles if r.is_full),
        total_core_roles=len(core_roles),
    )
