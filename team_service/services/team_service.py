# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Team management: declared roles, members, leaders and subroles.

Every command follows the same shape: load the aggregate, check the actor's
capability, mutate through ``composition``, refresh completion, then one
versioned save. Nothing is written when a check fails.
"""

from typing import Any, Optional

from team_service.core.exceptions import ConcurrencyError, NotFoundError, PermissionError, ValidationError
from team_service.core.logging import get_logger
from team_service.metrics.prometheus import MEMBERS_REMOVED, VERSION_CONFLICTS
from team_service.models.domain import (
    ApproachStatus,
    IdeaAggregate,
    TeamMember,
    normalize_role,
    utcnow,
)
from team_service.services import completion, composition
from team_service.services.approach_service import build_conflict_report
from team_service.services.conflicts import check_role_conflict
from team_service.services.identity_client import IdentityClient
from team_service.services.permissions import Action, TeamRole, evaluate, require, require_view, role_of
from team_service.services.suggestion_service import RoleSuggestionService

logger = get_logger(__name__)


def _target_role(member: TeamMember) -> TeamRole:
    return TeamRole.TEAM_LEADER if member.is_lead else TeamRole.MEMBER


def _default_subrole_title(idea: IdeaAggregate, parent: TeamMember, level: Optional[str]) -> str:
    """``<Level> <parent role>``, numbered when that title is already held."""
    base = f"{(level or 'Junior').strip().title()} {parent.role_type}"
    title, n = base, 1
    while check_role_conflict(idea, title).has_conflict:
        n += 1
        title = f"{base} {n}"
    return title


class TeamService:
    """Business logic for team structure management."""

    def __init__(
        self,
        idea_repo,
        suggestion_service: RoleSuggestionService,
        identity_client: IdentityClient,
    ) -> None:
        self._ideas = idea_repo
        self._suggestions = suggestion_service
        self._identity = identity_client

    # ── Queries ──

    def get_team_structure(self, idea_id: str, viewer_id: str) -> dict[str, Any]:
        """Hierarchical team view with the viewer's permission flags.
        Private ideas are visible to the author and active members only."""
        idea = self._ideas.load(idea_id)
        require_view(idea, viewer_id)
        viewer = role_of(idea, viewer_id)

        is_author = viewer == TeamRole.AUTHOR
        pending = [a for a in idea.approaches if a.status == ApproachStatus.PENDING]
        roles = []
        for role in idea.roles_needed:
            entry = role.model_dump(mode="json")
            entry["applications"] = sum(
                1 for a in pending if normalize_role(a.role) == role.normalized_role_type
            )
            roles.append(entry)

        return {
            "idea_id": idea.id,
            "idea_title": idea.title,
            "author": self._profile(idea.author_id),
            "team_metrics": completion.get_team_metrics(idea).model_dump(),
            "team_structure": {
                "roles_needed": roles,
                "team_composition": self._hierarchy(idea, viewer_id, viewer),
                "is_team_complete": idea.is_team_complete,
                "team_formation_date": idea.team_formation_date,
                "last_update": idea.last_team_update,
            },
            "permissions": {
                "can_manage_team": is_author,
                "can_view_details": viewer != TeamRole.OUTSIDER,
                "can_apply": viewer == TeamRole.OUTSIDER,
            },
            "version": idea.version,
        }

    def check_conflict(
        self,
        viewer_id: str,
        idea_id: str,
        role: str,
        context: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        idea = self._ideas.load(idea_id)
        require_view(idea, viewer_id)
        report = build_conflict_report(
            check_role_conflict(idea, role), idea, self._suggestions, context
        )
        return report.model_dump(mode="json")

    def get_suggestions(
        self,
        viewer_id: str,
        idea_id: str,
        role: str,
        context: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        idea = self._ideas.load(idea_id)
        require_view(idea, viewer_id)
        suggestions = self._suggestions.generate_resolution_suggestions(role, idea, context)
        return {
            "requested_role": role,
            "suggestions": suggestions.model_dump(),
            "conflict": check_role_conflict(idea, role).model_dump(mode="json"),
        }

    def get_subrole_options(self, role_type: str) -> list[dict[str, Any]]:
        if not role_type or not role_type.strip():
            raise ValidationError("Role type is required", details={"role_type": "empty"})
        return [o.model_dump() for o in self._suggestions.get_subrole_options(role_type)]

    def get_subroles_for_member(self, actor_id: str, idea_id: str, member_id: str) -> dict[str, Any]:
        idea = self._ideas.load(idea_id)
        require(Action.VIEW_SUBROLES, role_of(idea, actor_id))
        parent = idea.find_member(member_id)
        if parent is None:
            raise NotFoundError("Team member", member_id)
        subroles = composition.active_subroles(idea, parent.id)
        return {
            "parent_member": parent.model_dump(mode="json"),
            "subroles": [s.model_dump(mode="json") for s in subroles],
            "subrole_count": len(subroles),
            "can_add_more": not parent.is_subrole,
        }

    def search_candidates(
        self,
        actor_id: str,
        idea_id: str,
        query: str,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Directory search minus the author and everyone already on the team."""
        query = (query or "").strip()
        if len(query) < 2:
            raise ValidationError(
                "Search query must be at least 2 characters", details={"q": query}
            )
        idea = self._ideas.load(idea_id)
        if role_of(idea, actor_id) == TeamRole.OUTSIDER:
            raise PermissionError("Only the team can search for candidates")

        excluded = {idea.author_id} | {m.user_id for m in idea.active_members()}
        users = self._identity.search_users(query, limit)
        return [u for u in users if str(u.get("id")) not in excluded]

    # ── Declared roles ──

    def add_role(
        self,
        actor_id: str,
        idea_id: str,
        role_type: str,
        is_core: bool = True,
        max_positions: int = 1,
        priority: int = 2,
        skills_required: Optional[list[str]] = None,
        description: str = "",
    ) -> dict[str, Any]:
        idea = self._ideas.load(idea_id)
        require(Action.ADD_ROLE, role_of(idea, actor_id))
        role = composition.add_role_needed(
            idea, role_type,
            is_core=is_core,
            max_positions=max_positions,
            priority=priority,
            skills_required=skills_required,
            description=description,
        )
        completion.recompute(idea, utcnow())
        self._save(idea)
        logger.info("Role added: idea=%s, role=%s", idea.id, role.role_type)
        return {
            "role": role.model_dump(mode="json"),
            "team_metrics": completion.get_team_metrics(idea).model_dump(),
        }

    def remove_role(self, actor_id: str, idea_id: str, role_id: str) -> dict[str, Any]:
        """Raises NotFoundError for an unknown id and CapacityError while occupied."""
        idea = self._ideas.load(idea_id)
        require(Action.REMOVE_ROLE, role_of(idea, actor_id))
        role = composition.remove_role_needed(idea, role_id)
        completion.recompute(idea, utcnow())
        self._save(idea)
        logger.info("Role removed: idea=%s, role=%s", idea.id, role.role_type)
        return {
            "removed_role": role.model_dump(mode="json"),
            "team_metrics": completion.get_team_metrics(idea).model_dump(),
        }

    # ── Members ──

    def update_member_role(
        self,
        actor_id: str,
        idea_id: str,
        member_id: str,
        new_role: str,
        is_lead: Optional[bool] = None,
    ) -> dict[str, Any]:
        """Move a member to another role. A conflicting target comes back
        as a conflict report with nothing saved."""
        idea = self._ideas.load(idea_id)
        require(Action.UPDATE_MEMBER_ROLE, role_of(idea, actor_id))
        member = idea.find_member(member_id)
        if member is None:
            raise NotFoundError("Team member", member_id)
        new_role = (new_role or "").strip()
        if not new_role:
            raise ValidationError("Role is required", details={"new_role": "empty"})

        if normalize_role(new_role) != member.normalized_role_type:
            conflict = check_role_conflict(idea, new_role)
            if conflict.has_conflict:
                report = build_conflict_report(conflict, idea, self._suggestions)
                return {
                    "success": False,
                    "conflict": report.model_dump(mode="json"),
                    "message": conflict.message,
                }
            composition.change_member_role(idea, member, new_role)
        else:
            member.assigned_role = new_role
        if is_lead is not None:
            member.is_lead = is_lead

        completion.recompute(idea, utcnow())
        self._save(idea)
        logger.info("Member role updated: idea=%s, member=%s, role=%s", idea.id, member.id, new_role)
        return {
            "success": True,
            "member": member.model_dump(mode="json"),
            "team_metrics": completion.get_team_metrics(idea).model_dump(),
            "message": f"Member role updated to {new_role}",
        }

    def update_member_leadership(
        self,
        actor_id: str,
        idea_id: str,
        member_id: str,
        is_lead: bool,
    ) -> dict[str, Any]:
        idea = self._ideas.load(idea_id)
        require(Action.CHANGE_LEADERSHIP, role_of(idea, actor_id))
        member = idea.find_member(member_id)
        if member is None:
            raise NotFoundError("Team member", member_id)
        member.is_lead = is_lead
        idea.last_team_update = utcnow()
        self._save(idea)
        logger.info("Leadership changed: idea=%s, member=%s, is_lead=%s", idea.id, member.id, is_lead)
        return {
            "member": member.model_dump(mode="json"),
            "message": "Member promoted to team leader" if is_lead else "Member demoted from team leader",
        }

    def remove_member(self, actor_id: str, idea_id: str, member_id: str) -> dict[str, Any]:
        """Soft-remove a member with its subroles. Removing twice raises NotFoundError."""
        idea = self._ideas.load(idea_id)
        target = idea.find_member(member_id)
        if target is None:
            raise NotFoundError("Team member", member_id)
        require(Action.REMOVE_MEMBER, role_of(idea, actor_id), _target_role(target))

        removed, cascaded = composition.remove_team_member(idea, target.id, actor_id)
        completion.recompute(idea, removed.removed_at)
        self._save(idea)

        MEMBERS_REMOVED.labels(reason="removed").inc()
        if cascaded:
            MEMBERS_REMOVED.labels(reason="cascade").inc(len(cascaded))
        logger.info(
            "Member removed: idea=%s, member=%s, cascaded=%d", idea.id, removed.id, len(cascaded)
        )
        return {
            "removed_member": removed.model_dump(mode="json"),
            "removed_subroles": [s.model_dump(mode="json") for s in cascaded],
            "team_metrics": completion.get_team_metrics(idea).model_dump(),
            "message": f"{removed.assigned_role} removed from the team",
        }

    # ── Subroles ──

    def add_subrole_member(
        self,
        actor_id: str,
        idea_id: str,
        parent_member_id: str,
        new_user_id: str,
        title: Optional[str] = None,
        level: Optional[str] = None,
    ) -> dict[str, Any]:
        idea = self._ideas.load(idea_id)
        parent = idea.find_member(parent_member_id)
        if parent is None:
            raise NotFoundError("Parent team member", parent_member_id)
        require(
            Action.ADD_SUBROLE,
            role_of(idea, actor_id),
            is_owner=parent.user_id == actor_id,
        )
        if parent.is_subrole:
            raise ValidationError(
                "Subroles cannot have subroles of their own",
                details={"parent_member_id": parent_member_id},
            )
        if idea.active_member_for_user(new_user_id) is not None:
            raise ValidationError("User is already a team member", details={"user_id": new_user_id})

        subrole_title = (title or "").strip()
        if not subrole_title:
            subrole_title = _default_subrole_title(idea, parent, level)
        clash = check_role_conflict(idea, subrole_title)
        if clash.has_conflict:
            raise ValidationError(
                f"Subrole '{subrole_title}' is not available: {clash.message}",
                details={"title": subrole_title},
            )

        now = utcnow()
        member = composition.add_team_member(
            idea, new_user_id, subrole_title, actor_id,
            parent_role_id=parent.id,
            now=now,
        )
        completion.recompute(idea, now)
        self._save(idea)
        logger.info(
            "Subrole member added: idea=%s, parent=%s, member=%s", idea.id, parent.id, member.id
        )
        return {
            "parent_member": {
                "id": parent.id,
                "user": self._profile(parent.user_id),
                "role": parent.assigned_role,
            },
            "new_subrole_member": {
                "id": member.id,
                "user": self._profile(new_user_id),
                "role": member.assigned_role,
                "parent_role_id": member.parent_role_id,
            },
            "team_metrics": completion.get_team_metrics(idea).model_dump(),
            "message": f"Member added as {subrole_title} under {parent.assigned_role}",
        }

    def remove_subrole_member(
        self,
        actor_id: str,
        idea_id: str,
        parent_member_id: str,
        subrole_member_id: str,
    ) -> dict[str, Any]:
        idea = self._ideas.load(idea_id)
        parent = idea.find_member(parent_member_id)
        if parent is None:
            raise NotFoundError("Parent team member", parent_member_id)
        subrole = idea.find_member(subrole_member_id)
        if subrole is None:
            raise NotFoundError("Subrole member", subrole_member_id)
        if subrole.parent_role_id != parent.id:
            raise ValidationError(
                "Member is not a subrole of the specified parent",
                details={"parent_member_id": parent_member_id, "subrole_member_id": subrole_member_id},
            )
        require(
            Action.REMOVE_SUBROLE,
            role_of(idea, actor_id),
            is_owner=parent.user_id == actor_id,
        )

        removed, _ = composition.remove_team_member(idea, subrole.id, actor_id)
        completion.recompute(idea, removed.removed_at)
        self._save(idea)
        MEMBERS_REMOVED.labels(reason="subrole").inc()
        logger.info("Subrole member removed: idea=%s, member=%s", idea.id, removed.id)
        return {
            "removed_member": removed.model_dump(mode="json"),
            "team_metrics": completion.get_team_metrics(idea).model_dump(),
            "message": f"{removed.assigned_role} removed from the team",
        }

    # ── Internal ──

    def _profile(self, user_id: str) -> dict[str, Any]:
        return self._identity.resolve_user(user_id) or {"id": user_id}

    def _hierarchy(self, idea: IdeaAggregate, viewer_id: str, viewer: TeamRole) -> list[dict[str, Any]]:
        """Main roles with their subroles nested, annotated for ``viewer``."""
        nodes = []
        for parent in (m for m in idea.active_members() if not m.is_subrole):
            owns = parent.user_id == viewer_id
            manage_subroles = evaluate(Action.ADD_SUBROLE, viewer, is_owner=owns).allowed
            can_remove = evaluate(Action.REMOVE_MEMBER, viewer, _target_role(parent)).allowed
            subroles = []
            for sub in composition.active_subroles(idea, parent.id):
                entry = sub.model_dump(mode="json")
                entry["can_remove"] = manage_subroles
                entry["can_remove_from_team"] = evaluate(
                    Action.REMOVE_MEMBER, viewer, _target_role(sub)
                ).allowed
                entry["parent_role"] = {"id": parent.id, "assigned_role": parent.assigned_role}
                subroles.append(entry)

            node = parent.model_dump(mode="json")
            node.update({
                "subroles": subroles,
                "subrole_count": len(subroles),
                "has_subroles": bool(subroles),
                "can_manage_subroles": manage_subroles,
                "can_remove_from_team": can_remove,
                "permissions": {
                    "can_edit": viewer == TeamRole.AUTHOR or owns,
                    "can_remove": can_remove,
                    "can_promote": evaluate(Action.CHANGE_LEADERSHIP, viewer).allowed,
                    "can_demote": evaluate(Action.CHANGE_LEADERSHIP, viewer).allowed and parent.is_lead,
                },
            })
            nodes.append(node)
        return nodes

    def _save(self, idea: IdeaAggregate) -> IdeaAggregate:
        try:
            return self._ideas.save(idea)
        except ConcurrencyError:
            VERSION_CONFLICTS.inc()
            logger.warning("Stale write rejected: idea=%s, version=%s", idea.id, idea.version)
            raise
