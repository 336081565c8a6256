# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Tests for team formation: conflicts, resolutions, approach lifecycle,
permissions, completion tracking and suggestions.
Services are exercised against the in-memory repositories.
"""

from unittest.mock import MagicMock, patch

import pytest

from team_service.core.exceptions import (
    CapacityError,
    ConcurrencyError,
    InvalidTransitionError,
    NotFoundError,
    PermissionError,
    ValidationError,
)
from team_service.models.domain import (
    ApproachStatus,
    IdeaAggregate,
    MemberStatus,
)
from team_service.repositories import IdeaRepository, RoleCatalogRepository
from team_service.services import completion, composition
from team_service.services.approach_service import ApproachService, validate_transition
from team_service.services.catalog_service import RoleCatalogService
from team_service.services.conflicts import ConflictType, check_role_conflict, resolution_options
from team_service.services.idea_service import IdeaService
from team_service.services.identity_client import IdentityClient
from team_service.services.permissions import Action, TeamRole, evaluate
from team_service.services.resolution import (
    CreateSubrole,
    Decline,
    ExpandCapacity,
    ReplaceExisting,
    ResolutionStrategyEngine,
)
from team_service.services.suggestion_service import (
    RoleSuggestionService,
    extract_skill_level,
    pattern_suggestions,
)
from team_service.services.team_service import TeamService

AUTHOR = "author-1"


# ============================================
# Fixtures
# ============================================
@pytest.fixture
def repo():
    return IdeaRepository()


@pytest.fixture
def catalog():
    store = RoleCatalogRepository()
    RoleCatalogService(store).seed_defaults()
    return store


@pytest.fixture
def suggestions(catalog):
    return RoleSuggestionService(catalog)


@pytest.fixture
def identity():
    client = MagicMock(spec=IdentityClient)
    client.resolve_user.return_value = None
    client.search_users.return_value = []
    return client


@pytest.fixture
def ideas(repo):
    return IdeaService(repo)


@pytest.fixture
def approaches(repo, suggestions):
    return ApproachService(repo, suggestions, ResolutionStrategyEngine())


@pytest.fixture
def team(repo, suggestions, identity):
    return TeamService(repo, suggestions, identity)


def make_idea(ideas, *roles, **kwargs):
    """Create an idea declaring ``(role_type, max_positions)`` pairs."""
    return ideas.create_idea(
        author_id=AUTHOR,
        title="Campus food sharing",
        roles_needed=[{"role_type": r, "max_positions": n} for r, n in roles],
        **kwargs,
    )


def seat(approaches, idea_id, user_id, role):
    """Approach and select in one go; returns the new member."""
    approach = approaches.submit_approach(user_id, idea_id, role)
    outcome = approaches.update_approach_status(AUTHOR, idea_id, approach.id, "selected")
    assert outcome.success
    return outcome.member


# ============================================
# Conflict detection
# ============================================
class TestConflictDetection:
    def test_exact_match_is_conflict(self, ideas, approaches, repo):
        idea = make_idea(ideas, ("Developer", 2))
        seat(approaches, idea.id, "bob", "Developer")
        conflict = check_role_conflict(repo.load(idea.id), "  developer ")
        assert conflict.has_conflict
        assert conflict.conflict_type == ConflictType.EXACT
        assert conflict.existing_member.user_id == "bob"

    def test_capacity_conflict_without_exact_holder(self):
        idea = IdeaAggregate(author_id=AUTHOR)
        role = composition.add_role_needed(idea, "Designer")
        role.current_positions = 1
        conflict = check_role_conflict(idea, "Designer")
        assert conflict.has_conflict
        assert conflict.conflict_type == ConflictType.CAPACITY

    def test_open_role_has_no_conflict(self, ideas):
        idea = make_idea(ideas, ("Designer", 1))
        conflict = check_role_conflict(idea, "Designer")
        assert not conflict.has_conflict
        assert resolution_options(conflict) == []

    def test_removed_member_does_not_conflict(self, ideas, approaches, team, repo):
        idea = make_idea(ideas, ("Developer", 1))
        member = seat(approaches, idea.id, "bob", "Developer")
        team.remove_member(AUTHOR, idea.id, member.id)
        assert not check_role_conflict(repo.load(idea.id), "Developer").has_conflict

    def test_options_for_exact_conflict(self, ideas, approaches, repo):
        idea = make_idea(ideas, ("Developer", 1))
        seat(approaches, idea.id, "bob", "Developer")
        conflict = check_role_conflict(repo.load(idea.id), "Developer")
        kinds = [o.kind for o in resolution_options(conflict)]
        assert kinds == ["create_subrole", "replace_existing", "decline", "expand_capacity"]

    def test_options_for_ad_hoc_role_skip_expand(self, ideas, approaches, repo):
        idea = make_idea(ideas)
        seat(approaches, idea.id, "bob", "Designer")
        conflict = check_role_conflict(repo.load(idea.id), "Designer")
        kinds = [o.kind for o in resolution_options(conflict)]
        assert "expand_capacity" not in kinds


# ============================================
# Approach lifecycle
# ============================================
class TestApproachTransitions:
    def test_declined_to_selected_is_legal(self):
        validate_transition(ApproachStatus.DECLINED, ApproachStatus.SELECTED)

    def test_pending_to_pending_is_illegal(self):
        with pytest.raises(InvalidTransitionError):
            validate_transition(ApproachStatus.PENDING, ApproachStatus.PENDING)

    @pytest.mark.parametrize("current", ["selected", "declined", "queued"])
    def test_nothing_returns_to_pending(self, current):
        with pytest.raises(InvalidTransitionError):
            validate_transition(ApproachStatus(current), ApproachStatus.PENDING)

    def test_service_rejects_illegal_transition(self, ideas, approaches):
        idea = make_idea(ideas, ("Developer", 1))
        approach = approaches.submit_approach("bob", idea.id, "Developer")
        with pytest.raises(InvalidTransitionError):
            approaches.update_approach_status(AUTHOR, idea.id, approach.id, "pending")

    def test_declined_then_selected_seats_candidate(self, ideas, approaches, repo):
        idea = make_idea(ideas, ("Developer", 1))
        approach = approaches.submit_approach("bob", idea.id, "Developer")
        approaches.update_approach_status(AUTHOR, idea.id, approach.id, "declined")
        outcome = approaches.update_approach_status(AUTHOR, idea.id, approach.id, "selected")
        assert outcome.success
        assert repo.load(idea.id).roles_needed[0].current_positions == 1

    def test_unselecting_releases_seat(self, ideas, approaches, repo):
        idea = make_idea(ideas, ("Developer", 1))
        approach = approaches.submit_approach("bob", idea.id, "Developer")
        approaches.update_approach_status(AUTHOR, idea.id, approach.id, "selected")
        outcome = approaches.update_approach_status(AUTHOR, idea.id, approach.id, "queued")
        assert [m.user_id for m in outcome.removed_members] == ["bob"]
        stored = repo.load(idea.id)
        assert stored.roles_needed[0].current_positions == 0
        assert composition.positions_consistent(stored)

    def test_selection_produces_collaboration_intent(self, ideas, approaches):
        idea = make_idea(ideas, ("Developer", 1))
        approach = approaches.submit_approach("bob", idea.id, "Developer")
        outcome = approaches.update_approach_status(AUTHOR, idea.id, approach.id, "selected")
        assert outcome.intent.author_id == AUTHOR
        assert outcome.intent.candidate_id == "bob"

    def test_only_author_manages_approaches(self, ideas, approaches):
        idea = make_idea(ideas, ("Developer", 1))
        approach = approaches.submit_approach("bob", idea.id, "Developer")
        with pytest.raises(PermissionError):
            approaches.update_approach_status("bob", idea.id, approach.id, "selected")

    def test_author_cannot_approach_own_idea(self, ideas, approaches):
        idea = make_idea(ideas, ("Developer", 1))
        with pytest.raises(ValidationError):
            approaches.submit_approach(AUTHOR, idea.id, "Developer")

    def test_duplicate_open_approach_rejected(self, ideas, approaches):
        idea = make_idea(ideas, ("Developer", 1))
        approaches.submit_approach("bob", idea.id, "Developer")
        with pytest.raises(ValidationError):
            approaches.submit_approach("bob", idea.id, "developer")

    def test_unknown_approach_is_not_found(self, ideas, approaches):
        idea = make_idea(ideas, ("Developer", 1))
        with pytest.raises(NotFoundError):
            approaches.update_approach_status(AUTHOR, idea.id, "missing", "selected")


# ============================================
# Scenarios
# ============================================
class TestScenarios:
    def test_replace_existing_cascades_subroles(self, ideas, approaches, team, repo):
        idea = make_idea(ideas, ("Developer", 1))
        holder = seat(approaches, idea.id, "alice", "Developer")
        team.add_subrole_member(AUTHOR, idea.id, holder.id, "sam", level="junior")

        approach = approaches.submit_approach("bob", idea.id, "Developer")
        blocked = approaches.update_approach_status(AUTHOR, idea.id, approach.id, "selected")
        assert not blocked.success
        assert blocked.conflict.conflict.conflict_type == ConflictType.EXACT

        outcome = approaches.update_approach_status(
            AUTHOR, idea.id, approach.id, "selected", resolution=ReplaceExisting()
        )
        assert outcome.success
        stored = repo.load(idea.id)
        by_user = {m.user_id: m for m in stored.team_composition}
        assert by_user["alice"].status == MemberStatus.REMOVED
        assert by_user["sam"].status == MemberStatus.REMOVED
        assert by_user["bob"].status == MemberStatus.ACTIVE
        assert stored.roles_needed[0].current_positions == 1
        assert composition.positions_consistent(stored)

    def test_ad_hoc_role_selection(self, ideas, approaches, repo):
        idea = make_idea(ideas)
        created = repo.load(idea.id)
        assert created.is_team_complete
        formed = created.team_formation_date
        assert formed is not None
        before = created.max_team_size
        member = seat(approaches, idea.id, "bob", "Designer")
        stored = repo.load(idea.id)
        assert member.assigned_role == "Designer"
        assert stored.roles_needed == []
        assert stored.max_team_size == before
        assert stored.current_team_size == 2
        assert stored.is_team_complete
        assert stored.team_formation_date == formed

    def test_conflicting_selection_without_resolution_changes_nothing(self, ideas, approaches, repo):
        idea = make_idea(ideas, ("Developer", 1))
        first = approaches.submit_approach("bob", idea.id, "Developer")
        second = approaches.submit_approach("carol", idea.id, "Developer")
        approaches.update_approach_status(AUTHOR, idea.id, first.id, "selected")
        assert repo.load(idea.id).roles_needed[0].current_positions == 1

        snapshot = repo.load(idea.id).model_dump()
        outcome = approaches.update_approach_status(AUTHOR, idea.id, second.id, "selected")
        assert not outcome.success
        assert outcome.conflict is not None
        assert repo.load(idea.id).model_dump() == snapshot

        declined = approaches.update_approach_status(
            AUTHOR, idea.id, second.id, "selected", resolution=Decline()
        )
        assert declined.success
        assert declined.approach.status == ApproachStatus.DECLINED
        stored = repo.load(idea.id)
        assert [m.user_id for m in stored.active_members()] == ["bob"]
        assert stored.roles_needed[0].current_positions == 1


# ============================================
# Resolution strategies
# ============================================
class TestResolutionStrategies:
    def _contested(self, ideas, approaches):
        idea = make_idea(ideas, ("Frontend Developer", 1))
        holder = seat(approaches, idea.id, "alice", "Frontend Developer")
        approach = approaches.submit_approach("bob", idea.id, "Frontend Developer")
        return idea, holder, approach

    def test_create_subrole_links_under_holder(self, ideas, approaches):
        idea, holder, approach = self._contested(ideas, approaches)
        outcome = approaches.update_approach_status(
            AUTHOR, idea.id, approach.id, "selected", resolution=CreateSubrole()
        )
        assert outcome.member.assigned_role == "Senior Frontend Developer"
        assert outcome.member.parent_role_id == holder.id

    def test_create_subrole_rejects_same_name(self, ideas, approaches):
        idea, _, approach = self._contested(ideas, approaches)
        with pytest.raises(ValidationError):
            approaches.update_approach_status(
                AUTHOR, idea.id, approach.id, "selected",
                resolution=CreateSubrole(suggested_role="frontend developer"),
            )

    def test_expand_capacity_adds_seat(self, ideas, approaches, repo):
        idea, _, approach = self._contested(ideas, approaches)
        outcome = approaches.update_approach_status(
            AUTHOR, idea.id, approach.id, "selected", resolution=ExpandCapacity()
        )
        assert outcome.resolution.expanded_role.max_positions == 2
        stored = repo.load(idea.id)
        assert stored.roles_needed[0].current_positions == 2
        assert stored.max_team_size == 3

    def test_replace_unknown_member_is_not_found(self, ideas, approaches):
        idea, _, approach = self._contested(ideas, approaches)
        with pytest.raises(NotFoundError):
            approaches.update_approach_status(
                AUTHOR, idea.id, approach.id, "selected",
                resolution=ReplaceExisting(member_id="nobody"),
            )

    def test_engine_rejects_already_selected_approach(self, ideas, approaches, repo):
        idea, _, approach = self._contested(ideas, approaches)
        stored = repo.load(idea.id)
        conflict = check_role_conflict(stored, approach.role)
        target = stored.find_approach(approach.id)
        target.status = ApproachStatus.SELECTED
        with pytest.raises(InvalidTransitionError):
            ResolutionStrategyEngine().apply(stored, target, conflict, Decline(), AUTHOR)

    def test_racing_resolutions_only_one_wins(self, ideas, approaches, repo):
        idea, holder, approach = self._contested(ideas, approaches)
        stale = repo.load(idea.id)

        first = approaches.update_approach_status(
            AUTHOR, idea.id, approach.id, "selected", resolution=ExpandCapacity()
        )
        assert first.success

        with patch.object(repo, "load", return_value=stale):
            with pytest.raises(ConcurrencyError):
                approaches.update_approach_status(
                    AUTHOR, idea.id, approach.id, "selected",
                    resolution=ReplaceExisting(member_id=holder.id),
                )

        stored = repo.load(idea.id)
        assert sorted(m.user_id for m in stored.active_members()) == ["alice", "bob"]
        assert stored.roles_needed[0].max_positions == 2
        assert composition.positions_consistent(stored)

    def test_blank_subrole_name_falls_back_to_senior_title(self, ideas, approaches):
        idea, holder, approach = self._contested(ideas, approaches)
        outcome = approaches.update_approach_status(
            AUTHOR, idea.id, approach.id, "selected",
            resolution=CreateSubrole(suggested_role="   "),
        )
        assert outcome.success
        assert outcome.member.assigned_role == "Senior Frontend Developer"
        assert outcome.member.parent_role_id == holder.id


# ============================================
# Permissions & member removal
# ============================================
class TestPermissions:
    def _two_leaders(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1), ("Designer", 1))
        dev = seat(approaches, idea.id, "lead-dev", "Developer")
        des = seat(approaches, idea.id, "lead-des", "Designer")
        team.update_member_leadership(AUTHOR, idea.id, dev.id, True)
        team.update_member_leadership(AUTHOR, idea.id, des.id, True)
        team.add_subrole_member(AUTHOR, idea.id, des.id, "helper", level="junior")
        return idea, dev, des

    def test_leader_cannot_remove_leader(self, ideas, approaches, team):
        idea, _, des = self._two_leaders(ideas, approaches, team)
        with pytest.raises(PermissionError):
            team.remove_member("lead-dev", idea.id, des.id)

    def test_author_removes_leader_with_cascade(self, ideas, approaches, team, repo):
        idea, _, des = self._two_leaders(ideas, approaches, team)
        result = team.remove_member(AUTHOR, idea.id, des.id)
        assert [s["user_id"] for s in result["removed_subroles"]] == ["helper"]
        stored = repo.load(idea.id)
        assert {m.user_id for m in stored.active_members()} == {"lead-dev"}
        assert composition.positions_consistent(stored)

    def test_leader_removes_plain_member(self, ideas, approaches, team):
        idea, dev, _ = self._two_leaders(ideas, approaches, team)
        member = seat(approaches, idea.id, "pm", "Product Manager")
        result = team.remove_member("lead-dev", idea.id, member.id)
        assert result["removed_member"]["status"] == "removed"

    def test_member_cannot_remove(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1), ("Designer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        seat(approaches, idea.id, "des", "Designer")
        with pytest.raises(PermissionError):
            team.remove_member("des", idea.id, dev.id)

    def test_removing_twice_is_not_found(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        team.remove_member(AUTHOR, idea.id, dev.id)
        with pytest.raises(NotFoundError):
            team.remove_member(AUTHOR, idea.id, dev.id)

    def test_author_is_never_removable(self):
        decision = evaluate(Action.REMOVE_MEMBER, TeamRole.AUTHOR, TeamRole.AUTHOR)
        assert not decision.allowed

    def test_parent_member_manages_own_subroles(self):
        assert evaluate(Action.ADD_SUBROLE, TeamRole.MEMBER, is_owner=True).allowed
        assert not evaluate(Action.ADD_SUBROLE, TeamRole.MEMBER, is_owner=False).allowed

    def test_only_author_changes_leadership(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        with pytest.raises(PermissionError):
            team.update_member_leadership("dev", idea.id, dev.id, True)


# ============================================
# Declared roles
# ============================================
class TestDeclaredRoles:
    def test_remove_role_twice_raises_not_found(self, ideas, team):
        idea = make_idea(ideas, ("Developer", 1))
        role_id = idea.roles_needed[0].id
        team.remove_role(AUTHOR, idea.id, role_id)
        with pytest.raises(NotFoundError):
            team.remove_role(AUTHOR, idea.id, role_id)

    def test_occupied_role_cannot_be_removed(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1))
        seat(approaches, idea.id, "dev", "Developer")
        with pytest.raises(CapacityError):
            team.remove_role(AUTHOR, idea.id, idea.roles_needed[0].id)

    def test_add_role_counts_ad_hoc_holders(self, ideas, approaches, team, repo):
        idea = make_idea(ideas)
        seat(approaches, idea.id, "des", "Designer")
        result = team.add_role(AUTHOR, idea.id, "designer", max_positions=2)
        assert result["role"]["current_positions"] == 1
        stored = repo.load(idea.id)
        assert stored.max_team_size == 3
        assert composition.positions_consistent(stored)

    def test_duplicate_role_rejected(self, ideas, team):
        idea = make_idea(ideas, ("Developer", 1))
        with pytest.raises(ValidationError):
            team.add_role(AUTHOR, idea.id, " DEVELOPER ")

    def test_bad_priority_rejected(self, ideas, team):
        idea = make_idea(ideas)
        with pytest.raises(ValidationError):
            team.add_role(AUTHOR, idea.id, "Developer", priority=7)

    def test_non_author_cannot_add_role(self, ideas, team):
        idea = make_idea(ideas)
        with pytest.raises(PermissionError):
            team.add_role("someone", idea.id, "Developer")


# ============================================
# Member role changes
# ============================================
class TestMemberRoleUpdate:
    def test_move_to_open_role(self, ideas, approaches, team, repo):
        idea = make_idea(ideas, ("Developer", 1), ("Designer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        result = team.update_member_role(AUTHOR, idea.id, dev.id, "Designer")
        assert result["success"]
        stored = repo.load(idea.id)
        counts = {r.role_type: r.current_positions for r in stored.roles_needed}
        assert counts == {"Developer": 0, "Designer": 1}

    def test_move_to_held_role_reports_conflict(self, ideas, approaches, team, repo):
        idea = make_idea(ideas, ("Developer", 1), ("Designer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        seat(approaches, idea.id, "des", "Designer")
        version = repo.load(idea.id).version
        result = team.update_member_role(AUTHOR, idea.id, dev.id, "designer")
        assert not result["success"]
        assert result["conflict"]["conflict"]["conflict_type"] == "exact"
        assert repo.load(idea.id).version == version


# ============================================
# Subroles
# ============================================
class TestSubroles:
    def test_default_title_from_level(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        result = team.add_subrole_member("dev", idea.id, dev.id, "intern")
        assert result["new_subrole_member"]["role"] == "Junior Developer"
        assert result["new_subrole_member"]["parent_role_id"] == dev.id

    def test_second_default_subrole_is_numbered(self, ideas, approaches, team, repo):
        idea = make_idea(ideas, ("Developer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        team.add_subrole_member("dev", idea.id, dev.id, "intern")
        second = team.add_subrole_member("dev", idea.id, dev.id, "intern-2")
        assert second["new_subrole_member"]["role"] == "Junior Developer 2"
        assert len(composition.active_subroles(repo.load(idea.id), dev.id)) == 2

    def test_depth_two_rejected(self, ideas, approaches, team, repo):
        idea = make_idea(ideas, ("Developer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        sub = team.add_subrole_member(AUTHOR, idea.id, dev.id, "intern")
        sub_id = sub["new_subrole_member"]["id"]
        with pytest.raises(ValidationError):
            team.add_subrole_member(AUTHOR, idea.id, sub_id, "other", title="Trainee")
        stored = repo.load(idea.id)
        with pytest.raises(ValidationError):
            composition.add_team_member(stored, "other", "Trainee", AUTHOR, parent_role_id=sub_id)

    def test_existing_member_cannot_be_subrole(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1), ("Designer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        seat(approaches, idea.id, "des", "Designer")
        with pytest.raises(ValidationError):
            team.add_subrole_member(AUTHOR, idea.id, dev.id, "des")

    def test_other_member_cannot_add_subrole(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1), ("Designer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        seat(approaches, idea.id, "des", "Designer")
        with pytest.raises(PermissionError):
            team.add_subrole_member("des", idea.id, dev.id, "intern")

    def test_remove_subrole_checks_parent(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1), ("Designer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        des = seat(approaches, idea.id, "des", "Designer")
        sub = team.add_subrole_member(AUTHOR, idea.id, dev.id, "intern")
        sub_id = sub["new_subrole_member"]["id"]
        with pytest.raises(ValidationError):
            team.remove_subrole_member(AUTHOR, idea.id, des.id, sub_id)
        result = team.remove_subrole_member("dev", idea.id, dev.id, sub_id)
        assert result["removed_member"]["status"] == "removed"

    def test_list_subroles(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        team.add_subrole_member(AUTHOR, idea.id, dev.id, "intern")
        listing = team.get_subroles_for_member("dev", idea.id, dev.id)
        assert listing["subrole_count"] == 1
        with pytest.raises(PermissionError):
            team.get_subroles_for_member("stranger", idea.id, dev.id)


# ============================================
# Completion tracking
# ============================================
class TestCompletion:
    def test_formation_date_stamped_once(self, ideas, approaches, team, repo):
        idea = make_idea(ideas, ("Developer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        stamped = repo.load(idea.id)
        assert stamped.is_team_complete
        first_date = stamped.team_formation_date
        assert first_date is not None

        team.remove_member(AUTHOR, idea.id, dev.id)
        after = repo.load(idea.id)
        assert not after.is_team_complete
        assert after.team_formation_date == first_date

        seat(approaches, idea.id, "dev2", "Developer")
        assert repo.load(idea.id).team_formation_date == first_date

    def test_no_declared_roles_is_complete(self):
        idea = IdeaAggregate(author_id=AUTHOR)
        assert completion.recompute(idea) is True
        assert idea.is_team_complete
        assert idea.team_formation_date is not None
        assert completion.get_team_metrics(idea).completion_percentage == 100

    def test_metrics(self, ideas, approaches, repo):
        idea = make_idea(ideas, ("Developer", 1), ("Designer", 1))
        seat(approaches, idea.id, "dev", "Developer")
        metrics = completion.get_team_metrics(repo.load(idea.id))
        assert metrics.max_team_size == 3
        assert metrics.current_size == 2
        assert metrics.open_positions == 1
        assert metrics.completion_percentage == 50
        assert metrics.core_roles_filled == 1


# ============================================
# Suggestions
# ============================================
class TestSuggestions:
    def test_catalog_subroles_skip_taken_titles(self, ideas, approaches, suggestions, repo):
        idea = make_idea(ideas, ("Frontend Developer", 1))
        seat(approaches, idea.id, "dev", "React Developer")
        result = suggestions.generate_resolution_suggestions("Frontend Developer", repo.load(idea.id))
        names = [s.name for s in result.subroles]
        assert result.source == "catalog"
        assert "Senior Frontend Developer" in names
        assert "React Developer" not in names

    def test_alternative_name_resolves(self, ideas, suggestions):
        idea = make_idea(ideas)
        result = suggestions.generate_resolution_suggestions("front-end developer", idea)
        assert result.source == "catalog"

    def test_falls_back_when_catalog_raises(self, ideas):
        broken = MagicMock(spec=RoleCatalogRepository)
        broken.find_by_name.side_effect = RuntimeError("catalog down")
        idea = make_idea(ideas, ("Backend Developer", 1), ("Designer", 1))
        result = RoleSuggestionService(broken).generate_resolution_suggestions("Backend Developer", idea)
        assert result.source == "pattern"
        assert result.subroles[0].name == "Senior Backend Developer"
        assert result.alternatives == ["Designer"]

    def test_pattern_prefers_most_specific_family(self):
        names = [s.name for s in pattern_suggestions("Frontend Developer")]
        assert names[0] == "Senior Frontend Developer"

    def test_pattern_generic_fallback(self):
        names = [s.name for s in pattern_suggestions("Astronaut")]
        assert names == ["Senior Astronaut", "Lead Astronaut", "Astronaut Specialist"]

    def test_extract_skill_level(self):
        assert extract_skill_level("Lead Designer") == "lead"
        assert extract_skill_level("Designer") == "mid"

    def test_subrole_options_ladder_for_unknown_role(self, suggestions):
        options = suggestions.get_subrole_options("Astronaut")
        assert [o.level for o in options] == ["junior", "senior", "lead", "specialist", "assistant"]


# ============================================
# Visibility & search
# ============================================
class TestStructureAndSearch:
    def test_private_structure_hidden_from_outsiders(self, ideas, team):
        idea = make_idea(ideas, ("Developer", 1), access_level="private")
        with pytest.raises(PermissionError):
            team.get_team_structure(idea.id, "stranger")
        assert team.get_team_structure(idea.id, AUTHOR)["permissions"]["can_manage_team"]

    def test_private_idea_reads_open_to_members_only(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1), access_level="private")
        seat(approaches, idea.id, "dev", "Developer")
        for read in (
            lambda viewer: ideas.get_idea(idea.id, viewer),
            lambda viewer: approaches.list_approaches(viewer, idea.id),
            lambda viewer: team.check_conflict(viewer, idea.id, "Developer"),
            lambda viewer: team.get_suggestions(viewer, idea.id, "Developer"),
        ):
            with pytest.raises(PermissionError):
                read("stranger")
            read("dev")
        assert ideas.list_ideas(viewer_id="stranger") == []
        assert [i.id for i in ideas.list_ideas(viewer_id="dev")] == [idea.id]

    def test_structure_nests_subroles_and_counts_applications(self, ideas, approaches, team):
        idea = make_idea(ideas, ("Developer", 1), ("Designer", 1))
        dev = seat(approaches, idea.id, "dev", "Developer")
        team.add_subrole_member(AUTHOR, idea.id, dev.id, "intern")
        approaches.submit_approach("cand", idea.id, "Designer")

        structure = team.get_team_structure(idea.id, "dev")
        nodes = structure["team_structure"]["team_composition"]
        assert len(nodes) == 1
        assert nodes[0]["subrole_count"] == 1
        assert nodes[0]["can_manage_subroles"]
        apps = {r["role_type"]: r["applications"] for r in structure["team_structure"]["roles_needed"]}
        assert apps == {"Developer": 0, "Designer": 1}

    def test_search_excludes_team(self, ideas, approaches, team, identity):
        idea = make_idea(ideas, ("Developer", 1))
        seat(approaches, idea.id, "dev", "Developer")
        identity.search_users.return_value = [{"id": AUTHOR}, {"id": "dev"}, {"id": "new"}]
        assert team.search_candidates(AUTHOR, idea.id, "de") == [{"id": "new"}]
