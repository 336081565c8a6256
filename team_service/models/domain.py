# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.

The idea aggregate is the consistency unit: it is loaded, mutated in memory
and saved as a whole. Team members reference each other by id
(``parent_role_id``) inside ``team_composition``, never by object.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def normalize_role(role: str) -> str:
    """Conflict key for a role name: lowercase, surrounding whitespace removed."""
    return (role or "").strip().lower()


class ApproachStatus(str, Enum):
    PENDING = "pending"
    SELECTED = "selected"
    DECLINED = "declined"
    QUEUED = "queued"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    REMOVED = "removed"


class AccessLevel(str, Enum):
    PUBLIC = "public"
    TEAM_ONLY = "team-only"
    PRIVATE = "private"


class RoleNeeded(BaseModel):
    """A position the author wants filled."""
    id: str = Field(default_factory=new_id)
    role_type: str = Field(..., min_length=1, max_length=255)
    normalized_role_type: str = ""
    is_core: bool = True
    max_positions: int = Field(default=1, ge=1)
    current_positions: int = Field(default=0, ge=0)
    priority: int = Field(default=2, ge=1, le=3, description="1 critical, 2 important, 3 nice-to-have")
    skills_required: list[str] = Field(default_factory=list)
    description: str = ""

    def model_post_init(self, __context) -> None:
        if not self.normalized_role_type:
            self.normalized_role_type = normalize_role(self.role_type)

    @property
    def is_full(self) -> bool:
        return self.current_positions >= self.max_positions


class TeamMember(BaseModel):
    """One seat in the team. Removal is a status change, never a delete."""
    id: str = Field(default_factory=new_id)
    user_id: str
    assigned_role: str
    role_type: str
    normalized_role_type: str = ""
    is_lead: bool = False
    parent_role_id: Optional[str] = None
    approach_id: Optional[str] = None
    assigned_at: datetime = Field(default_factory=utcnow)
    assigned_by: str
    status: MemberStatus = MemberStatus.ACTIVE
    removed_at: Optional[datetime] = None
    removed_by: Optional[str] = None

    def model_post_init(self, __context) -> None:
        if not self.normalized_role_type:
            self.normalized_role_type = normalize_role(self.role_type)

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE

    @property
    def is_subrole(self) -> bool:
        return self.parent_role_id is not None


class Approach(BaseModel):
    """A candidate's application for a role. Only ``status`` mutates."""
    id: str = Field(default_factory=new_id)
    user_id: str
    role: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    status: ApproachStatus = ApproachStatus.PENDING
    status_updated_at: Optional[datetime] = None
    status_updated_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class IdeaAggregate(BaseModel):
    """Idea root with its declared roles, team, and approach audit trail."""
    id: str = Field(default_factory=new_id)
    author_id: str
    title: str = ""
    description: str = ""
    category: Optional[str] = None
    access_level: AccessLevel = AccessLevel.PUBLIC
    roles_needed: list[RoleNeeded] = Field(default_factory=list)
    team_composition: list[TeamMember] = Field(default_factory=list)
    approaches: list[Approach] = Field(default_factory=list)
    is_team_complete: bool = False
    team_formation_date: Optional[datetime] = None
    max_team_size: int = 1
    current_team_size: int = 1
    last_team_update: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    version: int = 0

    def find_approach(self, approach_id: str) -> Optional[Approach]:
        return next((a for a in self.approaches if a.id == approach_id), None)

    def find_role(self, role_id: str) -> Optional[RoleNeeded]:
        return next((r for r in self.roles_needed if r.id == role_id), None)

    def find_member(self, member_id: str, active_only: bool = True) -> Optional[TeamMember]:
        for member in self.team_composition:
            if member.id == member_id and (member.is_active or not active_only):
                return member
        return None

    def active_members(self) -> list[TeamMember]:
        return [m for m in self.team_composition if m.is_active]

    def active_member_for_user(self, user_id: str) -> Optional[TeamMember]:
        return next((m for m in self.active_members() if m.user_id == user_id), None)

    def role_needed_for(self, role: str) -> Optional[RoleNeeded]:
        key = normalize_role(role)
        return next((r for r in self.roles_needed if r.normalized_role_type == key), None)


class RoleCategory(str, Enum):
    TECHNICAL = "technical"
    BUSINESS = "business"
    CREATIVE = "creative"
    OPERATIONS = "operations"
    MARKETING = "marketing"
    OTHER = "other"


class SkillLevel(str, Enum):
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    SPECIALIST = "specialist"


class CommonSubrole(BaseModel):
    name: str
    description: str = ""
    skill_level: SkillLevel = SkillLevel.MID


class RoleDefinition(BaseModel):
    """Role catalog entry."""
    id: str = Field(default_factory=new_id)
    role_name: str = Field(..., min_length=1)
    normalized_name: str = ""
    category: RoleCategory = RoleCategory.OTHER
    is_core: bool = True
    parent_role: Optional[str] = None
    common_subroles: list[CommonSubrole] = Field(default_factory=list)
    description: str = ""
    required_skills: list[str] = Field(default_factory=list)
    optional_skills: list[str] = Field(default_factory=list)
    project_types: list[str] = Field(default_factory=list)
    similar_roles: list[str] = Field(default_factory=list)
    alternative_names: list[str] = Field(default_factory=list)
    usage_count: int = 0

    def model_post_init(self, __context) -> None:
        if not self.normalized_name:
            self.normalized_name = normalize_role(self.role_name)
        self.alternative_names = [normalize_role(n) for n in self.alternative_names]


class SubroleSuggestion(BaseModel):
    """A proposed specialisation of a role, from the catalog or a pattern."""
    name: str
    full_name: str = ""
    description: str = ""
    skill_level: str = "mid"
    parent_role_id: Optional[str] = None
    source: str = "catalog"

    def model_post_init(self, __context) -> None:
        if not self.full_name:
            self.full_name = self.name
