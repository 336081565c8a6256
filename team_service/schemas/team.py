# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""

from typing import Optional

from pydantic import BaseModel, Field

from team_service.models.domain import AccessLevel, ApproachStatus
from team_service.services.resolution import Resolution


# ── Idea Schemas ──

class RoleNeededInput(BaseModel):
    role_type: str = Field(..., min_length=1, max_length=255)
    is_core: bool = True
    max_positions: int = Field(default=1, ge=1, le=20)
    priority: int = Field(default=2, ge=1, le=3, description="1 critical, 2 important, 3 nice-to-have")
    skills_required: list[str] = Field(default_factory=list)
    description: str = ""


class IdeaCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    category: Optional[str] = Field(default=None, max_length=100)
    access_level: AccessLevel = AccessLevel.PUBLIC
    roles_needed: list[RoleNeededInput] = Field(default_factory=list)


# ── Approach Schemas ──

class ApproachCreateRequest(BaseModel):
    role: str = Field(..., min_length=1, max_length=255, description="Role the candidate applies for")
    description: str = Field(default="", max_length=2000)


class ApproachStatusUpdateRequest(BaseModel):
    """PATCH body. ``resolution`` is required only when selection hits a conflict."""
    status: ApproachStatus
    resolution: Optional[Resolution] = None


# ── Team Schemas ──

class RoleCreateRequest(RoleNeededInput):
    pass


class MemberRoleUpdateRequest(BaseModel):
    new_role: str = Field(..., min_length=1, max_length=255)
    is_lead: Optional[bool] = None


class LeadershipUpdateRequest(BaseModel):
    is_lead: bool


class SubroleCreateRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    title: Optional[str] = Field(default=None, max_length=255)
    level: Optional[str] = Field(
        default=None,
        pattern="^(junior|mid|senior|lead|specialist|assistant)$",
        description="Used to build the title when none is given",
    )


class ErrorResponse(BaseModel):
    error: str
    detail: str
