# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Role suggestions: subroles and alternatives for a contested role.

The role catalog is consulted first (exact name, alternative name, then a
textual match). Whenever the catalog has nothing or fails, a static pattern
table keyed by role family takes over, so a suggestion request never fails.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from team_service.core.config import settings
from team_service.core.logging import get_logger
from team_service.metrics.prometheus import SUGGESTION_FALLBACKS
from team_service.models.domain import IdeaAggregate, SubroleSuggestion, normalize_role
from team_service.repositories.role_repository import RoleCatalogRepository

logger = get_logger(__name__)

ROLE_PATTERNS: dict[str, list[str]] = {
    "frontend developer": [
        "Senior Frontend Developer", "React Developer", "UI Developer", "Mobile Frontend Developer",
    ],
    "backend developer": [
        "Senior Backend Developer", "API Developer", "Database Developer", "DevOps Engineer",
    ],
    "data scientist": ["Senior Data Scientist", "ML Engineer", "Data Analyst", "AI Researcher"],
    "developer": ["Senior Developer", "Junior Developer", "Lead Developer", "Full Stack Developer"],
    "designer": ["UI Designer", "UX Designer", "Graphic Designer", "Product Designer"],
    "marketing": [
        "Digital Marketing", "Content Marketing", "Growth Marketing", "Social Media Marketing",
    ],
    "business": ["Business Development", "Strategy", "Operations", "Product Management"],
}

SKILL_LEVELS = ("junior", "mid", "senior", "lead", "specialist", "principal")


class RoleSuggestions(BaseModel):
    subroles: list[SubroleSuggestion] = Field(default_factory=list)
    alternatives: list[str] = Field(default_factory=list)
    patterns: list[SubroleSuggestion] = Field(default_factory=list)
    source: str = "catalog"


class SubroleOption(BaseModel):
    title: str
    level: str
    description: str


def extract_skill_level(role_name: str) -> str:
    lowered = role_name.lower()
    for level in SKILL_LEVELS:
        if level in lowered:
            return level
    return "mid"


def pattern_suggestions(base_role: str) -> list[SubroleSuggestion]:
    """
    Deterministic fallback. The longest family contained in the role wins
    ("frontend developer" over "developer"); failing that, the shortest
    family containing the role ("dev" -> "developer").
    """
    base_role = base_role.strip()
    key = normalize_role(base_role)
    match = None
    if key:
        match = next(
            (p for p in sorted(ROLE_PATTERNS, key=len, reverse=True) if p in key), None
        ) or next(
            (p for p in sorted(ROLE_PATTERNS, key=len) if key in p), None
        )
    if match is not None:
        return [
            SubroleSuggestion(
                name=name,
                description=f"Specialized {name} role",
                skill_level=extract_skill_level(name),
                source="pattern",
            )
            for name in ROLE_PATTERNS[match]
        ]
    return [
        SubroleSuggestion(name=f"Senior {base_role}", skill_level="senior", source="generic"),
        SubroleSuggestion(name=f"Lead {base_role}", skill_level="lead", source="generic"),
        SubroleSuggestion(name=f"{base_role} Specialist", skill_level="specialist", source="generic"),
    ]


def alternative_roles(requested_role: str, idea: IdeaAggregate, limit: int = 3) -> list[str]:
    """Open declared roles other than the requested one and not already held."""
    requested = normalize_role(requested_role)
    held = {m.normalized_role_type for m in idea.active_members()}
    return [
        role.role_type
        for role in idea.roles_needed
        if role.current_positions < role.max_positions
        and role.normalized_role_type not in held
        and role.normalized_role_type != requested
    ][:limit]


class RoleSuggestionService:
    """Business logic for subrole and alternative-role suggestions."""

    def __init__(self, catalog: RoleCatalogRepository) -> None:
        self._catalog = catalog

    def generate_resolution_suggestions(
        self,
        requested_role: str,
        idea: IdeaAggregate,
        context: Optional[dict[str, Any]] = None,
    ) -> RoleSuggestions:
        context = context or {}
        patterns = pattern_suggestions(requested_role)
        alternatives = alternative_roles(
            requested_role, idea, limit=settings.MAX_ALTERNATIVE_ROLES
        )

        try:
            definition = self._catalog.find_by_name(requested_role)
            if definition is None:
                similar = self._catalog.find_similar(requested_role)
                definition = similar[0] if similar else None
            if definition is None:
                SUGGESTION_FALLBACKS.labels(reason="not_in_catalog").inc()
                return RoleSuggestions(
                    subroles=patterns[: settings.MAX_SUBROLE_SUGGESTIONS],
                    alternatives=alternatives,
                    patterns=patterns,
                    source="pattern",
                )

            subroles = self._catalog.subroles_of(definition.role_name, {
                "project_type": context.get("project_type") or idea.category,
                "existing_roles": [m.assigned_role for m in idea.active_members()],
            })
        except Exception as exc:
            logger.warning("Role catalog lookup failed for '%s': %s", requested_role, exc)
            SUGGESTION_FALLBACKS.labels(reason="catalog_error").inc()
            return RoleSuggestions(
                subroles=patterns[: settings.MAX_SUBROLE_SUGGESTIONS],
                alternatives=alternatives,
                patterns=patterns,
                source="pattern",
            )

        if not subroles:
            SUGGESTION_FALLBACKS.labels(reason="no_subroles").inc()
            subroles, source = patterns, "pattern"
        else:
            source = "catalog"
        return RoleSuggestions(
            subroles=subroles[: settings.MAX_SUBROLE_SUGGESTIONS],
            alternatives=alternatives,
            patterns=patterns,
            source=source,
        )

    def get_subrole_options(self, role_type: str) -> list[SubroleOption]:
        """Subrole titles offered when a member adds someone under them."""
        role_type = role_type.strip()
        try:
            definition = self._catalog.find_by_name(role_type)
        except Exception as exc:
            logger.warning("Role catalog lookup failed for '%s': %s", role_type, exc)
            definition = None

        if definition is not None and definition.common_subroles:
            return [
                SubroleOption(
                    title=sub.name,
                    level=sub.skill_level.value,
                    description=sub.description or f"{sub.skill_level.value} level {role_type}",
                )
                for sub in definition.common_subroles
            ]

        return [
            SubroleOption(title=f"Junior {role_type}", level="junior", description=f"Entry level {role_type}"),
            SubroleOption(title=f"Senior {role_type}", level="senior", description=f"Senior level {role_type}"),
            SubroleOption(title=f"Lead {role_type}", level="lead", description=f"Lead {role_type}"),
            SubroleOption(title=f"{role_type} Specialist", level="specialist", description=f"Specialized {role_type}"),
            SubroleOption(title=f"{role_type} Assistant", level="assistant", description=f"Assistant {role_type}"),
        ]
