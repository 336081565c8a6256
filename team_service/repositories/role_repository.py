# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Role catalog data access.
Read-heavy store of RoleDefinition entries; lookups are idempotent and safe
to retry.
"""

import re
import threading
from typing import Any, Optional

from team_service.models.domain import RoleDefinition, SubroleSuggestion, normalize_role

_TOKEN = re.compile(r"[a-z0-9+#]+")
MAX_CATALOG_SUBROLES = 5


def _tokens(value: str) -> set[str]:
    return set(_TOKEN.findall(normalize_role(value)))


class RoleCatalogRepository:
    """In-memory role catalog keyed by normalized name."""

    def __init__(self) -> None:
        self._store: dict[str, RoleDefinition] = {}
        self._lock = threading.Lock()

    # ── Read ──

    def get_all(self) -> list[RoleDefinition]:
        return list(self._store.values())

    def get_by_id(self, role_id: str) -> Optional[RoleDefinition]:
        return next((r for r in self._store.values() if r.id == role_id), None)

    def count(self) -> int:
        return len(self._store)

    def find_by_name(self, name: str) -> Optional[RoleDefinition]:
        """Exact normalized-name match, then alternative-name match."""
        key = normalize_role(name)
        if not key:
            return None
        exact = self._store.get(key)
        if exact is not None:
            return exact
        return next(
            (r for r in self._store.values() if key in r.alternative_names), None
        )

    def find_similar(self, name: str) -> list[RoleDefinition]:
        """Exact match if any, otherwise textual matches ranked by shared
        tokens, followed by alternative-name matches."""
        key = normalize_role(name)
        if not key:
            return []
        exact = self._store.get(key)
        if exact is not None:
            return [exact]

        query = _tokens(key)
        scored: list[tuple[int, RoleDefinition]] = []
        for role in self._store.values():
            haystack = _tokens(role.role_name) | _tokens(role.description)
            for similar in role.similar_roles:
                haystack |= _tokens(similar)
            score = len(query & haystack)
            if score:
                scored.append((score, role))
        scored.sort(key=lambda item: (-item[0], -item[1].usage_count, item[1].role_name))

        matches = [role for _, role in scored]
        for role in self._store.values():
            if key in role.alternative_names and role not in matches:
                matches.append(role)
        return matches

    def subroles_of(self, name: str, context: Optional[dict[str, Any]] = None) -> list[SubroleSuggestion]:
        """Subroles of a catalog role, narrowed by project type and the
        titles already present in the team. Empty when the role is unknown."""
        context = context or {}
        role = self.find_by_name(name)
        if role is None:
            return []

        suggestions = [
            SubroleSuggestion(
                name=sub.name,
                full_name=sub.name,
                description=sub.description or f"{sub.skill_level.value} level {role.role_name}",
                skill_level=sub.skill_level.value,
                parent_role_id=role.id,
            )
            for sub in role.common_subroles
        ]

        project_type = context.get("project_type")
        if project_type:
            for child in self._store.values():
                if child.parent_role == role.id and project_type in child.project_types:
                    suggestions.append(SubroleSuggestion(
                        name=child.role_name,
                        description=child.description,
                        parent_role_id=role.id,
                        source="project_type",
                    ))

        taken = {normalize_role(t) for t in context.get("existing_roles", [])}
        seen: set[str] = set()
        narrowed = []
        for suggestion in suggestions:
            key = normalize_role(suggestion.name)
            if key in taken or key in seen:
                continue
            seen.add(key)
            narrowed.append(suggestion)
        return narrowed[:MAX_CATALOG_SUBROLES]

    # ── Write ──

    def save(self, role: RoleDefinition) -> RoleDefinition:
        with self._lock:
            self._store[role.normalized_name] = role
        return role

    def increment_usage(self, name: str) -> Optional[RoleDefinition]:
        with self._lock:
            role = self.find_by_name(name)
            if role is not None:
                role.usage_count += 1
            return role

    # ── Bulk / internal ──

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
