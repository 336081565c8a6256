# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Idea aggregate data access.
Whole-aggregate load/save with an optimistic version check.
NO business rules here, pure persistence.
"""

import threading
from typing import Optional

from team_service.core.exceptions import ConcurrencyError, NotFoundError
from team_service.models.domain import IdeaAggregate


class IdeaRepository:
    """In-memory idea storage.

    ``load`` hands out deep copies, so a caller's in-memory mutation is
    invisible to everyone else until ``save`` succeeds.
    """

    def __init__(self) -> None:
        self._store: dict[str, IdeaAggregate] = {}
        self._lock = threading.Lock()

    # ── Read ──

    def load(self, idea_id: str) -> IdeaAggregate:
        with self._lock:
            idea = self._store.get(idea_id)
            if idea is None:
                raise NotFoundError("Idea", idea_id)
            return idea.model_copy(deep=True)

    def get_all(self, author_id: Optional[str] = None) -> list[IdeaAggregate]:
        with self._lock:
            ideas = list(self._store.values())
        if author_id:
            ideas = [i for i in ideas if i.author_id == author_id]
        return [i.model_copy(deep=True) for i in ideas]

    def exists(self, idea_id: str) -> bool:
        return idea_id in self._store

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def create(self, idea: IdeaAggregate) -> IdeaAggregate:
        with self._lock:
            stored = idea.model_copy(deep=True)
            stored.version = 1
            self._store[idea.id] = stored
            return stored.model_copy(deep=True)

    def save(self, idea: IdeaAggregate) -> IdeaAggregate:
        """Compare-and-set on ``version``. Raises ConcurrencyError if stale."""
        with self._lock:
            current = self._store.get(idea.id)
            if current is None:
                raise NotFoundError("Idea", idea.id)
            if current.version != idea.version:
                raise ConcurrencyError(idea.id, idea.version, current.version)
            stored = idea.model_copy(deep=True)
            stored.version = idea.version + 1
            self._store[idea.id] = stored
            idea.version = stored.version
            return idea

    # ── Bulk / internal ──

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
