# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: SQL-backed idea aggregate storage.
The aggregate is stored as one JSON document per row next to its version;
stale writes are rejected by the ``WHERE version = :version`` guard.
"""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from team_service.core.exceptions import ConcurrencyError, NotFoundError
from team_service.core.logging import get_logger
from team_service.models.domain import IdeaAggregate

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS ideas (
    id          VARCHAR(64) PRIMARY KEY,
    author_id   VARCHAR(64) NOT NULL,
    version     INTEGER NOT NULL,
    payload     TEXT NOT NULL
)
"""


class SqlIdeaRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def init_schema(self) -> None:
        with self._engine.begin() as conn:
            conn.execute(text(SCHEMA))
        logger.info("Idea table ready")

    # ── Read ───────────────────────────────────────────────────────────

    def load(self, idea_id: str) -> IdeaAggregate:
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT payload, version FROM ideas WHERE id = :id"),
                {"id": idea_id},
            ).fetchone()
        if row is None:
            raise NotFoundError("Idea", idea_id)
        idea = IdeaAggregate.model_validate_json(row[0])
        idea.version = row[1]
        return idea

    def get_all(self, author_id: Optional[str] = None) -> list[IdeaAggregate]:
        query = "SELECT payload, version FROM ideas"
        params = {}
        if author_id:
            query += " WHERE author_id = :author_id"
            params["author_id"] = author_id
        with self._engine.connect() as conn:
            rows = conn.execute(text(query), params).fetchall()
        ideas = []
        for payload, version in rows:
            idea = IdeaAggregate.model_validate_json(payload)
            idea.version = version
            ideas.append(idea)
        return ideas

    def exists(self, idea_id: str) -> bool:
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT 1 FROM ideas WHERE id = :id"), {"id": idea_id}
            ).fetchone()
        return row is not None

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM ideas")).scalar() or 0

    # ── Write ──────────────────────────────────────────────────────────

    def create(self, idea: IdeaAggregate) -> IdeaAggregate:
        idea.version = 1
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO ideas (id, author_id, version, payload)
                    VALUES (:id, :author_id, :version, :payload)
                """),
                {"id": idea.id, "author_id": idea.author_id,
                 "version": idea.version, "payload": idea.model_dump_json()},
            )
        return idea

    def save(self, idea: IdeaAggregate) -> IdeaAggregate:
        """Compare-and-set on ``version``. Raises ConcurrencyError if stale."""
        expected = idea.version
        idea.version = expected + 1
        try:
            with self._engine.begin() as conn:
                result = conn.execute(
                    text("""
                        UPDATE ideas SET payload = :payload, version = :new_version
                        WHERE id = :id AND version = :version
                    """),
                    {"id": idea.id, "version": expected,
                     "new_version": idea.version, "payload": idea.model_dump_json()},
                )
                if result.rowcount == 1:
                    return idea
                row = conn.execute(
                    text("SELECT version FROM ideas WHERE id = :id"), {"id": idea.id}
                ).fetchone()
        except Exception:
            idea.version = expected
            raise
        idea.version = expected
        if row is None:
            raise NotFoundError("Idea", idea.id)
        raise ConcurrencyError(idea.id, expected, row[0])

    def clear(self) -> None:
        with self._engine.begin() as conn:
            conn.execute(text("DELETE FROM ideas"))
