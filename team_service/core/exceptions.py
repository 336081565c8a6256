# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service-wide exception hierarchy.

Services raise these types; controllers never catch them one by one.
``main.py`` registers one FastAPI handler per type so every route gets the
same status code and error body.

Usage:
    from team_service.core.exceptions import NotFoundError, PermissionError

    raise NotFoundError(resource="Idea", resource_id=idea_id)
    raise PermissionError("Only the idea author can manage approaches")

Role conflicts are deliberately absent: a collision on a role is returned
to the caller as data (see ``services.conflicts.RoleConflict``).
"""


class TeamServiceError(Exception):
    """Base class for every business error raised by the team service."""

    status_code: int = 400
    error_code: str = "team_service_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(TeamServiceError):
    """Raised when an idea, approach, member, or role does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Idea", "Team member").
        resource_id: The id that was looked up.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" '{resource_id}'"
        msg += " not found"
        super().__init__(msg)


class PermissionError(TeamServiceError):
    """Raised when the actor lacks the capability for an action."""

    status_code = 403
    error_code = "forbidden"


class InvalidTransitionError(TeamServiceError):
    """Raised on an illegal approach status change."""

    status_code = 409
    error_code = "invalid_transition"

    def __init__(self, current: str, target: str, allowed: list[str] | None = None) -> None:
        self.current = current
        self.target = target
        self.allowed = sorted(allowed or [])
        super().__init__(
            f"Invalid status transition from '{current}' to '{target}'. "
            f"Allowed: {self.allowed if self.allowed else 'none'}"
        )


class CapacityError(TeamServiceError):
    """Raised when removing a role that still has active occupants."""

    status_code = 409
    error_code = "role_occupied"


class ConcurrencyError(TeamServiceError):
    """Raised when saving an aggregate against a stale version.

    The caller is expected to reload the aggregate and retry.
    """

    status_code = 409
    error_code = "version_conflict"

    def __init__(self, idea_id: str, expected: int, actual: int | None) -> None:
        self.idea_id = idea_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Idea '{idea_id}' was modified concurrently "
            f"(expected version {expected}, found {actual}); reload and retry"
        )


class ValidationError(TeamServiceError):
    """Raised when well-formed input violates a business rule.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured responses.
    """

    status_code = 422
    error_code = "validation_error"

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)
