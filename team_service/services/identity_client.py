# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Identity directory client: inter-service communication.
Read-only lookups against the user service, used to enrich responses and
to search candidates. Failures are logged and degrade to empty results.
"""

from typing import Any, Optional

import httpx

from team_service.core.config import settings
from team_service.core.logging import get_logger

logger = get_logger(__name__)


class IdentityClient:
    """HTTP client for the platform's user directory."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        self._base_url = (base_url or settings.IDENTITY_SERVICE_URL).rstrip("/")
        self._timeout = timeout or settings.HTTP_CLIENT_TIMEOUT

    def resolve_user(self, user_id: str) -> Optional[dict[str, Any]]:
        """Return ``{id, display_name, avatar}`` or None when unknown/unreachable."""
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.get(f"{self._base_url}/api/v1/users/{user_id}")
            if resp.status_code == 200:
                data = resp.json()
                return {
                    "id": str(data.get("id", user_id)),
                    "display_name": data.get("display_name") or data.get("full_name") or data.get("first_name"),
                    "avatar": data.get("avatar"),
                }
        except Exception as exc:
            logger.warning("Identity service unreachable: %s", exc)
        return None

    def search_users(self, query: str, limit: int | None = None) -> list[dict[str, Any]]:
        """Search users by name, email, skills or interested roles."""
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.get(
                    f"{self._base_url}/api/v1/users/search",
                    params={"q": query, "limit": limit or settings.CANDIDATE_SEARCH_LIMIT},
                )
            if resp.status_code == 200:
                data = resp.json()
                return data.get("users", data) if isinstance(data, dict) else data
        except Exception as exc:
            logger.warning("Identity service unreachable: %s", exc)
        return []
