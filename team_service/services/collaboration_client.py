# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Collaboration client: inter-service communication.
Hands a CollaborationIntent to the chat/notification side once a candidate
is selected. Fire-and-forget: the selection is already committed, so a
failure here is logged and never raised.
"""

import httpx

from team_service.core.config import settings
from team_service.core.logging import get_logger
from team_service.services.approach_service import CollaborationIntent

logger = get_logger(__name__)


class CollaborationClient:
    """Posts selection intents to the collaboration service."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        self._base_url = (base_url or settings.COLLABORATION_SERVICE_URL).rstrip("/")
        self._timeout = timeout or settings.HTTP_CLIENT_TIMEOUT

    def dispatch(self, intent: CollaborationIntent) -> bool:
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.post(
                    f"{self._base_url}/api/v1/collaborations",
                    json=intent.model_dump(),
                )
            logger.info(
                "Collaboration intent sent: idea=%s, candidate=%s, status=%d",
                intent.idea_id, intent.candidate_id, resp.status_code,
            )
            return resp.status_code < 400
        except Exception as exc:
            logger.warning("Collaboration service unreachable: %s", exc)
            return False
