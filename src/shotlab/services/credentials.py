"""Credential reselection signal shared between batch workers and the API."""

from datetime import datetime, timezone
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class CredentialMonitor:
    """Tracks whether a batch failed in a way that calls for another API key.

    Raised by the batch worker (at most once per batch), read and cleared by
    the client through the credentials endpoints.
    """

    def __init__(self) -> None:
        self.reselection_requested = False
        self.requested_at: Optional[datetime] = None
        self.reason: Optional[str] = None

    def request_reselection(self, reason: str) -> None:
        self.reselection_requested = True
        self.requested_at = datetime.now(timezone.utc)
        self.reason = reason
        logger.warning("credentials.reselection_requested", reason=reason)

    def acknowledge(self) -> None:
        self.reselection_requested = False
        self.requested_at = None
        self.reason = None
        logger.info("credentials.acknowledged")
