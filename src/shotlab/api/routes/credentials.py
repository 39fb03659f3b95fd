"""Credential reselection endpoints.

- GET /api/credentials/status - Whether a failed batch asked for another API key
- POST /api/credentials/acknowledge - Clear the request once a new key is in place
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shotlab.api.dependencies import get_credential_monitor
from shotlab.services.credentials import CredentialMonitor

router = APIRouter(prefix="/api/credentials", tags=["credentials"])


class CredentialStatusResponse(BaseModel):
    reselection_requested: bool
    requested_at: Optional[datetime] = None
    reason: Optional[str] = None


def _status(monitor: CredentialMonitor) -> CredentialStatusResponse:
    return CredentialStatusResponse(
        reselection_requested=monitor.reselection_requested,
        requested_at=monitor.requested_at,
        reason=monitor.reason,
    )


@router.get("/status", response_model=CredentialStatusResponse)
async def credential_status(
    monitor: CredentialMonitor = Depends(get_credential_monitor),
) -> CredentialStatusResponse:
    return _status(monitor)


@router.post("/acknowledge", response_model=CredentialStatusResponse)
async def acknowledge_credentials(
    monitor: CredentialMonitor = Depends(get_credential_monitor),
) -> CredentialStatusResponse:
    monitor.acknowledge()
    return _status(monitor)
