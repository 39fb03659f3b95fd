"""History API endpoints.

- POST /api/uploads - Register an uploaded product image as an idle entry
- GET /api/history - List entries, newest first
- GET /api/history/{entry_id} - Get one entry
- DELETE /api/history/{entry_id} - Delete one entry (lifetime stats are untouched)
- DELETE /api/history - Delete every entry (lifetime stats are untouched)
"""

from datetime import datetime
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, ConfigDict, Field, field_validator

from shotlab.core.dependencies import get_uow
from shotlab.models.history import HistoryEntry, HistoryStatus
from shotlab.services.media import parse_data_url
from shotlab.uow import UnitOfWork

logger = structlog.get_logger()
router = APIRouter(prefix="/api", tags=["history"])


def validate_image_data_url(value: str) -> str:
    try:
        mime_type, data = parse_data_url(value)
    except ValueError as e:
        raise ValueError(f"Image must be a base64 data URL: {e}")
    if not mime_type.startswith("image/"):
        raise ValueError(f"Unsupported media type: {mime_type}")
    if not data:
        raise ValueError("Image payload is empty")
    return value


class UploadRequest(BaseModel):
    image_url: str = Field(..., description="Product photo as a base64 data URL")

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: str) -> str:
        return validate_image_data_url(v)


class HistoryEntryDTO(BaseModel):
    """Data Transfer Object for history entries in API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    batch_id: Optional[str] = None
    original_url: str
    processed_url: Optional[str] = Field(
        default=None, description="Final artifact data URL (null until completed)"
    )
    timestamp: datetime
    status: HistoryStatus
    is_video: bool
    settings_used: Optional[dict] = None
    error: Optional[str] = Field(default=None, description="Failure reason (failed entries)")
    seed: Optional[int] = None
    cost_data: Optional[dict] = Field(
        default=None, description="Estimated vs. actual tokens and cost, with variance"
    )


class ClearHistoryResponse(BaseModel):
    deleted: int = Field(..., description="Number of entries deleted")


@router.post("/uploads", response_model=HistoryEntryDTO, status_code=status.HTTP_201_CREATED)
async def upload_image(
    request: UploadRequest, uow: UnitOfWork = Depends(get_uow)
) -> HistoryEntryDTO:
    """Store an uploaded product image as an idle history entry."""
    entry = await uow.history.put(
        HistoryEntry(original_url=request.image_url, status=HistoryStatus.IDLE)
    )
    logger.info("history.uploaded", entry_id=entry.id)
    return HistoryEntryDTO.model_validate(entry)


@router.get("/history", response_model=list[HistoryEntryDTO])
async def list_history(uow: UnitOfWork = Depends(get_uow)) -> list[HistoryEntryDTO]:
    entries = await uow.history.get_all()
    return [HistoryEntryDTO.model_validate(entry) for entry in entries]


@router.get("/history/{entry_id}", response_model=HistoryEntryDTO)
async def get_history_entry(entry_id: str, uow: UnitOfWork = Depends(get_uow)) -> HistoryEntryDTO:
    entry = await uow.history.get_by_id(entry_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return HistoryEntryDTO.model_validate(entry)


@router.delete("/history/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_history_entry(entry_id: str, uow: UnitOfWork = Depends(get_uow)) -> Response:
    """Delete one entry. Lifetime statistics are not affected."""
    deleted = await uow.history.delete(entry_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    logger.info("history.deleted", entry_id=entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/history", response_model=ClearHistoryResponse)
async def clear_history(uow: UnitOfWork = Depends(get_uow)) -> ClearHistoryResponse:
    """Delete every entry. Lifetime statistics are not affected."""
    deleted = await uow.history.clear()
    logger.info("history.cleared", deleted=deleted)
    return ClearHistoryResponse(deleted=deleted)
