"""Batch generation endpoint.

- POST /api/batches - Create processing entries for a batch and run it in the background
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator, model_validator

from shotlab.api.dependencies import get_batch_runner, get_uow_factory
from shotlab.api.routes.estimate import EstimateResponse
from shotlab.api.routes.history import validate_image_data_url
from shotlab.models.settings import GenerationSettings
from shotlab.workers.batch_worker import BatchRunner

logger = structlog.get_logger()
router = APIRouter(prefix="/api/batches", tags=["batches"])


class CreateBatchRequest(BaseModel):
    """Product image (inline or a previously uploaded entry) plus batch settings."""

    image_url: Optional[str] = Field(
        default=None, description="Product photo as a base64 data URL"
    )
    source_entry_id: Optional[str] = Field(
        default=None, description="Use the original image of an existing history entry"
    )
    settings: GenerationSettings = Field(default_factory=GenerationSettings)

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_image_data_url(v) if v is not None else v

    @model_validator(mode="after")
    def require_image(self) -> "CreateBatchRequest":
        if not self.image_url and not self.source_entry_id:
            raise ValueError("Either image_url or source_entry_id is required")
        return self


class CreateBatchResponse(BaseModel):
    batch_id: str = Field(..., description="Identifier shared by every entry of the batch")
    entry_ids: list[str] = Field(..., description="Processing entries created, in job order")
    estimate: EstimateResponse


@router.post("", response_model=CreateBatchResponse, status_code=status.HTTP_202_ACCEPTED)
async def create_batch(
    request: CreateBatchRequest,
    uow_factory=Depends(get_uow_factory),
    runner: BatchRunner = Depends(get_batch_runner),
) -> CreateBatchResponse:
    """Accept a batch for generation.

    Entries are persisted as processing before this returns; results arrive
    asynchronously and are visible through the history endpoints.
    """
    product_image = request.image_url
    if product_image is None:
        async with await uow_factory() as uow:
            source = await uow.history.get_by_id(request.source_entry_id)
        if source is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Source entry not found"
            )
        product_image = source.original_url

    batch = await runner.submit(request.settings, product_image)
    logger.info("batch.accepted", batch_id=batch.batch_id, job_count=len(batch.jobs))

    return CreateBatchResponse(
        batch_id=batch.batch_id,
        entry_ids=batch.entry_ids,
        estimate=EstimateResponse.from_estimate(batch.estimate),
    )
