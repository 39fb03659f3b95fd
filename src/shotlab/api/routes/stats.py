"""Lifetime statistics endpoints.

- GET /api/stats - Cumulative images, tokens, cost and per-model counts
- POST /api/stats/reset - Zero every counter
"""

from datetime import datetime

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from shotlab.core.dependencies import get_uow
from shotlab.services.pricing import to_local_currency
from shotlab.uow import UnitOfWork

logger = structlog.get_logger()
router = APIRouter(prefix="/api/stats", tags=["stats"])


class LifetimeStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_images_generated: int
    total_input_tokens: int
    total_output_tokens: int
    total_cost: float = Field(..., description="Cumulative actual cost in USD")
    total_cost_local: int = Field(default=0, description="Cumulative actual cost in VND")
    model_counts: dict[str, int] = Field(..., description="Generated units per model id")
    updated_at: datetime


def _to_response(stats) -> LifetimeStatsResponse:
    response = LifetimeStatsResponse.model_validate(stats)
    response.total_cost_local = to_local_currency(stats.total_cost)
    return response


@router.get("", response_model=LifetimeStatsResponse)
async def get_stats(uow: UnitOfWork = Depends(get_uow)) -> LifetimeStatsResponse:
    return _to_response(await uow.stats.get())


@router.post("/reset", response_model=LifetimeStatsResponse)
async def reset_stats(uow: UnitOfWork = Depends(get_uow)) -> LifetimeStatsResponse:
    """Reset lifetime statistics to zero (history is not affected)."""
    stats = await uow.stats.reset()
    logger.info("stats.reset")
    return _to_response(stats)
