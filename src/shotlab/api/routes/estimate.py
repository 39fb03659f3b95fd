"""Cost estimation endpoint.

- POST /api/estimate - Quote a batch configuration before confirming it
"""

import structlog
from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from shotlab.models.settings import GenerationSettings
from shotlab.services.pricing import CostEstimate, estimate

logger = structlog.get_logger()
router = APIRouter(prefix="/api/estimate", tags=["estimate"])


class EstimateResponse(BaseModel):
    """Pre-flight quote for a batch."""

    count: int = Field(..., description="Number of units (images or videos) the batch produces")
    total_input_tokens: int = Field(..., description="Estimated input tokens for the batch")
    total_output_tokens: int = Field(..., description="Estimated output tokens for the batch")
    cost_usd: float = Field(..., description="Estimated cost in USD (includes safety buffer)")
    cost_local: int = Field(..., description="Estimated cost in VND")
    is_video: bool = Field(..., description="True for a video batch")

    @classmethod
    def from_estimate(cls, quote: CostEstimate) -> "EstimateResponse":
        return cls(
            count=quote.count,
            total_input_tokens=quote.total_input_tokens,
            total_output_tokens=quote.total_output_tokens,
            cost_usd=quote.cost_usd,
            cost_local=quote.cost_local,
            is_video=quote.is_video,
        )


@router.post("", response_model=EstimateResponse, status_code=status.HTTP_200_OK)
async def estimate_batch(settings: GenerationSettings) -> EstimateResponse:
    """Estimate token usage and cost for a batch configuration."""
    quote = estimate(settings)
    logger.debug("estimate.computed", count=quote.count, cost_usd=round(quote.cost_usd, 6))
    return EstimateResponse.from_estimate(quote)
