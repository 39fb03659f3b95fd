"""Batch sizing and cost estimation.

batch_axes() is the single source of the Cartesian-product arithmetic: the cost
estimator counts it and the job expander enumerates it, so a quote always matches
the number of generated units.

Token figures are estimates; the backend reports actual usage per image request.
Prices are USD per 1M tokens and already include a 20% safety buffer.
"""

from dataclasses import dataclass
from math import prod

from shotlab.models.settings import (
    AIModel,
    FocalLength,
    GenerationSettings,
    PhotographyDevice,
    ViewAngle,
)

LOCAL_CURRENCY_RATE = 26000  # VND per USD
EST_INPUT_IMAGE_TOKENS = 258
EST_INPUT_TEXT_TOKENS = 800
EST_OUTPUT_TOKENS_PER_IMAGE = 1024
EST_VIDEO_INPUT_TOKENS = 2000
EST_VIDEO_OUTPUT_TOKENS_PER_SEC = 1500
HIGH_RES_OUTPUT_MULTIPLIER = 2

SAFETY_BUFFER = 1.2

DEFAULT_DEVICE = PhotographyDevice.PROFESSIONAL
DEFAULT_ANGLE = ViewAngle.EYE_LEVEL
DEFAULT_LENS = FocalLength.MM_50


@dataclass(frozen=True)
class ModelPrice:
    input_per_million: float
    output_per_million: float


_BASE_PRICES = {
    AIModel.PRO_IMAGE: ModelPrice(2.50, 10.00),
    AIModel.VIDEO: ModelPrice(5.00, 20.00),
    AIModel.FAST_IMAGE: ModelPrice(0.10, 0.40),
}

PRICES = {
    model: ModelPrice(
        input_per_million=price.input_per_million * SAFETY_BUFFER,
        output_per_million=price.output_per_million * SAFETY_BUFFER,
    )
    for model, price in _BASE_PRICES.items()
}


def get_price(model: AIModel) -> ModelPrice:
    """Unit prices for a model (unknown models fall back to the fast tier)."""
    return PRICES.get(model, PRICES[AIModel.FAST_IMAGE])


@dataclass(frozen=True)
class BatchAxes:
    """Resolved expansion axes; every axis has at least one element."""

    devices: tuple[PhotographyDevice, ...]
    angles: tuple[ViewAngle, ...]
    lenses: tuple[FocalLength, ...]
    repetitions: int

    @property
    def size(self) -> int:
        return prod((len(self.devices), len(self.angles), len(self.lenses), self.repetitions))


def batch_axes(settings: GenerationSettings) -> BatchAxes:
    """Resolve the axes a batch expands over.

    Empty axes fall back to a single default element. Video batches always have
    exactly one element per axis (the first selected value).
    """
    devices = tuple(settings.photography_device) or (DEFAULT_DEVICE,)
    angles = tuple(settings.view_angle) or (DEFAULT_ANGLE,)
    lenses = tuple(settings.focal_length) or (DEFAULT_LENS,)

    if settings.is_video:
        return BatchAxes(devices=devices[:1], angles=angles[:1], lenses=lenses[:1], repetitions=1)

    return BatchAxes(
        devices=devices,
        angles=angles,
        lenses=lenses,
        repetitions=max(settings.output_count, 1),
    )


def batch_size(settings: GenerationSettings) -> int:
    """Number of jobs (and history entries) a batch produces."""
    return batch_axes(settings).size


@dataclass(frozen=True)
class CostEstimate:
    count: int
    total_input_tokens: int
    total_output_tokens: int
    cost_usd: float
    cost_local: int
    is_video: bool


def compute_cost(model: AIModel, input_tokens: int, output_tokens: int) -> float:
    """USD cost of a token usage at a model's unit prices."""
    price = get_price(model)
    return (input_tokens / 1_000_000) * price.input_per_million + (
        output_tokens / 1_000_000
    ) * price.output_per_million


def to_local_currency(cost_usd: float) -> int:
    return round(cost_usd * LOCAL_CURRENCY_RATE)


def unit_tokens(settings: GenerationSettings) -> tuple[int, int]:
    """Estimated (input, output) tokens of a single generated unit."""
    if settings.is_video:
        return (
            EST_VIDEO_INPUT_TOKENS,
            settings.video_duration * EST_VIDEO_OUTPUT_TOKENS_PER_SEC,
        )

    output = EST_OUTPUT_TOKENS_PER_IMAGE
    if settings.model == AIModel.PRO_IMAGE and settings.is_high_res:
        output *= HIGH_RES_OUTPUT_MULTIPLIER
    return EST_INPUT_IMAGE_TOKENS + EST_INPUT_TEXT_TOKENS, output


def unit_estimate(settings: GenerationSettings) -> CostEstimate:
    """Estimate for one unit; the per-entry baseline for variance tracking."""
    input_tokens, output_tokens = unit_tokens(settings)
    cost_usd = compute_cost(settings.model, input_tokens, output_tokens)
    return CostEstimate(
        count=1,
        total_input_tokens=input_tokens,
        total_output_tokens=output_tokens,
        cost_usd=cost_usd,
        cost_local=to_local_currency(cost_usd),
        is_video=settings.is_video,
    )


def estimate(settings: GenerationSettings) -> CostEstimate:
    """Estimate the whole batch before confirmation.

    Args:
        settings: Batch configuration

    Returns:
        CostEstimate with unit count, token totals and cost in USD and local currency
    """
    count = batch_size(settings)
    input_tokens, output_tokens = unit_tokens(settings)
    total_input = input_tokens * count
    total_output = output_tokens * count
    cost_usd = compute_cost(settings.model, total_input, total_output)
    return CostEstimate(
        count=count,
        total_input_tokens=total_input,
        total_output_tokens=total_output,
        cost_usd=cost_usd,
        cost_local=to_local_currency(cost_usd),
        is_video=settings.is_video,
    )


def variance_percent(estimated_cost: float, actual_cost: float) -> float:
    """Relative deviation of actual from estimated cost, in percent."""
    if estimated_cost == 0:
        return 0.0
    return (actual_cost - estimated_cost) / estimated_cost * 100
