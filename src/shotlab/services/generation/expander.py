"""Job expander: one batch configuration into an ordered list of render jobs."""

import random
from typing import Optional

import structlog

from shotlab.models.job import RenderJob
from shotlab.models.settings import GenerationSettings
from shotlab.services.pricing import batch_axes
from shotlab.services.prompts.color_profile import build_color_profile

logger = structlog.get_logger(__name__)

MAX_SEED = 2**31 - 1


def draw_seed(settings: GenerationSettings, rng: random.Random) -> Optional[int]:
    """Shared batch seed, or None for models that do not accept one."""
    if settings.is_video:
        return None
    return rng.randint(0, MAX_SEED)


def expand(settings: GenerationSettings, rng: Optional[random.Random] = None) -> list[RenderJob]:
    """Expand a batch into render jobs.

    Video batches produce exactly one job. Image batches produce the Cartesian
    product device × angle × lens × output_count in that nesting order. Every job
    carries the same seed and color profile.

    Args:
        settings: Batch configuration
        rng: Random source for the batch seed (injectable for tests)

    Returns:
        Non-empty list of jobs
    """
    rng = rng or random.Random()
    axes = batch_axes(settings)
    seed = draw_seed(settings, rng)
    color_profile = build_color_profile(settings)

    jobs = [
        RenderJob(
            angle=angle,
            device=device,
            lens=lens,
            variant_index=variant,
            batch_seed=seed,
            color_profile=color_profile,
        )
        for device in axes.devices
        for angle in axes.angles
        for lens in axes.lenses
        for variant in range(axes.repetitions)
    ]

    logger.debug("batch.expanded", job_count=len(jobs), seed=seed, is_video=settings.is_video)
    return jobs
