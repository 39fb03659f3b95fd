"""Concurrent job dispatch with jitter and bounded retry.

Each job is sent to the backend independently. Overload errors are retried with
exponential backoff; every other error is terminal for that job only.
"""

import asyncio
import random
import time
from typing import Awaitable, Callable, Optional, Protocol

import structlog

from shotlab.core.config import Settings
from shotlab.models.job import GenerationResult, JobOutcome, RenderJob
from shotlab.models.settings import GenerationSettings
from shotlab.services.exceptions import RetriesExhaustedError, TransientError
from shotlab.services.prompts.compiler import compile_image_prompt, compile_video_prompt

logger = structlog.get_logger(__name__)


class GenerativeBackend(Protocol):
    async def generate_image(
        self,
        prompt: str,
        product_image: str,
        settings: GenerationSettings,
        seed: Optional[int] = None,
    ) -> GenerationResult: ...

    async def generate_video(
        self, prompt: str, product_image: str, settings: GenerationSettings
    ) -> GenerationResult: ...


class GenerationDispatcher:
    """Sends render jobs to the backend and collects one outcome per job."""

    def __init__(
        self,
        backend: GenerativeBackend,
        config: Settings,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.backend = backend
        self.config = config
        self.rng = rng or random.Random()
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Wait before retry number `attempt + 1` (attempt is zero-based)."""
        return self.config.retry_base_delay_seconds * 2**attempt + self.rng.uniform(
            0, self.config.retry_jitter_seconds
        )

    async def _call_backend(
        self, job: RenderJob, product_image: str, settings: GenerationSettings
    ) -> GenerationResult:
        if settings.is_video:
            prompt = compile_video_prompt(settings, job)
            return await self.backend.generate_video(prompt, product_image, settings)

        prompt = compile_image_prompt(settings, job)
        return await self.backend.generate_image(
            prompt, product_image, settings, seed=job.batch_seed
        )

    async def dispatch_job(
        self, job: RenderJob, product_image: str, settings: GenerationSettings
    ) -> GenerationResult:
        """Run one job to a terminal result.

        Sleeps a random jitter before the first call, then retries transient
        errors up to `max_retries` times.

        Raises:
            RetriesExhaustedError: Transient errors persisted through every attempt
            ServiceError: Any non-transient error, on first occurrence
        """
        await self._sleep(self.rng.uniform(0, self.config.dispatch_jitter_seconds))

        retries = 0
        while True:
            try:
                return await self._call_backend(job, product_image, settings)
            except TransientError as e:
                if retries >= self.config.max_retries:
                    raise RetriesExhaustedError(
                        f"Backend still overloaded after {retries + 1} attempts: {e}",
                        attempts=retries + 1,
                    ) from e

                delay = self.backoff_delay(retries)
                retries += 1
                logger.warning(
                    "job.retry",
                    job_id=job.id,
                    retry_number=retries,
                    delay_seconds=round(delay, 3),
                    error_message=str(e),
                )
                await self._sleep(delay)

    async def _run(
        self, job: RenderJob, product_image: str, settings: GenerationSettings
    ) -> GenerationResult:
        start_time = time.time()
        try:
            result = await self.dispatch_job(job, product_image, settings)
        except Exception as e:
            logger.error(
                "job.failed",
                job_id=job.id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise

        logger.info(
            "job.succeeded",
            job_id=job.id,
            duration_seconds=round(time.time() - start_time, 3),
            input_tokens=result.usage.input_tokens,
            output_tokens=result.usage.output_tokens,
        )
        return result

    async def dispatch(
        self, jobs: list[RenderJob], product_image: str, settings: GenerationSettings
    ) -> list[JobOutcome]:
        """Dispatch all jobs concurrently.

        Args:
            jobs: Jobs of one batch
            product_image: Product photo as a data URL
            settings: Batch configuration

        Returns:
            One JobOutcome per job, in job order; a failed job never affects another
        """
        tasks = [self._run(job, product_image, settings) for job in jobs]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes = []
        for job, result in zip(jobs, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                outcomes.append(JobOutcome(job_id=job.id, error=result))
            else:
                outcomes.append(JobOutcome(job_id=job.id, result=result))
        return outcomes
