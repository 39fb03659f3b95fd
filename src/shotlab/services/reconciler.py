"""Batch reconciliation: job outcomes into terminal history entries and one stats delta."""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import structlog

from shotlab.models.history import CostData, HistoryEntry
from shotlab.models.job import JobOutcome, RenderJob
from shotlab.models.lifetime_stats import StatsIncrement
from shotlab.models.settings import GenerationSettings, WatermarkSettings
from shotlab.services.exceptions import InsufficientResultsError, is_auth_error
from shotlab.services.pricing import compute_cost, unit_estimate, variance_percent
from shotlab.services.watermark import apply_watermark, load_logo

logger = structlog.get_logger(__name__)

INSUFFICIENT_RESULTS_MESSAGE = "API did not return enough results"

Watermarker = Callable[..., Awaitable[str]]
LogoLoader = Callable[[str], Awaitable[bytes]]


@dataclass
class ReconcileResult:
    entries: list[HistoryEntry]
    stats_increment: StatsIncrement
    requires_credential_reselection: bool = False


class BatchReconciler:
    """Applies dispatch outcomes to a batch's processing entries.

    Entries are matched to jobs by id (an entry's id is its job's id). Every
    matched entry leaves reconciliation in a terminal state.

    The watermark logo is loaded once per batch, so either every image of the
    batch carries it or none does when the logo cannot be loaded.
    """

    def __init__(
        self,
        watermark: Watermarker = apply_watermark,
        logo_loader: LogoLoader = load_logo,
    ):
        self._watermark = watermark
        self._load_logo = logo_loader

    async def _batch_logo(
        self, settings: GenerationSettings, outcomes: list[JobOutcome]
    ) -> Optional[bytes]:
        config: WatermarkSettings = settings.watermark
        if settings.is_video or not config.enabled or not config.url:
            return None
        if not any(outcome.succeeded for outcome in outcomes):
            return None
        try:
            return await self._load_logo(config.url)
        except Exception as e:
            logger.warning(
                "watermark.failed",
                stage="logo",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return None

    async def _finalize_url(
        self,
        artifact_url: str,
        is_video: bool,
        settings: GenerationSettings,
        logo: Optional[bytes],
    ) -> str:
        if is_video or logo is None:
            return artifact_url
        try:
            return await self._watermark(artifact_url, settings.watermark, logo=logo)
        except Exception as e:
            # The generation is paid for; the entry completes with the unmarked artifact
            logger.warning(
                "watermark.failed",
                stage="composite",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return artifact_url

    async def reconcile(
        self,
        jobs: list[RenderJob],
        outcomes: list[JobOutcome],
        settings: GenerationSettings,
        entries: list[HistoryEntry],
    ) -> ReconcileResult:
        """Turn outcomes into completed/failed entries.

        Args:
            jobs: Jobs of the batch, in dispatch order
            outcomes: Outcomes reported by the dispatcher (may be fewer than jobs)
            settings: Batch configuration
            entries: Processing entries of the batch

        Returns:
            ReconcileResult with the updated entries (in job order), the stats
            increment covering successful jobs only, and whether any failure looked
            like a rejected credential
        """
        entries_by_id = {entry.id: entry for entry in entries}
        outcomes_by_id = {outcome.job_id: outcome for outcome in outcomes}
        estimate = unit_estimate(settings)
        logo = await self._batch_logo(settings, outcomes)

        updated: list[HistoryEntry] = []
        requires_reselection = False
        succeeded = input_tokens = output_tokens = 0
        total_cost = 0.0

        for job in jobs:
            entry = entries_by_id.get(job.id)
            if entry is None:
                logger.warning("batch.entry_missing", job_id=job.id)
                continue

            outcome = outcomes_by_id.get(job.id)
            if outcome is None:
                entry.mark_failed(str(InsufficientResultsError(INSUFFICIENT_RESULTS_MESSAGE)))
                updated.append(entry)
                continue

            if not outcome.succeeded:
                error = outcome.error or InsufficientResultsError(INSUFFICIENT_RESULTS_MESSAGE)
                entry.mark_failed(str(error))
                requires_reselection = requires_reselection or is_auth_error(error)
                updated.append(entry)
                continue

            result = outcome.result
            usage = result.usage
            actual_cost = compute_cost(settings.model, usage.input_tokens, usage.output_tokens)
            cost = CostData(
                estimated_input_tokens=estimate.total_input_tokens,
                estimated_output_tokens=estimate.total_output_tokens,
                estimated_cost=estimate.cost_usd,
                actual_input_tokens=usage.input_tokens,
                actual_output_tokens=usage.output_tokens,
                actual_cost=actual_cost,
                variance_percent=variance_percent(estimate.cost_usd, actual_cost),
            )
            processed_url = await self._finalize_url(
                result.artifact_url, result.is_video, settings, logo
            )
            entry.is_video = result.is_video
            entry.mark_completed(processed_url, cost, seed=result.seed)
            updated.append(entry)

            succeeded += 1
            input_tokens += usage.input_tokens
            output_tokens += usage.output_tokens
            total_cost += actual_cost

        increment = StatsIncrement(
            model=settings.model,
            images_generated=succeeded,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=total_cost,
        )
        logger.info(
            "batch.reconciled",
            job_count=len(jobs),
            succeeded=succeeded,
            failed=len(updated) - succeeded,
            cost_usd=round(total_cost, 6),
            requires_credential_reselection=requires_reselection,
        )
        return ReconcileResult(
            entries=updated,
            stats_increment=increment,
            requires_credential_reselection=requires_reselection,
        )

    def fail_batch(
        self,
        jobs: list[RenderJob],
        entries: list[HistoryEntry],
        error: BaseException,
        settings: GenerationSettings,
    ) -> ReconcileResult:
        """Mark every processing entry of the batch failed with one error."""
        job_ids = {job.id for job in jobs}
        message = str(error) or type(error).__name__
        updated = []
        for entry in entries:
            if entry.id in job_ids and not entry.is_terminal:
                entry.mark_failed(message)
                updated.append(entry)

        logger.error(
            "batch.failed",
            job_count=len(jobs),
            error_type=type(error).__name__,
            error_message=message,
        )
        return ReconcileResult(
            entries=updated,
            stats_increment=StatsIncrement(model=settings.model),
            requires_credential_reselection=is_auth_error(error),
        )
