"""Batch worker: submits batches as processing entries and runs them to completion.

Lifecycle of one batch:
1. submit_batch() expands the settings into jobs and persists one processing
   entry per job (entry id == job id), each carrying the per-unit estimate.
2. process_batch() dispatches every job concurrently, reconciles the outcomes
   into completed/failed entries outside any transaction, then persists them
   together with one lifetime stats increment in a single unit of work.
3. If any failure looked like a rejected credential, the credential hook is
   called once for the batch.

If processing raises unexpectedly, BatchRunner fails the entries still in
processing with that error. Entries left in processing by a dead process are
failed on the next startup by recover_interrupted_entries(). Neither is retried.
"""

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional
from uuid import uuid4

import structlog

from shotlab.models.history import CostData, HistoryEntry, HistoryStatus
from shotlab.models.job import RenderJob
from shotlab.models.settings import GenerationSettings
from shotlab.services.credentials import CredentialMonitor
from shotlab.services.generation.dispatcher import GenerationDispatcher
from shotlab.services.generation.expander import expand
from shotlab.services.pricing import CostEstimate, estimate, unit_estimate
from shotlab.services.reconciler import BatchReconciler, ReconcileResult

logger = structlog.get_logger(__name__)

CREDENTIAL_REJECTED_REASON = "Backend rejected the API key or the model is not accessible"


@dataclass(frozen=True)
class SubmittedBatch:
    batch_id: str
    jobs: list[RenderJob]
    estimate: CostEstimate

    @property
    def entry_ids(self) -> list[str]:
        return [job.id for job in self.jobs]


def build_processing_entries(
    batch_id: str,
    jobs: list[RenderJob],
    product_image: str,
    settings: GenerationSettings,
) -> list[HistoryEntry]:
    unit = unit_estimate(settings)
    cost = CostData(
        estimated_input_tokens=unit.total_input_tokens,
        estimated_output_tokens=unit.total_output_tokens,
        estimated_cost=unit.cost_usd,
    )
    settings_used = settings.model_dump(mode="json")
    return [
        HistoryEntry(
            id=job.id,
            batch_id=batch_id,
            original_url=product_image,
            status=HistoryStatus.PROCESSING,
            is_video=settings.is_video,
            settings_used=settings_used,
            seed=job.batch_seed,
            cost_data=cost.model_dump(),
        )
        for job in jobs
    ]


async def submit_batch(
    uow_factory: Callable,
    settings: GenerationSettings,
    product_image: str,
    rng: Optional[random.Random] = None,
) -> SubmittedBatch:
    """Expand a batch and persist its processing entries.

    Args:
        uow_factory: Factory producing UnitOfWork instances
        settings: Batch configuration snapshot
        product_image: Product photo as a data URL
        rng: Random source for the batch seed

    Returns:
        SubmittedBatch with the jobs to dispatch and the batch estimate
    """
    jobs = expand(settings, rng)
    batch_id = str(uuid4())
    entries = build_processing_entries(batch_id, jobs, product_image, settings)

    async with await uow_factory() as uow:
        await uow.history.put_many(entries)

    batch = SubmittedBatch(batch_id=batch_id, jobs=jobs, estimate=estimate(settings))
    logger.info(
        "batch.submitted",
        batch_id=batch_id,
        job_count=len(jobs),
        model=settings.model.value,
        estimated_cost_usd=round(batch.estimate.cost_usd, 6),
    )
    return batch


async def _load_processing_entries(
    uow_factory: Callable, entry_ids: list[str]
) -> list[HistoryEntry]:
    async with await uow_factory() as uow:
        stored = await uow.history.get_by_ids(entry_ids)
    return [entry for entry in stored.values() if entry.status == HistoryStatus.PROCESSING]


async def _persist_result(uow_factory: Callable, result: ReconcileResult) -> None:
    """Write terminal entries and the stats increment in one transaction."""
    async with await uow_factory() as uow:
        # Entries deleted while the batch was reconciled are not recreated
        present = await uow.history.get_by_ids([entry.id for entry in result.entries])
        await uow.history.put_many([entry for entry in result.entries if entry.id in present])
        if result.stats_increment.images_generated > 0:
            await uow.stats.increment(result.stats_increment)


async def process_batch(
    batch: SubmittedBatch,
    product_image: str,
    settings: GenerationSettings,
    dispatcher: GenerationDispatcher,
    reconciler: BatchReconciler,
    uow_factory: Callable,
    on_credential_rejected: Optional[Callable[[str], None]] = None,
) -> ReconcileResult:
    """Dispatch a submitted batch and persist its terminal state.

    Per-job errors become failed entries. An unexpected error in dispatch fails
    every entry of the batch with that error. Reconciliation (watermark I/O
    included) runs between two short transactions, never inside one.

    Returns:
        ReconcileResult that was persisted
    """
    start_time = time.time()
    logger.info("batch.started", batch_id=batch.batch_id, job_count=len(batch.jobs))

    try:
        outcomes = await dispatcher.dispatch(batch.jobs, product_image, settings)
        dispatch_error: Optional[Exception] = None
    except Exception as e:
        logger.error(
            "batch.dispatch_failed",
            batch_id=batch.batch_id,
            error_type=type(e).__name__,
            error_message=str(e),
            exc_info=True,
        )
        outcomes, dispatch_error = [], e

    # Entries deleted by the user mid-batch are skipped
    entries = await _load_processing_entries(uow_factory, batch.entry_ids)

    if dispatch_error is not None:
        result = reconciler.fail_batch(batch.jobs, entries, dispatch_error, settings)
    else:
        result = await reconciler.reconcile(batch.jobs, outcomes, settings, entries)

    await _persist_result(uow_factory, result)

    if result.requires_credential_reselection and on_credential_rejected is not None:
        on_credential_rejected(CREDENTIAL_REJECTED_REASON)

    logger.info(
        "batch.completed",
        batch_id=batch.batch_id,
        succeeded=result.stats_increment.images_generated,
        failed=len(result.entries) - result.stats_increment.images_generated,
        duration_seconds=round(time.time() - start_time, 3),
    )
    return result


async def fail_unfinished_entries(
    batch: SubmittedBatch,
    settings: GenerationSettings,
    reconciler: BatchReconciler,
    uow_factory: Callable,
    error: BaseException,
) -> ReconcileResult:
    """Fail whatever a crashed batch left in processing.

    Returns:
        ReconcileResult that was persisted (no stats increment)
    """
    entries = await _load_processing_entries(uow_factory, batch.entry_ids)
    result = reconciler.fail_batch(batch.jobs, entries, error, settings)
    await _persist_result(uow_factory, result)
    return result


async def recover_interrupted_entries(uow_factory: Callable) -> int:
    """Fail entries stuck in processing on startup.

    Returns:
        Number of entries marked failed
    """
    async with await uow_factory() as uow:
        recovered_count = await uow.history.mark_interrupted()

    if recovered_count > 0:
        logger.info("worker.recovery", interrupted_entries_failed=recovered_count)
    return recovered_count


class BatchRunner:
    """Runs submitted batches as background tasks and keeps them referenced."""

    def __init__(
        self,
        uow_factory: Callable,
        dispatcher: GenerationDispatcher,
        reconciler: BatchReconciler,
        credentials: CredentialMonitor,
        rng: Optional[random.Random] = None,
    ):
        self.uow_factory = uow_factory
        self.dispatcher = dispatcher
        self.reconciler = reconciler
        self.credentials = credentials
        self.rng = rng
        self._tasks: set[asyncio.Task] = set()

    @property
    def active_batches(self) -> int:
        return len(self._tasks)

    async def submit(self, settings: GenerationSettings, product_image: str) -> SubmittedBatch:
        """Persist a batch and schedule its processing in the background."""
        batch = await submit_batch(self.uow_factory, settings, product_image, self.rng)
        task = asyncio.create_task(
            self._run(batch, product_image, settings), name=f"batch-{batch.batch_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return batch

    async def _run(
        self, batch: SubmittedBatch, product_image: str, settings: GenerationSettings
    ) -> None:
        try:
            await process_batch(
                batch,
                product_image,
                settings,
                self.dispatcher,
                self.reconciler,
                self.uow_factory,
                on_credential_rejected=self.credentials.request_reselection,
            )
        except asyncio.CancelledError:
            logger.info("batch.cancelled", batch_id=batch.batch_id)
            raise
        except Exception as e:
            logger.error(
                "batch.crashed",
                batch_id=batch.batch_id,
                error_type=type(e).__name__,
                error_message=str(e),
                exc_info=True,
            )
            await self._fail_unfinished(batch, settings, e)

    async def _fail_unfinished(
        self, batch: SubmittedBatch, settings: GenerationSettings, error: Exception
    ) -> None:
        try:
            result = await fail_unfinished_entries(
                batch, settings, self.reconciler, self.uow_factory, error
            )
        except Exception as e:
            # Store unavailable; startup recovery fails the entries instead
            logger.error(
                "batch.fail_unfinished_failed",
                batch_id=batch.batch_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return

        if result.requires_credential_reselection:
            self.credentials.request_reselection(CREDENTIAL_REJECTED_REASON)

    async def wait_idle(self) -> None:
        """Wait for every running batch to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        logger.info("worker.stopped")
