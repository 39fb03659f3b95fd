"""Batch reconciliation tests.

Tests focus on:
- Every entry reaching a terminal state
- Cost and variance per completed entry
- One stats increment covering successes only
- Missing outcomes and credential-rejection signalling
"""

import random
from functools import partial

import httpx
import pytest

from shotlab.models.history import HistoryEntry, HistoryStatus
from shotlab.models.job import GenerationResult, JobOutcome, TokenUsage
from shotlab.models.settings import (
    AIModel,
    GenerationSettings,
    ViewAngle,
    WatermarkSettings,
)
from shotlab.services.exceptions import AuthorizationError, PermanentError, WatermarkError
from shotlab.services.generation.expander import expand
from shotlab.services.media import parse_data_url
from shotlab.services.pricing import compute_cost, unit_estimate
from shotlab.services.reconciler import INSUFFICIENT_RESULTS_MESSAGE, BatchReconciler
from shotlab.services.watermark import load_logo

FOUR_ANGLES = (
    ViewAngle.EYE_LEVEL,
    ViewAngle.HIGH_ANGLE_45,
    ViewAngle.LOW_ANGLE,
    ViewAngle.TOP_DOWN,
)


def processing_entries(jobs) -> list[HistoryEntry]:
    return [
        HistoryEntry(
            id=job.id, original_url="data:image/png;base64,AA==", status=HistoryStatus.PROCESSING
        )
        for job in jobs
    ]


def success(
    job, input_tokens: int, output_tokens: int, artifact_url: str = "data:image/png;base64,AA=="
) -> JobOutcome:
    return JobOutcome(
        job_id=job.id,
        result=GenerationResult(
            artifact_url=artifact_url,
            usage=TokenUsage(input_tokens=input_tokens, output_tokens=output_tokens),
            seed=job.batch_seed,
        ),
    )


async def no_watermark(url, config, logo=None):
    return url


@pytest.mark.asyncio
async def test_variance_within_twenty_percent():
    settings = GenerationSettings(model=AIModel.FAST_IMAGE)
    jobs = expand(settings, random.Random(0))
    entries = processing_entries(jobs)
    unit = unit_estimate(settings)

    # Actual usage 10% above the estimate on both sides
    outcome = success(
        jobs[0], round(unit.total_input_tokens * 1.1), round(unit.total_output_tokens * 1.1)
    )

    result = await BatchReconciler(no_watermark).reconcile(jobs, [outcome], settings, entries)

    cost = result.entries[0].cost
    assert result.entries[0].status == HistoryStatus.COMPLETED
    assert cost.estimated_cost == pytest.approx(unit.cost_usd)
    assert -20 <= cost.variance_percent <= 20
    assert cost.variance_percent == pytest.approx(10, abs=0.1)


@pytest.mark.asyncio
async def test_partial_failure_three_completed_one_failed():
    settings = GenerationSettings(view_angle=FOUR_ANGLES)
    jobs = expand(settings, random.Random(0))
    entries = processing_entries(jobs)
    outcomes = [success(job, 1000, 1000) for job in jobs[:3]]
    outcomes.append(JobOutcome(job_id=jobs[3].id, error=PermanentError("Safety block")))

    result = await BatchReconciler(no_watermark).reconcile(jobs, outcomes, settings, entries)

    statuses = [entry.status for entry in result.entries]
    assert statuses.count(HistoryStatus.COMPLETED) == 3
    assert statuses.count(HistoryStatus.FAILED) == 1
    assert result.entries[3].error == "Safety block"
    assert result.stats_increment.images_generated == 3
    assert result.stats_increment.input_tokens == 3000
    assert result.stats_increment.cost == pytest.approx(
        3 * compute_cost(settings.model, 1000, 1000)
    )
    assert result.requires_credential_reselection is False


@pytest.mark.asyncio
async def test_missing_outcome_fails_with_insufficient_results():
    settings = GenerationSettings(output_count=3)
    jobs = expand(settings, random.Random(0))
    entries = processing_entries(jobs)
    outcomes = [success(jobs[0], 1, 1)]

    result = await BatchReconciler(no_watermark).reconcile(jobs, outcomes, settings, entries)

    assert all(entry.is_terminal for entry in result.entries)
    assert [entry.error for entry in result.entries[1:]] == [INSUFFICIENT_RESULTS_MESSAGE] * 2
    assert result.stats_increment.images_generated == 1


@pytest.mark.asyncio
async def test_outcomes_matched_by_job_id_not_order():
    settings = GenerationSettings(view_angle=FOUR_ANGLES[:2])
    jobs = expand(settings, random.Random(0))
    entries = processing_entries(jobs)
    outcomes = [
        JobOutcome(job_id=jobs[1].id, error=PermanentError("second failed")),
        success(jobs[0], 5, 5),
    ]

    result = await BatchReconciler(no_watermark).reconcile(jobs, outcomes, settings, entries)

    by_id = {entry.id: entry for entry in result.entries}
    assert by_id[jobs[0].id].status == HistoryStatus.COMPLETED
    assert by_id[jobs[1].id].error == "second failed"


@pytest.mark.asyncio
async def test_authorization_failure_requests_credential_reselection():
    settings = GenerationSettings()
    jobs = expand(settings, random.Random(0))
    entries = processing_entries(jobs)
    outcomes = [JobOutcome(job_id=jobs[0].id, error=AuthorizationError("403 PERMISSION_DENIED"))]

    result = await BatchReconciler(no_watermark).reconcile(jobs, outcomes, settings, entries)

    assert result.requires_credential_reselection is True
    assert result.stats_increment.images_generated == 0


@pytest.mark.asyncio
async def test_completed_entry_carries_seed():
    settings = GenerationSettings()
    jobs = expand(settings, random.Random(0))
    entries = processing_entries(jobs)

    result = await BatchReconciler(no_watermark).reconcile(
        jobs, [success(jobs[0], 1, 1)], settings, entries
    )

    assert result.entries[0].seed == jobs[0].batch_seed
    assert result.entries[0].processed_url is not None


async def fixed_logo(url):
    return b"logo-bytes"


@pytest.mark.asyncio
async def test_watermark_applied_with_batch_logo():
    applied = []

    async def watermark(url, config, logo=None):
        applied.append(logo)
        return "data:image/png;base64,V00="

    settings = GenerationSettings(watermark=WatermarkSettings(enabled=True, url="https://x/l.png"))
    jobs = expand(settings, random.Random(0))
    entries = processing_entries(jobs)

    result = await BatchReconciler(watermark, fixed_logo).reconcile(
        jobs, [success(jobs[0], 1, 1)], settings, entries
    )

    assert applied == [b"logo-bytes"]
    assert result.entries[0].processed_url == "data:image/png;base64,V00="


@pytest.mark.asyncio
async def test_logo_fetched_once_per_batch(png_data_url, logo_data_url):
    logo_bytes = parse_data_url(logo_data_url)[1]
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, content=logo_bytes)

    loader = partial(load_logo, transport=httpx.MockTransport(handler))
    settings = GenerationSettings(
        view_angle=FOUR_ANGLES,
        watermark=WatermarkSettings(enabled=True, url="https://cdn.example/logo.png"),
    )
    jobs = expand(settings, random.Random(0))
    outcomes = [success(job, 1, 1, artifact_url=png_data_url) for job in jobs]

    result = await BatchReconciler(logo_loader=loader).reconcile(
        jobs, outcomes, settings, processing_entries(jobs)
    )

    assert len(requests) == 1
    assert all(entry.status == HistoryStatus.COMPLETED for entry in result.entries)
    assert all(entry.processed_url != png_data_url for entry in result.entries)


@pytest.mark.asyncio
async def test_unloadable_logo_leaves_whole_batch_unmarked():
    calls = []

    async def watermark(url, config, logo=None):
        calls.append(url)
        return url

    async def invalid_logo(url):
        raise httpx.InvalidURL("Invalid port")

    settings = GenerationSettings(
        output_count=2, watermark=WatermarkSettings(enabled=True, url="http://[::1")
    )
    jobs = expand(settings, random.Random(0))
    outcomes = [success(job, 1, 1) for job in jobs]

    result = await BatchReconciler(watermark, invalid_logo).reconcile(
        jobs, outcomes, settings, processing_entries(jobs)
    )

    assert calls == []
    assert [entry.status for entry in result.entries] == [HistoryStatus.COMPLETED] * 2
    assert result.stats_increment.images_generated == 2


@pytest.mark.parametrize("error", [WatermarkError("corrupt logo"), RuntimeError("pillow crashed")])
@pytest.mark.asyncio
async def test_watermark_failure_keeps_original_artifact(error):
    async def broken_watermark(url, config, logo=None):
        raise error

    settings = GenerationSettings(watermark=WatermarkSettings(enabled=True, url="https://x/l.png"))
    jobs = expand(settings, random.Random(0))
    entries = processing_entries(jobs)

    result = await BatchReconciler(broken_watermark, fixed_logo).reconcile(
        jobs, [success(jobs[0], 1, 1)], settings, entries
    )

    assert result.entries[0].status == HistoryStatus.COMPLETED
    assert result.entries[0].processed_url == "data:image/png;base64,AA=="
    assert result.stats_increment.images_generated == 1


def test_fail_batch_marks_every_entry_failed():
    settings = GenerationSettings(output_count=4)
    jobs = expand(settings, random.Random(0))
    entries = processing_entries(jobs)

    result = BatchReconciler(no_watermark).fail_batch(
        jobs, entries, RuntimeError("network down"), settings
    )

    assert len(result.entries) == 4
    assert all(entry.status == HistoryStatus.FAILED for entry in result.entries)
    assert all(entry.error == "network down" for entry in result.entries)
    assert result.stats_increment.images_generated == 0


def test_fail_batch_with_not_found_requests_reselection():
    settings = GenerationSettings()
    jobs = expand(settings, random.Random(0))

    result = BatchReconciler(no_watermark).fail_batch(
        jobs, processing_entries(jobs), RuntimeError("Requested entity was not found"), settings
    )

    assert result.requires_credential_reselection is True


def test_error_mentioning_unrelated_number_is_not_auth_failure():
    settings = GenerationSettings()
    jobs = expand(settings, random.Random(0))

    result = BatchReconciler(no_watermark).fail_batch(
        jobs, processing_entries(jobs), RuntimeError("payload of 14030 bytes rejected"), settings
    )

    assert result.requires_credential_reselection is False
