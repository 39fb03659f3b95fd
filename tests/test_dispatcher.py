"""Dispatch and retry tests.

Tests focus on:
- Bounded retry: 1 initial attempt + MAX_RETRIES retries, then RetriesExhaustedError
- Non-transient errors surfacing immediately
- Per-job failure isolation in concurrent fan-out
- Jitter and backoff delays staying within bounds
"""

import random

import pytest

from shotlab.models.settings import AIModel, AspectRatio, GenerationSettings, ViewAngle
from shotlab.services.exceptions import (
    EmptyResponseError,
    PermanentError,
    RetriesExhaustedError,
    TransientError,
)
from shotlab.services.generation.dispatcher import GenerationDispatcher
from shotlab.services.generation.expander import expand

PRODUCT = "data:image/png;base64,iVBORw0KGgo="


def make_dispatcher(backend, config, instant_sleep, seed: int = 0) -> GenerationDispatcher:
    return GenerationDispatcher(backend, config, rng=random.Random(seed), sleep=instant_sleep)


@pytest.mark.asyncio
async def test_persistent_overload_stops_after_six_attempts(
    config, instant_sleep, sleeps, fake_backend_cls
):
    backend = fake_backend_cls(fail=lambda prompt, call: TransientError("503 model overloaded"))
    dispatcher = make_dispatcher(backend, config, instant_sleep)
    settings = GenerationSettings()
    job = expand(settings, random.Random(0))[0]

    with pytest.raises(RetriesExhaustedError) as exc_info:
        await dispatcher.dispatch_job(job, PRODUCT, settings)

    assert backend.calls == 6
    assert exc_info.value.attempts == 6
    # 1 dispatch jitter + 5 backoff waits
    assert len(sleeps) == 6


@pytest.mark.asyncio
async def test_transient_error_then_success(config, instant_sleep, fake_backend_cls):
    backend = fake_backend_cls(
        fail=lambda prompt, call: TransientError("429 rate limit") if call <= 2 else None
    )
    dispatcher = make_dispatcher(backend, config, instant_sleep)
    settings = GenerationSettings()
    job = expand(settings, random.Random(0))[0]

    result = await dispatcher.dispatch_job(job, PRODUCT, settings)

    assert backend.calls == 3
    assert result.artifact_url.startswith("data:image/png;base64,")


@pytest.mark.asyncio
async def test_permanent_error_is_not_retried(config, instant_sleep, fake_backend_cls):
    backend = fake_backend_cls(fail=lambda prompt, call: PermanentError("400 invalid argument"))
    dispatcher = make_dispatcher(backend, config, instant_sleep)
    settings = GenerationSettings()
    job = expand(settings, random.Random(0))[0]

    with pytest.raises(PermanentError, match="invalid argument"):
        await dispatcher.dispatch_job(job, PRODUCT, settings)

    assert backend.calls == 1


@pytest.mark.asyncio
async def test_text_response_surfaces_model_text(config, instant_sleep, fake_backend_cls):
    backend = fake_backend_cls(
        fail=lambda prompt, call: EmptyResponseError("I cannot edit this image")
    )
    dispatcher = make_dispatcher(backend, config, instant_sleep)
    settings = GenerationSettings()
    job = expand(settings, random.Random(0))[0]

    with pytest.raises(EmptyResponseError, match="I cannot edit this image"):
        await dispatcher.dispatch_job(job, PRODUCT, settings)


@pytest.mark.asyncio
async def test_delays_stay_within_bounds(config, instant_sleep, sleeps, fake_backend_cls):
    backend = fake_backend_cls(fail=lambda prompt, call: TransientError("UNAVAILABLE"))
    dispatcher = make_dispatcher(backend, config, instant_sleep, seed=123)
    settings = GenerationSettings()
    job = expand(settings, random.Random(0))[0]

    with pytest.raises(RetriesExhaustedError):
        await dispatcher.dispatch_job(job, PRODUCT, settings)

    jitter, *backoffs = sleeps
    assert 0 <= jitter <= config.dispatch_jitter_seconds
    for attempt, delay in enumerate(backoffs):
        base = config.retry_base_delay_seconds * 2**attempt
        assert base <= delay <= base + config.retry_jitter_seconds


@pytest.mark.asyncio
async def test_partial_failure_is_isolated(config, instant_sleep, fake_backend_cls):
    """Four jobs, the top-down one fails permanently: 3 results + 1 error."""
    backend = fake_backend_cls(
        fail=lambda prompt, call: PermanentError("safety block") if "TOP-DOWN" in prompt else None
    )
    dispatcher = make_dispatcher(backend, config, instant_sleep)
    settings = GenerationSettings(
        view_angle=(
            ViewAngle.EYE_LEVEL,
            ViewAngle.HIGH_ANGLE_45,
            ViewAngle.LOW_ANGLE,
            ViewAngle.TOP_DOWN,
        )
    )
    jobs = expand(settings, random.Random(0))

    outcomes = await dispatcher.dispatch(jobs, PRODUCT, settings)

    assert [outcome.job_id for outcome in outcomes] == [job.id for job in jobs]
    succeeded = [outcome for outcome in outcomes if outcome.succeeded]
    failed = [outcome for outcome in outcomes if not outcome.succeeded]
    assert len(succeeded) == 3
    assert len(failed) == 1
    assert failed[0].job_id == jobs[3].id
    assert "safety block" in str(failed[0].error)


@pytest.mark.asyncio
async def test_image_jobs_receive_shared_seed(config, instant_sleep, fake_backend_cls):
    backend = fake_backend_cls()
    dispatcher = make_dispatcher(backend, config, instant_sleep)
    settings = GenerationSettings(output_count=3)
    jobs = expand(settings, random.Random(9))

    await dispatcher.dispatch(jobs, PRODUCT, settings)

    assert len(set(backend.seeds)) == 1
    assert backend.seeds[0] == jobs[0].batch_seed


@pytest.mark.asyncio
async def test_video_job_uses_video_prompt(config, instant_sleep, fake_backend_cls):
    backend = fake_backend_cls()
    dispatcher = make_dispatcher(backend, config, instant_sleep)
    settings = GenerationSettings(model=AIModel.VIDEO, aspect_ratio=AspectRatio.STORY)
    jobs = expand(settings)

    outcomes = await dispatcher.dispatch(jobs, PRODUCT, settings)

    assert len(outcomes) == 1
    assert outcomes[0].result.is_video is True
    assert "TYPE: VIDEO GENERATION." in backend.prompts[0]
