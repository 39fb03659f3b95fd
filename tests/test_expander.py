"""Job expander tests.

Tests focus on:
- Job count always matching the estimator
- Deterministic device → angle → lens → repetition ordering
- One shared seed and color profile per batch
"""

import random

import pytest

from shotlab.models.settings import (
    AIModel,
    AspectRatio,
    FocalLength,
    GenerationSettings,
    PhotographyDevice,
    ViewAngle,
)
from shotlab.services.generation.expander import MAX_SEED, expand
from shotlab.services.pricing import estimate


@pytest.mark.parametrize(
    "settings",
    [
        GenerationSettings(),
        GenerationSettings(view_angle=(), focal_length=(), photography_device=()),
        GenerationSettings(
            view_angle=(ViewAngle.EYE_LEVEL, ViewAngle.TOP_DOWN, ViewAngle.LOW_ANGLE),
            focal_length=(FocalLength.MM_16, FocalLength.MM_120),
            photography_device=(PhotographyDevice.PROFESSIONAL, PhotographyDevice.MOBILE),
            output_count=4,
        ),
        GenerationSettings(
            model=AIModel.VIDEO,
            aspect_ratio=AspectRatio.STORY,
            view_angle=(ViewAngle.EYE_LEVEL, ViewAngle.TOP_DOWN),
            output_count=3,
        ),
    ],
)
def test_job_count_matches_estimate(settings):
    jobs = expand(settings, random.Random(1))

    assert len(jobs) == estimate(settings).count
    assert len(jobs) >= 1


def test_fast_image_scenario_ordering():
    settings = GenerationSettings(
        view_angle=(ViewAngle.EYE_LEVEL, ViewAngle.TOP_DOWN),
        focal_length=(FocalLength.MM_35, FocalLength.MM_85),
        photography_device=(PhotographyDevice.PROFESSIONAL,),
        output_count=3,
    )

    jobs = expand(settings, random.Random(7))

    assert len(jobs) == 12
    assert [(job.angle, job.lens, job.variant_index) for job in jobs] == [
        (angle, lens, variant)
        for angle in (ViewAngle.EYE_LEVEL, ViewAngle.TOP_DOWN)
        for lens in (FocalLength.MM_35, FocalLength.MM_85)
        for variant in range(3)
    ]


def test_device_is_outermost_axis():
    settings = GenerationSettings(
        view_angle=(ViewAngle.EYE_LEVEL, ViewAngle.HIGH_ANGLE_45),
        photography_device=(PhotographyDevice.MOBILE, PhotographyDevice.PROFESSIONAL),
    )

    jobs = expand(settings, random.Random(0))

    assert [job.device for job in jobs] == [
        PhotographyDevice.MOBILE,
        PhotographyDevice.MOBILE,
        PhotographyDevice.PROFESSIONAL,
        PhotographyDevice.PROFESSIONAL,
    ]


def test_seed_and_color_profile_shared_across_batch():
    settings = GenerationSettings(
        view_angle=(ViewAngle.EYE_LEVEL, ViewAngle.TOP_DOWN),
        output_count=2,
        is_color_sync=True,
    )

    jobs = expand(settings, random.Random(42))

    seeds = {job.batch_seed for job in jobs}
    profiles = {job.color_profile for job in jobs}
    assert len(seeds) == 1
    assert 0 <= seeds.pop() <= MAX_SEED
    assert len(profiles) == 1
    assert profiles.pop() != ""


def test_job_ids_are_unique():
    jobs = expand(GenerationSettings(output_count=8), random.Random(3))

    assert len({job.id for job in jobs}) == 8


def test_color_sync_disabled_leaves_profile_empty():
    jobs = expand(GenerationSettings(is_color_sync=False), random.Random(0))

    assert jobs[0].color_profile == ""


def test_video_scenario_single_job_without_seed():
    settings = GenerationSettings(
        model=AIModel.VIDEO,
        aspect_ratio=AspectRatio.WIDESCREEN,
        view_angle=(ViewAngle.LOW_ANGLE, ViewAngle.TOP_DOWN),
        focal_length=(FocalLength.MM_85, FocalLength.MM_16),
        photography_device=(PhotographyDevice.MOBILE, PhotographyDevice.PROFESSIONAL),
        output_count=5,
        video_duration=5,
    )

    jobs = expand(settings, random.Random(0))

    assert len(jobs) == 1
    job = jobs[0]
    assert job.angle == ViewAngle.LOW_ANGLE
    assert job.lens == FocalLength.MM_85
    assert job.device == PhotographyDevice.MOBILE
    assert job.batch_seed is None
