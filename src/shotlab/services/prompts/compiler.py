"""Render prompt compiler.

Turns a settings snapshot plus one job's axes (angle, device, lens) into the
instruction text sent to the generative backend. Pure and deterministic: the same
inputs always produce the same text.

Two mutually exclusive modes:
- Strict compositing (reference image + keep its background): the reference is an
  immutable base layer; no optics, angle or scene blocks are emitted.
- Standalone generation: lens, framing, angle, scene, lighting, interaction and
  mood/time blocks, each exactly once, followed by color grading.
"""

from typing import Optional

from shotlab.models.job import RenderJob
from shotlab.models.settings import (
    FocalLength,
    FreeTextInteraction,
    GenerationSettings,
    PhotographyDevice,
    SceneType,
    ViewAngle,
)
from shotlab.services.pricing import batch_axes
from shotlab.services.prompts import catalog

LENS_HEADER = "LENS & OPTICS:"
FRAMING_HEADER = "FRAMING:"
ANGLE_HEADER = "CAMERA ANGLE:"
SCENE_HEADER = "SCENE:"
LIGHTING_HEADER = "LIGHTING:"
INTERACTION_HEADER = "HUMAN INTERACTION:"
MOOD_HEADER = "MOOD & TIME:"
GRADING_HEADER = "COLOR GRADING:"
COLOR_LOCK_HEADER = "BATCH COLOR LOCK:"

PRODUCT_PRESERVATION = (
    "PRODUCT PRESERVATION (CRITICAL):\n"
    "- Keep the product geometry 100% rigid; no warping, melting or redesign.\n"
    "- Preserve logos, printed text, colors and material properties "
    "(reflectivity, transparency, texture)."
)

REMOVE_BACKGROUND_LIGHTING = (
    "Shadowless high-key white studio lighting from all sides; no colored spill."
)

IMAGE_OUTPUT = "OUTPUT: A single static photorealistic image."


def lens_block(device: PhotographyDevice, lens: FocalLength) -> str:
    if device == PhotographyDevice.MOBILE:
        label = catalog.MOBILE_LENS_LABELS.get(lens, f"{lens.value}-equivalent crop")
        focal = f"{label} ({lens.value} equivalent)"
    else:
        focal = f"{lens.value} prime"
    return "\n".join(
        (
            LENS_HEADER,
            catalog.CAMERA_SYSTEMS[device],
            f"Focal length: {focal}, {catalog.LENS_CHARACTER[lens]}",
            catalog.DEVICE_LENS_RENDERING[device],
        )
    )


def framing_block(settings: GenerationSettings) -> str:
    return f"{FRAMING_HEADER} {catalog.SHOT_SIZES[settings.shot_size]}"


def angle_block(angle: ViewAngle) -> str:
    return f"{ANGLE_HEADER} {catalog.ANGLES[angle]}"


def scene_block(settings: GenerationSettings) -> str:
    if settings.is_remove_background:
        description = catalog.REMOVE_BACKGROUND
    elif settings.scene == SceneType.CUSTOM:
        custom = settings.custom_scene_prompt.strip()
        description = f"{custom}." if custom else catalog.DEFAULT_CUSTOM_SCENE
    else:
        description = catalog.SCENES[settings.scene]
    return f"{SCENE_HEADER} {description}"


def lighting_block(settings: GenerationSettings) -> str:
    if settings.is_remove_background:
        return f"{LIGHTING_HEADER} {REMOVE_BACKGROUND_LIGHTING}"
    return f"{LIGHTING_HEADER} {catalog.LIGHTING[settings.lighting]}"


def interaction_text(settings: GenerationSettings, device: PhotographyDevice) -> str:
    """Resolve the human interaction for a device.

    A free-text interaction replaces the preset and the human style entirely.
    """
    interaction = settings.human_interaction
    if isinstance(interaction, FreeTextInteraction):
        return f"{interaction.text.strip()} {catalog.FREE_TEXT_INTERACTION_STYLE[device]}"

    template = catalog.INTERACTIONS[(device, interaction.preset)]
    return template.format(model=catalog.HUMAN_MODELS[settings.human_style])


def interaction_block(settings: GenerationSettings, device: PhotographyDevice) -> str:
    return f"{INTERACTION_HEADER} {interaction_text(settings, device)}"


def mood_block(settings: GenerationSettings) -> str:
    return (
        f"{MOOD_HEADER} {catalog.MOODS[settings.mood]}; "
        f"time of day: {catalog.TIMES[settings.time_of_day]}."
    )


def grading_block(settings: GenerationSettings) -> str:
    return f"{GRADING_HEADER} {catalog.FILTERS[settings.filter]}"


def _product_line(settings: GenerationSettings) -> str:
    description = settings.product_description.strip()
    return f"PRODUCT: {description}" if description else ""


def _resolve_axes(
    settings: GenerationSettings,
    angle: Optional[ViewAngle],
    device: Optional[PhotographyDevice],
    lens: Optional[FocalLength],
) -> tuple[ViewAngle, PhotographyDevice, FocalLength]:
    axes = batch_axes(settings)
    return (
        angle or axes.angles[0],
        device or axes.devices[0],
        lens or axes.lenses[0],
    )


def _compile_compositing(settings: GenerationSettings) -> str:
    blend = settings.dual_image_prompt.strip() or (
        "Place the product where it would naturally be held, worn or used in this scene."
    )
    sections = [
        "ROLE: Expert photo compositor and retoucher.",
        "TASK: Insert the product from the FIRST image into the SECOND (reference) image.",
        _product_line(settings),
        (
            "BASE LAYER (IMMUTABLE): The reference image is the final canvas. Keep its "
            "background, framing and composition exactly as they are. Every person keeps the "
            "exact same face, identity, expression, pose, hair and clothing. Do not "
            "regenerate, restyle, re-crop or beautify any part of it."
        ),
        (
            "RELIGHTING: Relight only the inserted product to match the reference's existing "
            "light direction, color temperature and shadow softness. Add contact shadows and "
            "reflections consistent with that light."
        ),
        PRODUCT_PRESERVATION,
        f"BLENDING: {blend}",
        "EXECUTION: Seamless, photorealistic composite; the edit must be undetectable.",
    ]
    return "\n\n".join(section for section in sections if section)


def _compile_standalone(
    settings: GenerationSettings,
    angle: ViewAngle,
    device: PhotographyDevice,
    lens: FocalLength,
    color_profile: str,
) -> str:
    sections = [
        "ROLE: Expert commercial photographer and cinematographer.",
        "TASK: Place the product from the input image into a new, physically plausible scene.",
        _product_line(settings),
        PRODUCT_PRESERVATION,
    ]
    if settings.reference_image_url:
        sections.append(
            "REFERENCE IMAGE: The second input image is a styling reference. Take the "
            "person's identity and wardrobe from it; build everything else as described below."
        )
    sections.extend(
        [
            lens_block(device, lens),
            framing_block(settings),
            angle_block(angle),
            scene_block(settings),
            lighting_block(settings),
            interaction_block(settings, device),
            mood_block(settings),
            grading_block(settings),
        ]
    )
    if color_profile:
        sections.append(f"{COLOR_LOCK_HEADER} {color_profile}")
    sections.append("EXECUTION: Photorealistic, physically accurate lighting and shadows.")
    return "\n\n".join(section for section in sections if section)


def compile_prompt(
    settings: GenerationSettings,
    angle: Optional[ViewAngle] = None,
    device: Optional[PhotographyDevice] = None,
    lens: Optional[FocalLength] = None,
    color_profile: str = "",
) -> str:
    """Compile the render prompt for one job.

    Args:
        settings: Batch configuration snapshot
        angle: Camera angle for this job (defaults to the first selected angle)
        device: Capture device for this job (defaults to the first selected device)
        lens: Focal length for this job (defaults to the first selected lens)
        color_profile: Shared batch color descriptor ("" when color sync is off)

    Returns:
        Instruction text
    """
    if settings.is_strict_compositing:
        return _compile_compositing(settings)

    angle, device, lens = _resolve_axes(settings, angle, device, lens)
    return _compile_standalone(settings, angle, device, lens, color_profile)


def compile_image_prompt(settings: GenerationSettings, job: RenderJob) -> str:
    base = compile_prompt(settings, job.angle, job.device, job.lens, job.color_profile)
    return f"{base}\n\n{IMAGE_OUTPUT}"


def compile_video_prompt(settings: GenerationSettings, job: RenderJob) -> str:
    """Compile the prompt for a video job: base prompt plus motion and audio."""
    base = compile_prompt(settings, job.angle, job.device, job.lens, job.color_profile)

    user_action = settings.video_prompt.strip()
    if user_action:
        motion = (
            f'USER INSTRUCTION: "{user_action}"\n'
            "Interpret this instruction (it may be written in Vietnamese) as a physical "
            "action and perform it with smooth, realistic movement."
        )
    else:
        motion = catalog.DEFAULT_VIDEO_ACTION

    audio = (
        "Include ambient background sound and product interaction sounds (ASMR)."
        if settings.has_voice
        else "Silent."
    )

    return "\n\n".join(
        (
            base,
            "TYPE: VIDEO GENERATION.",
            f"TARGET DURATION: {settings.video_duration} seconds. FRAME RATE: 24fps.",
            f"MOTION INSTRUCTIONS:\n{motion}",
            f"AUDIO: {audio}",
            (
                "REQUIREMENTS: High temporal consistency, no morphing of the product, "
                "social media commercial quality (1080p)."
            ),
        )
    )
