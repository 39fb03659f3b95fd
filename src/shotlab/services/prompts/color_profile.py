"""Batch color-consistency profile.

Independent backend calls share no state, so the only way to keep a multi-angle,
multi-lens batch visually coherent is to hand every job the same explicit white
balance and palette description.
"""

from shotlab.models.settings import FilterType, GenerationSettings, Lighting, SceneType, TimeOfDay

COOL_SCENES = frozenset({SceneType.CITY_NEON, SceneType.NIGHT_LIGHT})
WARM_LIGHTING = frozenset({Lighting.GOLDEN_HOUR, Lighting.BACKLIGHT, Lighting.NATURAL_BACKLIGHT})

WARM_WHITE_BALANCE = "White balance locked at ~3500K (warm tungsten / golden sunlight)."
COOL_WHITE_BALANCE = "White balance locked at ~4000K (cool night ambience with neon accents)."
DAYLIGHT_WHITE_BALANCE = "White balance locked at ~5600K (neutral daylight)."

PALETTES = {
    FilterType.CINEMATIC: (
        "Palette: teal shadows and orange highlights, high contrast, deep blacks."
    ),
    FilterType.CLEAN: "Palette: high-key, neutral pure whites, bright and airy.",
    FilterType.NATURAL: "Palette: colorimetrically accurate, true-to-life product colors.",
}


def white_balance(settings: GenerationSettings) -> str:
    if settings.time_of_day == TimeOfDay.NIGHT or settings.scene in COOL_SCENES:
        return COOL_WHITE_BALANCE
    if settings.time_of_day == TimeOfDay.GOLDEN_HOUR or settings.lighting in WARM_LIGHTING:
        return WARM_WHITE_BALANCE
    return DAYLIGHT_WHITE_BALANCE


def build_color_profile(settings: GenerationSettings) -> str:
    """Build the shared color descriptor for a batch.

    Args:
        settings: Batch configuration

    Returns:
        Profile text, or "" when color sync is disabled
    """
    if not settings.is_color_sync:
        return ""

    return " ".join(
        (
            white_balance(settings),
            PALETTES[settings.filter],
            "Keep exposure, tint and saturation identical across every image of this set.",
        )
    )
