"""GenerationSettings - immutable configuration snapshot for one batch."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AIModel(str, Enum):
    """Generative backend model identifiers (also the pricing tier key)."""

    FAST_IMAGE = "gemini-2.5-flash-image"
    PRO_IMAGE = "gemini-3-pro-image-preview"
    VIDEO = "veo-3.1-fast-generate-preview"

    @property
    def is_video(self) -> bool:
        return self is AIModel.VIDEO


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    PORTRAIT_4_5 = "4:5"
    PORTRAIT_3_4 = "3:4"
    PORTRAIT_2_3 = "2:3"
    LANDSCAPE_3_2 = "3:2"
    STORY = "9:16"
    WIDESCREEN = "16:9"


VIDEO_ASPECT_RATIOS = (AspectRatio.WIDESCREEN, AspectRatio.STORY)


class SceneType(str, Enum):
    # Tech / creator gear
    TECH_DESK = "tech_desk"
    WORKBENCH = "workbench"
    ACRYLIC_BASE = "acrylic_base"
    STUDIO_DARK = "studio_dark"
    CREATOR_LIFESTYLE = "creator_lifestyle"
    # Lifestyle / decor
    SHELF_DECOR = "shelf_decor"
    STREETWEAR = "streetwear"
    NIGHT_LIGHT = "night_light"
    HANDHELD_USAGE = "handheld_usage"
    AESTHETIC_ROOM = "aesthetic_room"
    # Outdoor / cultural
    BALCONY_URBAN = "balcony_urban"
    PARK_CITY = "park_city"
    HOI_AN = "hoi_an"
    CITY_NEON = "city_neon"
    VINTAGE_STREET = "vintage_street"
    CUSTOM = "custom"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    NOON = "noon"
    GOLDEN_HOUR = "golden_hour"
    NIGHT = "night"


class Mood(str, Enum):
    MINIMALIST = "minimalist"
    LUXURY = "luxury"
    COZY = "cozy"
    MODERN = "modern"
    LIFESTYLE = "lifestyle"
    PREMIUM = "premium"
    TECH = "tech"


class Lighting(str, Enum):
    SOFTBOX = "softbox"
    HARD_LIGHT = "hard_light"
    NATURAL_WINDOW = "natural_window"
    BACKLIGHT = "backlight"
    NATURAL_BACKLIGHT = "natural_backlight"
    GOLDEN_HOUR = "golden_hour"


class FocalLength(str, Enum):
    MM_16 = "16mm"
    MM_24 = "24mm"
    MM_35 = "35mm"
    MM_50 = "50mm"
    MM_85 = "85mm"
    MM_100 = "100mm"
    MM_120 = "120mm"


class ViewAngle(str, Enum):
    EYE_LEVEL = "eye_level"
    HIGH_ANGLE_45 = "high_angle_45"
    LOW_ANGLE = "low_angle"
    TOP_DOWN = "top_down"


class ShotSize(str, Enum):
    WIDE = "wide"
    FULL = "full"
    MEDIUM = "medium"
    CLOSE_UP = "close_up"


class HumanStyle(str, Enum):
    VIETNAMESE = "vietnamese"
    EUROPEAN = "european"


class PhotographyDevice(str, Enum):
    PROFESSIONAL = "professional"
    MOBILE = "mobile"


class FilterType(str, Enum):
    CINEMATIC = "cinematic"
    CLEAN = "clean"
    NATURAL = "natural"


class InteractionPreset(str, Enum):
    """Known human interactions (photo poses and video motions)."""

    NONE = "none"
    # Photo
    HAND_HOLDING = "hand_holding"
    PRESENTING = "presenting"
    USING = "using"
    MODEL_STANDING = "model_standing"
    BAG_CLIP = "bag_clip"
    TYPING_WORKING = "typing_working"
    TURNING_ON = "turning_on"
    FLATLAY_ARRANGING = "flatlay_arranging"
    HOLDING_TO_LIGHT = "holding_to_light"
    # Video
    HAND_PICK_UP = "hand_pick_up"
    HAND_ROTATE = "hand_rotate"
    USING_PRODUCT = "using_product"
    UNBOXING = "unboxing"
    PLUG_IN_TURN_ON = "plug_in_turn_on"
    BAG_CLIP_MOTION = "bag_clip_motion"
    SATISFYING_CLICK = "satisfying_click"


class PresetInteraction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["preset"] = "preset"
    preset: InteractionPreset = InteractionPreset.NONE


class FreeTextInteraction(BaseModel):
    """User-described interaction; overrides the preset and the human style."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["free_text"] = "free_text"
    text: str = Field(min_length=1, max_length=2000)


HumanInteraction = Annotated[
    Union[PresetInteraction, FreeTextInteraction], Field(discriminator="kind")
]


class WatermarkPosition(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    CENTER = "center"


class WatermarkSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    url: str = ""
    position: WatermarkPosition = WatermarkPosition.BOTTOM_RIGHT
    opacity: float = Field(default=0.8, ge=0, le=1)
    scale: float = Field(default=0.2, gt=0, le=1)


class GenerationSettings(BaseModel):
    """User configuration for one batch.

    Frozen so a batch always works on a stable snapshot; the same snapshot is
    stored on every history entry of the batch.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    model: AIModel = AIModel.FAST_IMAGE
    product_description: str = ""

    scene: SceneType = SceneType.TECH_DESK
    custom_scene_prompt: str = ""
    time_of_day: TimeOfDay = TimeOfDay.NOON
    mood: Mood = Mood.MODERN
    lighting: Lighting = Lighting.SOFTBOX
    filter: FilterType = FilterType.NATURAL

    focal_length: tuple[FocalLength, ...] = (FocalLength.MM_50,)
    view_angle: tuple[ViewAngle, ...] = (ViewAngle.EYE_LEVEL,)
    photography_device: tuple[PhotographyDevice, ...] = (PhotographyDevice.PROFESSIONAL,)
    output_count: int = Field(default=1, ge=1, le=16)

    shot_size: ShotSize = ShotSize.FULL
    human_interaction: HumanInteraction = Field(default_factory=PresetInteraction)
    human_style: HumanStyle = HumanStyle.VIETNAMESE

    is_remove_background: bool = False
    is_high_res: bool = False
    is_color_sync: bool = True

    reference_image_url: Optional[str] = None
    is_keep_ref_background: bool = False
    dual_image_prompt: str = ""

    aspect_ratio: AspectRatio = AspectRatio.SQUARE

    video_prompt: str = ""
    video_duration: int = Field(default=5, ge=5, le=10)
    has_voice: bool = False

    watermark: WatermarkSettings = Field(default_factory=WatermarkSettings)

    @property
    def is_video(self) -> bool:
        return self.model.is_video

    @property
    def is_strict_compositing(self) -> bool:
        """Reference image present and its background must be kept."""
        return bool(self.reference_image_url) and self.is_keep_ref_background

    @model_validator(mode="after")
    def validate_video_aspect_ratio(self) -> "GenerationSettings":
        if self.is_video and self.aspect_ratio not in VIDEO_ASPECT_RATIOS:
            allowed = ", ".join(ratio.value for ratio in VIDEO_ASPECT_RATIOS)
            raise ValueError(
                f"Aspect ratio {self.aspect_ratio.value} is not supported for video "
                f"(allowed: {allowed})"
            )
        return self
