"""Prompt fragment lookup tables.

Every enumerated setting resolves through one of these tables; the compiler only
assembles fragments. Interaction fragments are keyed by (device, preset) and may
reference the human model with a "{model}" placeholder.
"""

from shotlab.models.settings import (
    FilterType,
    FocalLength,
    HumanStyle,
    InteractionPreset,
    Lighting,
    Mood,
    PhotographyDevice,
    SceneType,
    ShotSize,
    TimeOfDay,
    ViewAngle,
)

PRO = PhotographyDevice.PROFESSIONAL
MOBILE = PhotographyDevice.MOBILE

CAMERA_SYSTEMS = {
    PRO: (
        "Camera system: professional medium-format / full-frame body (Hasselblad X2D or "
        "Sony A7R V) with a prime G-Master or Zeiss lens. High dynamic range, soft highlight "
        "rollover, true optical physics, high-end commercial production."
    ),
    MOBILE: (
        "Camera system: smartphone sensor (iPhone / Pixel). Small sensor, computational "
        "processing, digital sharpening halos, visible ISO grain, lower dynamic range with "
        "slightly clipped highlights. Raw, unedited social-media capture."
    ),
}

MOBILE_LENS_LABELS = {
    FocalLength.MM_16: "0.5x ultra-wide camera",
    FocalLength.MM_24: "1x main camera",
    FocalLength.MM_85: "3x telephoto camera",
}

LENS_CHARACTER = {
    FocalLength.MM_16: (
        "ultra-wide. Pronounced barrel distortion toward the frame edges, exaggerated "
        "near-far perspective, deep depth of field: background visible and sharp."
    ),
    FocalLength.MM_24: (
        "wide. Mild barrel distortion at the edges, expansive perspective, deep depth of "
        "field with the environment clearly readable."
    ),
    FocalLength.MM_35: (
        "moderate wide. Natural documentary perspective, negligible distortion, "
        "moderately deep depth of field."
    ),
    FocalLength.MM_50: (
        "standard. Distortion-free perspective matching human vision, moderate depth of "
        "field with gentle background softening."
    ),
    FocalLength.MM_85: (
        "short telephoto. Background compression pulls the backdrop closer, shallow depth "
        "of field, strong creamy bokeh and clean subject separation."
    ),
    FocalLength.MM_100: (
        "macro telephoto. Strong background compression, very shallow depth of field, "
        "razor-thin focal plane on the product surface."
    ),
    FocalLength.MM_120: (
        "telephoto. Maximum background compression, flattened perspective, extremely "
        "shallow depth of field with the backdrop dissolved into bokeh."
    ),
}

DEVICE_LENS_RENDERING = {
    PRO: "Bokeh is optical: round, smooth highlights with natural focus falloff.",
    MOBILE: (
        "Background blur, where present, is computational portrait-mode blur with slight "
        "edge artifacts; small-sensor optics otherwise keep most of the scene in focus."
    ),
}

SHOT_SIZES = {
    ShotSize.WIDE: (
        "WIDE SHOT. The product occupies roughly 10-15% of the frame. The surrounding "
        "environment dominates with generous negative space."
    ),
    ShotSize.FULL: (
        "FULL SHOT. The product occupies roughly 40-50% of the frame and is fully visible "
        "top to bottom with comfortable margins. Standard e-commerce framing."
    ),
    ShotSize.MEDIUM: (
        "MEDIUM SHOT. The product occupies roughly 70-80% of the frame. Focus on overall "
        "form and shape with tight margins."
    ),
    ShotSize.CLOSE_UP: (
        "EXTREME CLOSE-UP / MACRO. The product fills 100% or more of the frame and is "
        "cropped by the frame edges. Camera physically very close; surface texture, "
        "material grain and reflections are the subject."
    ),
}

ANGLES = {
    ViewAngle.EYE_LEVEL: (
        "EYE LEVEL (0 degrees). Lens axis parallel to the ground and aimed at the product "
        "center. Vertical lines stay parallel and straight; neutral, honest perspective."
    ),
    ViewAngle.HIGH_ANGLE_45: (
        "HIGH ANGLE (45 degrees). Camera above the product looking down at 45 degrees; both "
        "the top surface and the front face are visible, revealing three-dimensional volume."
    ),
    ViewAngle.LOW_ANGLE: (
        "LOW ANGLE / WORM'S-EYE HERO SHOT. Camera placed near the ground looking up at the "
        "product. Low horizon line, converging verticals, monumental sense of scale."
    ),
    ViewAngle.TOP_DOWN: (
        "TOP-DOWN / BIRD'S-EYE (90 degrees). Camera points straight down at the surface; "
        "the image plane is strictly parallel to the table. The product lies flat showing "
        "its top face. Knolling / flatlay graphic arrangement, no horizon, no visible sides."
    ),
}

SCENES = {
    SceneType.TECH_DESK: (
        "Creator tech desk: matte desk mat, mechanical keyboard and monitor softly out of "
        "focus, cable-managed modern workspace."
    ),
    SceneType.WORKBENCH: (
        "Maker workbench: worn wooden bench, precision tools, cutting mat and component "
        "trays; hands-on lab atmosphere."
    ),
    SceneType.ACRYLIC_BASE: (
        "Clear acrylic display base with under-lit edge glow on a dark seamless backdrop; "
        "crisp tech-showcase presentation."
    ),
    SceneType.STUDIO_DARK: (
        "Dark tech studio: charcoal seamless backdrop, glossy black reflective floor, "
        "controlled accent light."
    ),
    SceneType.CREATOR_LIFESTYLE: (
        "Lived-in creator desk: coffee mug, notebook, plants and camera gear arranged "
        "casually around the product."
    ),
    SceneType.SHELF_DECOR: (
        "Aesthetic bookshelf: curated books, ceramics and small plants on warm wooden shelves."
    ),
    SceneType.STREETWEAR: (
        "Urban streetwear setting: concrete, denim and canvas textures, backpack straps and "
        "sneakers nearby."
    ),
    SceneType.NIGHT_LIGHT: (
        "Bedside table at night: lamp glow, soft linen, a book and a glass of water."
    ),
    SceneType.HANDHELD_USAGE: (
        "Real everyday usage context: the product in the hand of its user in an ordinary "
        "indoor location."
    ),
    SceneType.AESTHETIC_ROOM: (
        "Modern decorated room corner: neutral walls, designer furniture, textured rug and "
        "indoor plants."
    ),
    SceneType.BALCONY_URBAN: (
        "Apartment balcony: railing, potted plants and a soft city skyline in the background."
    ),
    SceneType.PARK_CITY: (
        "City park: green lawn, tree canopy with dappled sunlight, benches and paths softly "
        "blurred."
    ),
    SceneType.HOI_AN: (
        "Hoi An ancient town: mustard-yellow walls, wooden shutters, silk lanterns and "
        "bougainvillea; warm nostalgic tone."
    ),
    SceneType.CITY_NEON: (
        "City street at night: wet asphalt reflecting magenta and cyan neon signs, bokeh of "
        "traffic lights."
    ),
    SceneType.VINTAGE_STREET: (
        "Old street corner: weathered mossy wall, faded paint and cracked plaster with "
        "vintage character."
    ),
}

DEFAULT_CUSTOM_SCENE = "Professional commercial background."

REMOVE_BACKGROUND = (
    "PURE SOLID WHITE BACKGROUND (#FFFFFF), isolated studio product shot. Even, shadowless "
    "high-key illumination with only a soft contact shadow under the product for grounding."
)

LIGHTING = {
    Lighting.SOFTBOX: (
        "Large softbox key light. Soft, wrapping light with gradual falloff and feathered, "
        "low-contrast shadows."
    ),
    Lighting.HARD_LIGHT: (
        "Hard direct light. Crisp, sharp-edged shadows, high contrast and pronounced specular "
        "highlights."
    ),
    Lighting.NATURAL_WINDOW: (
        "Natural window light from the side. Directional soft light with a smooth gradient "
        "falloff across the product and gentle shadows."
    ),
    Lighting.BACKLIGHT: (
        "Studio backlight. Light source behind the product producing a bright rim outline, "
        "silhouette edges and shadows falling toward the camera."
    ),
    Lighting.NATURAL_BACKLIGHT: (
        "Natural backlight with rim light. Sun behind the subject creating a glowing halo "
        "outline, lifted shadows and gentle lens flare."
    ),
    Lighting.GOLDEN_HOUR: (
        "Golden-hour sunlight. Low, warm raking light with long soft-edged shadows and amber "
        "highlights."
    ),
}

MOODS = {
    Mood.MINIMALIST: "minimalist, uncluttered and calm",
    Mood.LUXURY: "luxurious, refined and exclusive",
    Mood.COZY: "cozy, warm and inviting",
    Mood.MODERN: "modern, clean and contemporary",
    Mood.LIFESTYLE: "lifestyle, candid and relatable",
    Mood.PREMIUM: "premium, polished and confident",
    Mood.TECH: "technical, industrial and precise",
}

TIMES = {
    TimeOfDay.MORNING: "morning, fresh cool daylight",
    TimeOfDay.NOON: "midday, bright neutral daylight",
    TimeOfDay.GOLDEN_HOUR: "golden hour, low warm sun",
    TimeOfDay.NIGHT: "night, artificial practical lights",
}

FILTERS = {
    FilterType.CINEMATIC: (
        "Cinematic look. Teal and orange separation, rich blacks, high contrast, subtle film "
        "grain."
    ),
    FilterType.CLEAN: (
        "Commercial high-key. Bright exposure, clean neutral whites, vibrant but low-contrast "
        "color."
    ),
    FilterType.NATURAL: (
        "True to life. Neutral white balance, accurate color reproduction, soft natural "
        "contrast."
    ),
}

HUMAN_MODELS = {
    HumanStyle.VIETNAMESE: "Vietnamese person",
    HumanStyle.EUROPEAN: "European person",
}

P = InteractionPreset

INTERACTIONS = {
    # Professional: polished, staged, commercial
    (PRO, P.NONE): "High-end still life. No people; the product stands alone in a perfect composition.",
    (PRO, P.HAND_HOLDING): (
        "Hand modeling. A perfectly manicured hand of a {model} holds the product gracefully "
        "with elegant finger placement; soft flattering light on the skin."
    ),
    (PRO, P.PRESENTING): (
        "Luxury presentation. Two hands of a {model} present the product like a jewel in a "
        "symmetrical, respectful pose."
    ),
    (PRO, P.USING): (
        "Commercial lifestyle. A {model} uses the product in a staged, flawless environment; "
        "well lit and posed, advertising quality."
    ),
    (PRO, P.MODEL_STANDING): (
        "Fashion editorial. A professional {model} model poses with the product; sharp focus, "
        "magazine-cover lighting."
    ),
    (PRO, P.BAG_CLIP): (
        "Accessory styling. The product is clipped to a premium backpack or handbag carried by "
        "a {model}; clean editorial composition."
    ),
    (PRO, P.TYPING_WORKING): (
        "Productive workspace. Hands of a {model} type on a keyboard beside the product in a "
        "polished tech setup."
    ),
    (PRO, P.TURNING_ON): (
        "Activation moment. A {model}'s fingertip presses the product's switch; the product "
        "glows as it turns on, precisely lit."
    ),
    (PRO, P.FLATLAY_ARRANGING): (
        "Curated arrangement. Hands of a {model} place the product among complementary items "
        "with deliberate, graphic spacing."
    ),
    (PRO, P.HOLDING_TO_LIGHT): (
        "Inspection pose. A {model} raises the product toward a light source, light passing "
        "through or glinting off its surfaces."
    ),
    (PRO, P.HAND_PICK_UP): (
        "Slow-motion cinematic pick up. A hand enters gracefully and lifts the product with "
        "precision."
    ),
    (PRO, P.HAND_ROTATE): (
        "Smooth turntable-style rotation in a hand, showcasing the product silhouette."
    ),
    (PRO, P.USING_PRODUCT): "Cinematic demonstration of the product features by a professional actor.",
    (PRO, P.UNBOXING): "Premium unboxing. Slow reveal of the product with controlled lighting changes.",
    (PRO, P.PLUG_IN_TURN_ON): (
        "Elegant plug-in and power-on. The cable clicks in and the product lights up smoothly."
    ),
    (PRO, P.BAG_CLIP_MOTION): (
        "Graceful motion of clipping the product onto a premium bag strap, finishing on the "
        "hanging product."
    ),
    (PRO, P.SATISFYING_CLICK): (
        "Macro slow motion of a finger pressing the product's button; tactile, satisfying "
        "click."
    ),
    # Mobile: raw, flash-lit, authentic imperfection
    (MOBILE, P.NONE): (
        "Raw phone photo. The product sits casually on a surface, harsh direct flash on, hard "
        "shadow behind it, digital noise; a quick snapshot sent in a chat."
    ),
    (MOBILE, P.HAND_HOLDING): (
        "POV handheld shot. A real user's hand grips the product under direct camera flash; "
        "unedited skin texture, thumb slightly overlapping the label, dim background from "
        "flash falloff. Authentic UGC review."
    ),
    (MOBILE, P.PRESENTING): (
        "Selfie-style presentation. A hand pushes the product toward the phone lens; big "
        "foreground hand, slightly tilted horizon, shot-on-phone look."
    ),
    (MOBILE, P.USING): (
        "Action snapshot. A {model} uses the product in a messy real-life environment; motion "
        "blur on the hands, unposed, high contrast."
    ),
    (MOBILE, P.MODEL_STANDING): (
        "Casual outfit check. A {model} stands with the product, 3/4 body shot from a phone "
        "back camera; fluorescent ceiling light or direct sun, sharpening artifacts."
    ),
    (MOBILE, P.BAG_CLIP): (
        "Everyday carry snapshot. The product dangles from a backpack zipper, shot quickly "
        "with flash; slightly crooked framing."
    ),
    (MOBILE, P.TYPING_WORKING): (
        "Desk snapshot. A {model}'s hands type next to the product, cluttered desk, screen "
        "glow and phone noise."
    ),
    (MOBILE, P.TURNING_ON): (
        "Quick demo. A thumb flicks the product on in a dim room; the product light blooms "
        "and clips on the small sensor."
    ),
    (MOBILE, P.FLATLAY_ARRANGING): (
        "Overhead phone snap of hands rearranging items around the product; imperfect "
        "spacing, mixed indoor light."
    ),
    (MOBILE, P.HOLDING_TO_LIGHT): (
        "Hand holds the product up against a bright window; exposure struggles, flare and "
        "blown highlights."
    ),
    (MOBILE, P.HAND_PICK_UP): (
        "POV shot. A hand reaches into frame and grabs the product quickly, like testing it "
        "for the first time."
    ),
    (MOBILE, P.HAND_ROTATE): (
        "Handheld product review. The user rotates the product in front of the phone camera "
        "to show details."
    ),
    (MOBILE, P.USING_PRODUCT): "A user tests the product in real time; authentic, unpolished movement.",
    (MOBILE, P.UNBOXING): (
        "POV unboxing. Hands tear open the package or lift the lid; shaky handheld camera feel."
    ),
    (MOBILE, P.PLUG_IN_TURN_ON): (
        "Phone-filmed plug in and switch on; autofocus hunts briefly as the product lights up."
    ),
    (MOBILE, P.BAG_CLIP_MOTION): (
        "Quick handheld clip of attaching the product to a backpack, slightly shaky."
    ),
    (MOBILE, P.SATISFYING_CLICK): (
        "Close phone video of repeatedly clicking the product's button; ASMR-style, raw audio "
        "feel."
    ),
}

FREE_TEXT_INTERACTION_STYLE = {
    PRO: "Render it polished and commercial: staged, flattering light, advertising quality.",
    MOBILE: "Render it raw and authentic: phone capture, direct flash, unposed imperfection.",
}

DEFAULT_VIDEO_ACTION = (
    "Gentle cinematic camera movement; the product slowly rotates or is handled naturally."
)
