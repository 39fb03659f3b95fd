"""Logo watermark post-processing for generated images."""

import asyncio
from io import BytesIO
from typing import Optional

import httpx
import structlog
from PIL import Image, UnidentifiedImageError

from shotlab.models.settings import WatermarkPosition, WatermarkSettings
from shotlab.services.exceptions import WatermarkError
from shotlab.services.media import is_data_url, parse_data_url, to_data_url

logger = structlog.get_logger(__name__)

PADDING_RATIO = 0.05
LOGO_DOWNLOAD_TIMEOUT_SECONDS = 30.0


def watermark_origin(
    position: WatermarkPosition,
    canvas_size: tuple[int, int],
    logo_size: tuple[int, int],
    padding: int,
) -> tuple[int, int]:
    """Top-left corner of the logo for a position."""
    canvas_width, canvas_height = canvas_size
    logo_width, logo_height = logo_size

    if position == WatermarkPosition.TOP_LEFT:
        return padding, padding
    if position == WatermarkPosition.TOP_RIGHT:
        return canvas_width - logo_width - padding, padding
    if position == WatermarkPosition.BOTTOM_LEFT:
        return padding, canvas_height - logo_height - padding
    if position == WatermarkPosition.CENTER:
        return (canvas_width - logo_width) // 2, (canvas_height - logo_height) // 2
    return canvas_width - logo_width - padding, canvas_height - logo_height - padding


def composite_watermark(image_bytes: bytes, logo_bytes: bytes, config: WatermarkSettings) -> bytes:
    """Blend the logo onto the image and return PNG bytes.

    The logo is scaled to `config.scale` of the image width (aspect preserved),
    placed with 5% padding and drawn at `config.opacity`.
    """
    with Image.open(BytesIO(image_bytes)) as source, Image.open(BytesIO(logo_bytes)) as logo_source:
        canvas = source.convert("RGBA")
        logo = logo_source.convert("RGBA")

    logo_width = max(1, round(canvas.width * config.scale))
    logo_height = max(1, round(logo.height / logo.width * logo_width))
    logo = logo.resize((logo_width, logo_height), Image.Resampling.LANCZOS)

    if config.opacity < 1:
        alpha = logo.getchannel("A").point(lambda value: round(value * config.opacity))
        logo.putalpha(alpha)

    padding = round(canvas.width * PADDING_RATIO)
    origin = watermark_origin(config.position, canvas.size, logo.size, padding)
    canvas.alpha_composite(logo, dest=(max(origin[0], 0), max(origin[1], 0)))

    output = BytesIO()
    canvas.save(output, format="PNG")
    return output.getvalue()


async def load_logo(url: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> bytes:
    """Logo bytes from a data URL or an http(s) download.

    Raises:
        WatermarkError: Malformed URL, failed download or undecodable data URL
    """
    if is_data_url(url):
        try:
            return parse_data_url(url)[1]
        except ValueError as e:
            raise WatermarkError(f"Invalid watermark logo: {e}") from e

    try:
        async with httpx.AsyncClient(
            timeout=LOGO_DOWNLOAD_TIMEOUT_SECONDS, transport=transport, follow_redirects=True
        ) as http:
            response = await http.get(url)
            response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise WatermarkError(f"Failed to fetch watermark logo: {e}") from e
    return response.content


async def apply_watermark(
    image_url: str,
    config: WatermarkSettings,
    logo: Optional[bytes] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Overlay the configured logo on an image.

    Args:
        image_url: Generated image as a data URL
        config: Watermark configuration
        logo: Logo bytes already loaded for the batch; fetched from `config.url` if None
        transport: Optional httpx transport for fetching http(s) logos

    Returns:
        PNG data URL with the watermark, or `image_url` unchanged when the
        watermark is disabled or has no logo

    Raises:
        WatermarkError: Logo or image could not be loaded or composited
    """
    if not config.enabled or not config.url:
        return image_url

    logo_bytes = logo if logo is not None else await load_logo(config.url, transport)
    try:
        _, image_bytes = parse_data_url(image_url)
        result = await asyncio.to_thread(composite_watermark, image_bytes, logo_bytes, config)
    except (ValueError, UnidentifiedImageError, OSError) as e:
        raise WatermarkError(f"Failed to apply watermark: {e}") from e

    logger.debug("watermark.applied", position=config.position.value, scale=config.scale)
    return to_data_url(result, "image/png")
