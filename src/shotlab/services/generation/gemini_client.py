"""Gemini / Veo backend client with error classification.

Wraps the synchronous google-genai SDK (run in worker threads) and converts its
responses into GenerationResult values and its failures into the service error
taxonomy.
"""

import asyncio
import re
from typing import Any, Awaitable, Callable, Optional

import httpx
import structlog
from google import genai
from google.genai import types

from shotlab.core.config import Settings
from shotlab.models.job import GenerationResult, TokenUsage
from shotlab.models.settings import AIModel, GenerationSettings
from shotlab.services.exceptions import (
    AuthorizationError,
    ConfigurationError,
    EmptyResponseError,
    PermanentError,
    ServiceError,
    TransientError,
    VideoTimeoutError,
)
from shotlab.services.media import DEFAULT_IMAGE_MIME, VIDEO_MIME, parse_data_url, to_data_url
from shotlab.services.pricing import unit_tokens

logger = structlog.get_logger(__name__)

TRANSIENT_MARKERS = ("overloaded", "rate limit", "resource_exhausted", "unavailable")
AUTH_MARKERS = (
    "permission denied",
    "permission_denied",
    "not found",
    "unauthenticated",
    "api key not valid",
)

TRANSIENT_STATUS_PATTERN = re.compile(r"\b(429|503)\b")
AUTH_STATUS_PATTERN = re.compile(r"\b(401|403|404)\b")

HIGH_RES_IMAGE_SIZE = "4K"
STANDARD_IMAGE_SIZE = "1K"
VIDEO_RESOLUTION = "1080p"


def classify_error(exception: Exception) -> ServiceError:
    """Classify a backend exception into the service error taxonomy.

    Args:
        exception: Original exception from the google-genai SDK or the network layer

    Returns:
        Classified ServiceError subclass instance

    Classification rules:
        - 429 / 503, "overloaded", "rate limit", RESOURCE_EXHAUSTED, UNAVAILABLE → TransientError
        - 401 / 403 / 404, permission denied, not found → AuthorizationError
        - Anything else → PermanentError
    """
    error_message = str(exception)
    error_message_lower = error_message.lower()
    code = getattr(exception, "code", None)

    if (
        code in (429, 503)
        or TRANSIENT_STATUS_PATTERN.search(error_message)
        or any(marker in error_message_lower for marker in TRANSIENT_MARKERS)
    ):
        return TransientError(f"Backend overloaded: {error_message}")

    if (
        code in (401, 403, 404)
        or AUTH_STATUS_PATTERN.search(error_message)
        or any(marker in error_message_lower for marker in AUTH_MARKERS)
    ):
        return AuthorizationError(f"Authorization failed: {error_message}")

    return PermanentError(error_message or type(exception).__name__)


def image_size_for(settings: GenerationSettings) -> Optional[str]:
    """Output size hint; only the pro image model accepts one."""
    if settings.model != AIModel.PRO_IMAGE:
        return None
    return HIGH_RES_IMAGE_SIZE if settings.is_high_res else STANDARD_IMAGE_SIZE


def extract_usage(response: Any) -> TokenUsage:
    metadata = getattr(response, "usage_metadata", None)
    if metadata is None:
        return TokenUsage()
    return TokenUsage(
        input_tokens=metadata.prompt_token_count or 0,
        output_tokens=metadata.candidates_token_count or 0,
    )


def extract_image(response: Any) -> tuple[bytes, str]:
    """Pull the first inline image out of a generate_content response.

    Raises:
        EmptyResponseError: The model answered with text only (or nothing)
    """
    texts = []
    for candidate in response.candidates or []:
        content = candidate.content
        for part in (content.parts if content else None) or []:
            if part.inline_data and part.inline_data.data:
                return part.inline_data.data, part.inline_data.mime_type or DEFAULT_IMAGE_MIME
            if part.text:
                texts.append(part.text.strip())

    if texts:
        raise EmptyResponseError(" ".join(texts))
    raise EmptyResponseError("API failed to generate image. Please try again.")


def _image_part(url: str) -> types.Part:
    try:
        mime_type, data = parse_data_url(url)
    except ValueError as e:
        raise PermanentError(f"Unreadable input image: {e}") from e
    return types.Part.from_bytes(data=data, mime_type=mime_type)


class GeminiBackend:
    """Generative backend backed by the Gemini image models and Veo."""

    def __init__(
        self,
        config: Settings,
        client: Optional[Any] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not config.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY not configured")

        self.config = config
        self.client = client or genai.Client(api_key=config.gemini_api_key)
        self._sleep = sleep
        self._transport = transport

    def _temperature(self, settings: GenerationSettings) -> float:
        if settings.is_strict_compositing:
            return self.config.compositing_temperature
        return self.config.generation_temperature

    async def generate_image(
        self,
        prompt: str,
        product_image: str,
        settings: GenerationSettings,
        seed: Optional[int] = None,
    ) -> GenerationResult:
        """Generate one still image.

        Args:
            prompt: Compiled render prompt
            product_image: Product photo as a data URL
            settings: Batch configuration
            seed: Shared batch seed, if any

        Returns:
            GenerationResult with a data URL artifact and reported token usage

        Raises:
            TransientError: Backend overloaded or rate limited
            AuthorizationError: Credential rejected or model unavailable
            EmptyResponseError: Text instead of an image
            PermanentError: Any other failure
        """
        contents: list[Any] = [_image_part(product_image)]
        if settings.reference_image_url:
            contents.append(_image_part(settings.reference_image_url))
        contents.append(prompt)

        config = types.GenerateContentConfig(
            temperature=self._temperature(settings),
            top_p=self.config.top_p,
            top_k=self.config.top_k,
            seed=seed,
            image_config=types.ImageConfig(
                aspect_ratio=settings.aspect_ratio.value,
                image_size=image_size_for(settings),
            ),
        )

        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=settings.model.value,
                contents=contents,
                config=config,
            )
        except Exception as e:
            raise classify_error(e) from e

        data, mime_type = extract_image(response)
        return GenerationResult(
            artifact_url=to_data_url(data, mime_type),
            usage=extract_usage(response),
            seed=seed,
        )

    async def generate_video(
        self,
        prompt: str,
        product_image: str,
        settings: GenerationSettings,
    ) -> GenerationResult:
        """Generate one video clip: submit, poll until done, download.

        Veo reports no token usage, so usage is taken from the estimator's
        per-unit figures to keep lifetime statistics aligned with quotes.

        Raises:
            VideoTimeoutError: Operation still running after the poll budget
            EmptyResponseError: Operation finished without a video
        """
        try:
            mime_type, data = parse_data_url(product_image)
        except ValueError as e:
            raise PermanentError(f"Unreadable input image: {e}") from e

        config = types.GenerateVideosConfig(
            number_of_videos=1,
            resolution=VIDEO_RESOLUTION,
            aspect_ratio=settings.aspect_ratio.value,
        )

        try:
            operation = await asyncio.to_thread(
                self.client.models.generate_videos,
                model=settings.model.value,
                prompt=prompt,
                image=types.Image(image_bytes=data, mime_type=mime_type),
                config=config,
            )
            logger.info("video.submitted", operation=getattr(operation, "name", None))

            polls = 0
            while not operation.done:
                if polls >= self.config.video_poll_max_attempts:
                    raise VideoTimeoutError(
                        f"Video generation did not finish after {polls} polls"
                    )
                await self._sleep(self.config.video_poll_interval_seconds)
                operation = await asyncio.to_thread(self.client.operations.get, operation)
                polls += 1
                logger.debug("video.poll", poll=polls, done=bool(operation.done))
        except ServiceError:
            raise
        except Exception as e:
            raise classify_error(e) from e

        if operation.error:
            message = operation.error.get("message", operation.error)
            raise classify_error(RuntimeError(f"Video generation failed: {message}"))

        videos = operation.response.generated_videos if operation.response else None
        uri = videos[0].video.uri if videos and videos[0].video else None
        if not uri:
            raise EmptyResponseError("No video URI returned from the backend")

        video_bytes = await self.download(uri)
        input_tokens, output_tokens = unit_tokens(settings)
        return GenerationResult(
            artifact_url=to_data_url(video_bytes, VIDEO_MIME),
            usage=TokenUsage(input_tokens=input_tokens, output_tokens=output_tokens),
            is_video=True,
        )

    async def download(self, uri: str) -> bytes:
        """Fetch a generated asset, authenticating with the API key."""
        try:
            async with httpx.AsyncClient(
                timeout=self.config.video_download_timeout_seconds,
                transport=self._transport,
                follow_redirects=True,
            ) as http:
                response = await http.get(uri, params={"key": self.config.gemini_api_key})
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            # The request URL carries the key; keep it out of the message.
            status = e.response.status_code
            raise classify_error(
                RuntimeError(f"Failed to download video: {status} {e.response.reason_phrase}")
            ) from e
        except httpx.HTTPError as e:
            raise classify_error(e) from e

        logger.info("video.downloaded", size_bytes=len(response.content))
        return response.content
