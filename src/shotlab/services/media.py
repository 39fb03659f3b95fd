"""Data URL helpers for images and videos moved around as base64 payloads."""

import base64
import binascii
import re

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,")

DEFAULT_IMAGE_MIME = "image/png"
VIDEO_MIME = "video/mp4"


def is_data_url(url: str) -> bool:
    return bool(DATA_URL_PATTERN.match(url))


def parse_data_url(url: str) -> tuple[str, bytes]:
    """Split a base64 data URL into (mime type, raw bytes).

    Raises:
        ValueError: If the URL is not a base64 data URL or the payload is corrupt
    """
    match = DATA_URL_PATTERN.match(url)
    if not match:
        raise ValueError("Expected a base64 data URL")

    mime_type = match.group("mime") or DEFAULT_IMAGE_MIME
    try:
        data = base64.b64decode(url[match.end() :], validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
    return mime_type, data


def to_data_url(data: bytes, mime_type: str = DEFAULT_IMAGE_MIME) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
