"""Utility functions for image payloads and data URIs."""

from __future__ import annotations

import base64
import binascii
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.S)

_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def to_data_uri(mime_type: str, payload: bytes | str) -> str:
    """Compose a base64 data URI.

    Args:
        mime_type: Media type (e.g., "image/png").
        payload: Raw bytes, or text that is already base64-encoded.

    Returns:
        ``data:<mime_type>;base64,<payload>``.

    """
    if isinstance(payload, bytes):
        payload = base64.standard_b64encode(payload).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def parse_data_uri(uri: str) -> tuple[str, str]:
    """Split a base64 data URI into its media type and payload.

    Args:
        uri: A ``data:<mime>;base64,<payload>`` string.

    Returns:
        Tuple of (mime_type, base64_payload).

    Raises:
        ValueError: If ``uri`` is not a base64 data URI.

    """
    match = _DATA_URI_RE.match(uri)
    if match is None:
        msg = "Not a base64 data URI"
        raise ValueError(msg)
    return match.group("mime"), match.group("data")


def load_image_as_base64(image_path: Path) -> tuple[str, str]:
    """Load an image file and return base64 data and mime type.

    Args:
        image_path: Path to the image file.

    Returns:
        Tuple of (base64_encoded_data, mime_type).

    Raises:
        FileNotFoundError: If the image file doesn't exist.

    """
    if not image_path.exists():
        msg = f"Image file not found: {image_path}"
        raise FileNotFoundError(msg)

    mime_type = _MIME_TYPES.get(image_path.suffix.lower(), "image/png")
    data = base64.standard_b64encode(image_path.read_bytes()).decode("utf-8")

    return data, mime_type


def decode_base64_image(base64_data: str) -> bytes:
    """Decode base64 image data to bytes.

    Raises:
        ValueError: If the payload is not valid base64.

    """
    try:
        return base64.standard_b64decode(base64_data)
    except binascii.Error as e:
        msg = f"Invalid base64 image data: {e}"
        raise ValueError(msg) from e


def get_file_extension(mime_type: str) -> str:
    """Get file extension for a given MIME type, defaulting to ``.png``."""
    return _EXTENSIONS.get(mime_type, ".png")
