"""Validation helpers for image files sent to the completion service."""

from __future__ import annotations

import base64
from pathlib import Path

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


def image_mime_type(path: Path | str) -> str:
    """Return the MIME type for an image path based on its extension."""
    suffix = Path(path).suffix.lower()
    if suffix not in IMAGE_MIME_TYPES:
        raise ValueError(f"Unsupported image type: '{suffix or path}'")
    return IMAGE_MIME_TYPES[suffix]


def ensure_base64_image(raw: bytes) -> bytes:
    """Return base64-encoded image bytes from raw file content."""
    if not raw:
        raise ValueError("Image file is empty.")
    return base64.b64encode(raw)
