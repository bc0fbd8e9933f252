"""Utilities to build multimodal chat-completions payloads."""

from typing import Any, Dict, List


def to_image_data_url(image_b64: bytes, mime_type: str = "image/png") -> str:
    """Convert base64 image bytes into a data URL suitable for vision input."""
    try:
        b64_str = image_b64.decode("utf-8")
    except Exception as exc:
        raise ValueError("Image bytes must be base64-encoded UTF-8.") from exc
    if not b64_str:
        raise ValueError("Image data is empty.")
    return f"data:{mime_type};base64,{b64_str}"


def build_user_content(text: str, image_url: str, detail: str = "low") -> List[Dict[str, Any]]:
    """Compose a user turn holding the instruction text followed by the image."""
    return [
        {"type": "text", "text": text},
        {"type": "image_url", "image_url": {"url": image_url, "detail": detail}},
    ]


def build_single_turn_messages(system_prompt: str, user_prompt: str, image_url: str) -> List[Dict[str, Any]]:
    """Build a stand-alone system + user(image) message list with no history."""
    return [
        {"role": "system", "content": system_prompt},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": user_prompt},
                {"type": "image_url", "image_url": {"url": image_url}},
            ],
        },
    ]
