"""One-shot structured extraction from a single image."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import aiofiles
from openai import AsyncOpenAI

from services.openai.media_inputs import build_single_turn_messages, to_image_data_url
from services.openai.prompts import build_extraction_system_prompt, build_extraction_user_prompt
from services.openai.response_parser import extract_text, parse_json_reply
from utils.media_validation import ensure_base64_image, image_mime_type


class MenuExtractor:
    """Turn a photographed menu into a JSON structure."""

    def __init__(self, client: AsyncOpenAI, *, model: str = "gpt-4o") -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model

    async def extract(self, image_path: Path | str) -> Any:
        """Return the parsed JSON the model produced for `image_path`.

        Raises:
            ValueError: If the image type is unsupported or the reply is not JSON.
        """
        path = Path(image_path)
        mime_type = image_mime_type(path)
        async with aiofiles.open(path, "rb") as f:
            raw = await f.read()
        image_url = to_image_data_url(ensure_base64_image(raw), mime_type)

        messages = build_single_turn_messages(
            build_extraction_system_prompt(), build_extraction_user_prompt(), image_url
        )
        try:
            response = await self.client.chat.completions.create(model=self.model, messages=messages)
        except Exception as exc:
            logging.error("Error during OpenAI extraction call: %s", exc)
            raise
        return parse_json_reply(extract_text(response))
