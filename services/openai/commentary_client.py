"""Description: Screenshot commentary using OpenAI's chat-completions API."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import aiofiles
from openai import AsyncOpenAI

from models.artifacts import SnapshotArtifact
from models.conversation import ConversationHistory
from models.errors import CommentaryError
from services.openai.media_inputs import build_user_content, to_image_data_url
from services.openai.prompts import build_user_prompt
from services.openai.response_parser import extract_text, extract_usage
from utils.media_validation import ensure_base64_image, image_mime_type

COMMENTARY_MODEL = "gpt-4o"


class CommentaryClient:
    """Describe screenshots in the context of the running conversation."""

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        model: str = COMMENTARY_MODEL,
        image_detail: str = "low",
        instruction: Optional[str] = None,
    ) -> None:
        """Initialize the client with a shared OpenAI async client."""
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model
        self.image_detail = image_detail
        self.instruction = instruction or build_user_prompt()
        self.last_usage: Dict[str, Optional[int]] = {}
        self.last_latency: float = 0.0

    async def describe(
        self, history: ConversationHistory, snapshot: SnapshotArtifact | Path | str
    ) -> Tuple[str, ConversationHistory]:
        """Append a user turn for `snapshot`, ask the model, and append its reply.

        The user turn is provisional: when the completion call fails it is
        removed again before the error propagates.

        Returns:
            The assistant text and the (same, now extended) history.

        Raises:
            CommentaryError: If the image cannot be read, the call fails, or no text comes back.
        """
        path = snapshot.path if isinstance(snapshot, SnapshotArtifact) else Path(snapshot)
        image_url = await self._load_image_url(path)

        history.append_user(build_user_content(self.instruction, image_url, self.image_detail))
        start_time = time.time()
        try:
            response = await self._create_completion(history)
            text = extract_text(response)
            if not text:
                raise CommentaryError("Completion response did not include text.")
        except Exception as exc:
            history.discard_pending_user_turn()
            if isinstance(exc, CommentaryError):
                raise
            raise CommentaryError(f"Commentary request failed: {exc}") from exc

        history.append_assistant(text)
        self.last_latency = time.time() - start_time
        self.last_usage = extract_usage(response)
        return text, history

    async def _load_image_url(self, path: Path) -> str:
        try:
            mime_type = image_mime_type(path)
            async with aiofiles.open(path, "rb") as f:
                raw = await f.read()
            return to_image_data_url(ensure_base64_image(raw), mime_type)
        except Exception as exc:
            logging.error("Could not read snapshot %s: %s", path, exc)
            raise CommentaryError(f"Could not read snapshot {path}") from exc

    async def _create_completion(self, history: ConversationHistory) -> Any:
        """Send the full conversation to the chat-completions API."""
        try:
            return await self.client.chat.completions.create(
                model=self.model,
                messages=history.to_payload(),
            )
        except Exception as exc:
            logging.error("Error during OpenAI chat-completions call: %s", exc)
            raise

# end of CommentaryClient
