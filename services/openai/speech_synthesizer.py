"""Text-to-speech helper built on OpenAI's speech models."""

from __future__ import annotations

import logging
from pathlib import Path

import aiofiles
from openai import AsyncOpenAI

from models.artifacts import AudioArtifact
from models.errors import SynthesisError
from utils.artifact_paths import artifact_path, ensure_directory, timestamp_slug

TTS_MODEL = "tts-1"
TTS_VOICE = "alloy"


class SpeechSynthesizer:
    """Create MP3 files from commentary text."""

    def __init__(
        self,
        client: AsyncOpenAI,
        audio_dir: Path | str,
        *,
        prefix: str = "audio",
        model: str = TTS_MODEL,
        voice: str = TTS_VOICE,
    ) -> None:
        """Initialize the synthesizer with a shared OpenAI client."""
        if client is None:
            raise ValueError("OpenAI client is required for speech synthesis.")
        self.client = client
        self.audio_dir = Path(audio_dir)
        self.prefix = prefix
        self.model = model
        self.voice = voice

    async def synthesize(self, text: str) -> AudioArtifact:
        """Synthesize `text` and write it to `<audio_dir>/<prefix>_<timestamp>.mp3`."""
        if not text or not text.strip():
            raise ValueError("text must contain data for speech synthesis.")

        try:
            response = await self.client.audio.speech.create(
                model=self.model,
                voice=self.voice,
                input=text,
            )
            audio_bytes = getattr(response, "content", None)
        except Exception as exc:
            logging.error("OpenAI speech request failed: %s", exc)
            raise SynthesisError(f"Speech synthesis failed: {exc}") from exc

        if not audio_bytes:
            raise SynthesisError("Speech response did not include audio.")

        ensure_directory(self.audio_dir)
        timestamp = timestamp_slug()
        path = artifact_path(self.audio_dir, self.prefix, "mp3", timestamp)
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(audio_bytes)
        except Exception as exc:
            logging.error("Could not write audio file %s: %s", path, exc)
            raise SynthesisError(f"Could not write audio file {path}") from exc

        logging.info("Saved audio %s (%d bytes)", path, len(audio_bytes))
        return AudioArtifact(path=path, timestamp=timestamp, text=text)
