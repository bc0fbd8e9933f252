"""Runtime settings read from the environment (and an optional .env file)."""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import List, Mapping, Optional

from pydantic import BaseModel, field_validator

DEFAULT_URL = "https://www.flightradar24.com"
IMAGE_DETAIL_LEVELS = ("low", "high", "auto")


def _env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class NarratorSettings(BaseModel):
    """Configuration for the page narrator.

    Build it with `NarratorSettings.from_env()`; every field maps to a
    `NARRATOR_*` environment variable except the OpenAI key, which uses the
    SDK's own `OPENAI_API_KEY`.
    """

    openai_api_key: str
    url: str = DEFAULT_URL
    screenshots_dir: Path = Path("./screenshots")
    audio_dir: Path = Path("./audio")
    screenshot_prefix: str = "screenshot"
    audio_prefix: str = "audio"
    commentary_model: str = "gpt-4o"
    image_detail: str = "low"
    tts_model: str = "tts-1"
    tts_voice: str = "alloy"
    player: str = "afplay"
    headless: bool = False
    browser_executable: Optional[str] = None
    viewport_width: int = 1080
    viewport_height: int = 800
    log_level: str = "INFO"

    @field_validator("openai_api_key", "url", "screenshot_prefix", "audio_prefix", "player")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("value must not be empty")
        return value.strip()

    @field_validator("image_detail")
    @classmethod
    def _known_detail(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in IMAGE_DETAIL_LEVELS:
            raise ValueError(f"image_detail must be one of {', '.join(IMAGE_DETAIL_LEVELS)}")
        return value

    @field_validator("viewport_width", "viewport_height")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("viewport dimensions must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @property
    def player_command(self) -> List[str]:
        """The player command split into argv form; the audio path is appended at play time."""
        return shlex.split(self.player)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "NarratorSettings":
        """Build settings from environment variables.

        Raises:
            RuntimeError: If OPENAI_API_KEY is not set.
            pydantic.ValidationError: If any value fails validation.
        """
        env = os.environ if environ is None else environ
        api_key = env.get("OPENAI_API_KEY")
        if not api_key or not api_key.strip():
            raise RuntimeError("OPENAI_API_KEY environment variable is not set")

        values = {
            "openai_api_key": api_key,
            "headless": _env_flag(env.get("NARRATOR_HEADLESS")),
        }
        mapping = {
            "url": "NARRATOR_URL",
            "screenshots_dir": "NARRATOR_SCREENSHOTS_DIR",
            "audio_dir": "NARRATOR_AUDIO_DIR",
            "screenshot_prefix": "NARRATOR_SCREENSHOT_PREFIX",
            "audio_prefix": "NARRATOR_AUDIO_PREFIX",
            "commentary_model": "NARRATOR_COMMENTARY_MODEL",
            "image_detail": "NARRATOR_IMAGE_DETAIL",
            "tts_model": "NARRATOR_TTS_MODEL",
            "tts_voice": "NARRATOR_TTS_VOICE",
            "player": "NARRATOR_PLAYER",
            "browser_executable": "NARRATOR_BROWSER_EXECUTABLE",
            "viewport_width": "NARRATOR_VIEWPORT_WIDTH",
            "viewport_height": "NARRATOR_VIEWPORT_HEIGHT",
            "log_level": "NARRATOR_LOG_LEVEL",
        }
        for field_name, env_name in mapping.items():
            raw = env.get(env_name)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()
        return cls(**values)
