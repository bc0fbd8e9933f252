import asyncio
import inspect
import logging
import signal
from contextlib import asynccontextmanager
from typing import AsyncIterator

from dotenv import load_dotenv
from openai import AsyncOpenAI

from controllers.interaction_loop import InteractionLoop
from models.conversation import ConversationHistory
from services.openai.commentary_client import CommentaryClient
from services.openai.prompts import build_system_prompt
from services.openai.speech_synthesizer import SpeechSynthesizer
from services.page_capture import PageCapture
from services.playback.audio_player import AudioPlayer
from services.playback.playback_sequencer import PlaybackSequencer
from utils.artifact_paths import ensure_directory
from utils.console import choose_mode
from utils.settings import NarratorSettings

load_dotenv()  # Load environment variables from .env file if present


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _close_client(client) -> None:
    """Close the OpenAI client if it exposes a close/aclose method."""
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        if inspect.iscoroutinefunction(aclose):
            await aclose()
        else:
            result = aclose()
            if inspect.isawaitable(result):
                await result
    except Exception:
        # Ignore shutdown errors to avoid masking more important issues.
        pass


@asynccontextmanager
async def lifespan(settings: NarratorSettings) -> AsyncIterator[InteractionLoop]:
    """
    Set up everything a narration run needs and tear it down afterwards:
      - screenshot and audio directories
      - the OpenAI async client
      - the browser, opened on the configured page (failure aborts startup)
      - the playback queue, drained on shutdown
    """
    ensure_directory(settings.screenshots_dir)
    ensure_directory(settings.audio_dir)

    try:
        openai_client = AsyncOpenAI(api_key=settings.openai_api_key)
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc

    capture = PageCapture(
        settings.url,
        settings.screenshots_dir,
        prefix=settings.screenshot_prefix,
        headless=settings.headless,
        executable_path=settings.browser_executable,
        viewport=(settings.viewport_width, settings.viewport_height),
    )
    sequencer = PlaybackSequencer(AudioPlayer(settings.player_command).perform)
    try:
        await capture.start()
        loop = InteractionLoop(
            capture,
            CommentaryClient(
                openai_client,
                model=settings.commentary_model,
                image_detail=settings.image_detail,
            ),
            SpeechSynthesizer(
                openai_client,
                settings.audio_dir,
                prefix=settings.audio_prefix,
                model=settings.tts_model,
                voice=settings.tts_voice,
            ),
            sequencer,
            ConversationHistory(build_system_prompt()),
        )
        yield loop
    finally:
        await sequencer.close(drain=True)
        await capture.close()
        await _close_client(openai_client)


async def main() -> None:
    settings = NarratorSettings.from_env()
    configure_logging(settings.log_level)

    async with lifespan(settings) as loop:
        mode = await choose_mode()
        if mode is None:
            logging.error("Invalid mode selected; enter 1 or 2.")
            return

        event_loop = asyncio.get_running_loop()
        installed = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                event_loop.add_signal_handler(sig, loop.stop)
                installed.append(sig)
            except (NotImplementedError, RuntimeError):
                # Windows event loops do not support signal handlers
                pass

        logging.info("Starting %s mode on %s", mode.value, settings.url)
        try:
            await loop.run(mode)
        finally:
            # a second Ctrl+C while playback drains interrupts immediately
            for sig in installed:
                event_loop.remove_signal_handler(sig)
        logging.info(
            "Stopped after %d completed and %d failed cycles; finishing queued playback.",
            loop.cycles_completed,
            loop.cycles_failed,
        )


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
