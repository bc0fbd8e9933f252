"""Orchestrate capture → describe → synthesize → enqueue cycles."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from models.artifacts import CycleResult, PlaybackTask
from models.conversation import ConversationHistory
from models.loop_state import LoopMode, LoopState
from services.openai.commentary_client import CommentaryClient
from services.openai.cost_generator import CostGenerator
from services.openai.speech_synthesizer import SpeechSynthesizer
from services.page_capture import PageCapture
from services.playback.playback_sequencer import PlaybackSequencer
from utils.console import TRIGGER_PROMPT, prompt_for_key_press

KeyPress = Callable[[str], Awaitable[str]]


class InteractionLoop:
    """Drive narration cycles in manual or continuous mode.

    Each cycle runs its stages strictly in sequence; only playback is handed
    off to the `PlaybackSequencer`, so audio from one cycle can still be playing
    while the next screenshot is taken. A failure in any stage is logged and
    ends that cycle only. The loop runs until `stop()` is called (or stdin is
    closed in manual mode).

    Args:
        capture: Started page capture driver.
        commentary: Client that describes snapshots.
        synthesizer: Speech synthesizer writing audio artifacts.
        sequencer: Playback queue receiving one task per successful cycle.
        history: Conversation history threaded through every describe call.
        key_press: Async prompt used in manual mode; defaults to reading stdin.
        cost_generator: Optional estimator for per-cycle cost logging.
    """

    def __init__(
        self,
        capture: PageCapture,
        commentary: CommentaryClient,
        synthesizer: SpeechSynthesizer,
        sequencer: PlaybackSequencer,
        history: ConversationHistory,
        *,
        key_press: Optional[KeyPress] = None,
        cost_generator: Optional[CostGenerator] = None,
    ) -> None:
        self.capture = capture
        self.commentary = commentary
        self.synthesizer = synthesizer
        self.sequencer = sequencer
        self.history = history
        self.key_press = key_press or prompt_for_key_press
        self.cost_generator = cost_generator or CostGenerator()
        self.state = LoopState.IDLE
        self.cycles_completed = 0
        self.cycles_failed = 0
        self._stop_event = asyncio.Event()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Ask the loop to stop after the stage it is currently in."""
        self._stop_event.set()

    async def run(self, mode: LoopMode) -> None:
        """Run in `mode` until stopped."""
        self._stop_event.clear()
        try:
            if mode == LoopMode.MANUAL:
                await self._run_manual()
            elif mode == LoopMode.CONTINUOUS:
                print("The script will run continuously (Press Ctrl+C to stop)")
                await self._run_continuous()
            else:
                raise ValueError(f"Unknown loop mode: {mode!r}")
        finally:
            self.state = LoopState.STOPPED

    async def _run_manual(self) -> None:
        while not self.stopped:
            self.state = LoopState.WAITING_FOR_KEY
            if not await self._wait_for_trigger():
                break
            await self.run_cycle()

    async def _run_continuous(self) -> None:
        while not self.stopped:
            await self.run_cycle()
            # let the playback worker and signal handlers run between cycles
            await asyncio.sleep(0)

    async def _wait_for_trigger(self) -> bool:
        """Wait for a key press or the stop event. True means a cycle should run."""
        prompt = asyncio.ensure_future(self.key_press(TRIGGER_PROMPT))
        stopper = asyncio.ensure_future(self._stop_event.wait())
        try:
            done, _ = await asyncio.wait({prompt, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for fut in (prompt, stopper):
                if not fut.done():
                    fut.cancel()
        if prompt not in done or self.stopped:
            return False
        try:
            prompt.result()
        except (EOFError, OSError) as exc:
            logging.info("Input closed (%s); stopping manual mode.", exc.__class__.__name__)
            self.stop()
            return False
        return True

    async def run_cycle(self) -> Optional[CycleResult]:
        """Run one capture → describe → synthesize → enqueue cycle.

        Returns:
            The cycle result, or None when a stage failed.
        """
        self.state = LoopState.CAPTURING
        try:
            snapshot = await self.capture.capture()
        except Exception as exc:
            logging.error("Error capturing screenshot: %s", exc)
            self.cycles_failed += 1
            return None

        self.state = LoopState.PROCESSING
        try:
            text, self.history = await self.commentary.describe(self.history, snapshot)
        except Exception as exc:
            logging.error("Error processing screenshot %s: %s", snapshot.path, exc)
            self.cycles_failed += 1
            return None

        try:
            audio = await self.synthesizer.synthesize(text)
        except Exception as exc:
            logging.error("Error in speech synthesis: %s", exc)
            self.cycles_failed += 1
            return None

        playback = self.sequencer.enqueue(PlaybackTask(audio_path=audio.path, text=text))

        usage = dict(self.commentary.last_usage)
        cost = self._estimate_cost(usage, len(text))
        self.cycles_completed += 1
        logging.info(
            "Cycle %d queued %s (tokens in=%s out=%s, est. cost $%.5f)",
            self.cycles_completed,
            audio.path,
            usage.get("input_tokens"),
            usage.get("output_tokens"),
            cost.get("total_cost", 0.0),
        )
        logging.debug("Recent conversation:\n%s", self.history.transcript(limit=4))
        return CycleResult(
            snapshot=snapshot,
            text=text,
            audio=audio,
            usage=usage,
            latency=self.commentary.last_latency,
            cost=cost,
            playback=playback,
        )

    def _estimate_cost(self, usage: dict, characters: int) -> dict:
        input_tokens = int(usage.get("input_tokens") or 0)
        output_tokens = int(usage.get("output_tokens") or 0)
        model = self.commentary.model
        try:
            cost = self.cost_generator.estimate(input_tokens=input_tokens, output_tokens=output_tokens, model=model)
        except ValueError:
            # Fall back to a zeroed-out cost structure if pricing is unknown
            cost = self.cost_generator.zero(model, input_tokens, output_tokens)
        try:
            speech = self.cost_generator.estimate_speech(characters, self.synthesizer.model)
            cost["speech_cost"] = speech["total_cost"]
            cost["total_cost"] = round(cost["total_cost"] + speech["total_cost"], 8)
        except ValueError:
            cost["speech_cost"] = 0.0
        return cost
