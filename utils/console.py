"""Interactive prompts read from standard input without blocking the event loop."""

from __future__ import annotations

import asyncio
import threading
from typing import Optional

from models.loop_state import LoopMode

MODE_PROMPT = "Choose mode:\n1: Manual mode\n2: Continuous mode\n\nEnter 1 or 2 and press return: "
TRIGGER_PROMPT = "\nPress return to trigger (Ctrl+C to exit)"


async def prompt_for_key_press(question: str) -> str:
    """Show `question` and wait for a line of input.

    `input()` runs on a daemon thread so an abandoned prompt never keeps the
    process alive at shutdown. Raises EOFError when stdin is closed.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[str] = loop.create_future()

    def _resolve(answer: Optional[str], error: Optional[BaseException]) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(answer or "")

    def _read() -> None:
        try:
            answer = input(question)
        except (EOFError, OSError) as exc:
            loop.call_soon_threadsafe(_resolve, None, exc)
            return
        loop.call_soon_threadsafe(_resolve, answer, None)

    threading.Thread(target=_read, name="key-press-prompt", daemon=True).start()
    return await future


def parse_mode(answer: str) -> Optional[LoopMode]:
    """Map the startup answer to a loop mode; None for anything else."""
    choice = (answer or "").strip()
    if choice == "1":
        return LoopMode.MANUAL
    if choice == "2":
        return LoopMode.CONTINUOUS
    return None


async def choose_mode() -> Optional[LoopMode]:
    """Ask the user to pick manual or continuous mode; None when stdin is closed."""
    try:
        answer = await prompt_for_key_press(MODE_PROMPT)
    except (EOFError, OSError):
        return None
    return parse_mode(answer)
