"""Play audio files through an OS-level player command."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Sequence

from models.artifacts import PlaybackTask
from models.errors import PlaybackError

DEFAULT_PLAYER = ("afplay",)


class AudioPlayer:
	"""Run a player command with the audio path appended and wait for it to exit.

	Args:
		command: Player argv, e.g. `["afplay"]` or `["mpg123", "-q"]`.
		echo_text: Print the task text to stdout when its playback starts.
	"""

	def __init__(self, command: Sequence[str] = DEFAULT_PLAYER, *, echo_text: bool = True) -> None:
		if not command:
			raise ValueError("A player command is required.")
		self.command = list(command)
		self.echo_text = echo_text

	async def play(self, audio_path: Path | str) -> None:
		"""Block (cooperatively) until the player has finished `audio_path`.

		Raises:
			PlaybackError: If the player cannot be started or exits non-zero.
		"""
		argv = [*self.command, str(audio_path)]
		try:
			process = await asyncio.create_subprocess_exec(
				*argv,
				stdout=asyncio.subprocess.DEVNULL,
				stderr=asyncio.subprocess.PIPE,
			)
		except OSError as exc:
			logging.error("Error playing audio: could not start %s: %s", argv[0], exc)
			raise PlaybackError(f"Could not start player '{argv[0]}'") from exc

		_, stderr = await process.communicate()
		if process.returncode != 0:
			detail = (stderr or b"").decode("utf-8", errors="replace").strip()
			logging.error("Error playing audio %s: exit %s %s", audio_path, process.returncode, detail)
			raise PlaybackError(f"Player exited with status {process.returncode} for {audio_path}")

	async def perform(self, task: PlaybackTask) -> None:
		"""Playback handler for the sequencer: echo the text, then play the file."""
		if self.echo_text:
			print(f"\n{task.text}\n")
		await self.play(task.audio_path)
