"""Strictly ordered, single-worker playback queue."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple

from models.artifacts import PlaybackTask

PlaybackHandler = Callable[[PlaybackTask], Awaitable[None]]


class PlaybackSequencer:
	"""Run playback tasks one at a time in the order they were enqueued.

	`enqueue` never blocks: it puts the task on an `asyncio.Queue` and makes
	sure the single consumer task is running. The consumer awaits the handler
	for the head task to completion before taking the next one, so two tasks
	never overlap. A handler failure is logged and resolves that task's future
	with False; the worker carries on with the rest of the queue.
	"""

	def __init__(self, handler: PlaybackHandler) -> None:
		if handler is None:
			raise ValueError("A playback handler is required.")
		self._handler = handler
		self._queue: asyncio.Queue[Tuple[PlaybackTask, asyncio.Future]] = asyncio.Queue()
		self._worker: Optional[asyncio.Task] = None
		self._sequence = 0
		self._active = 0
		self._closed = False

	@property
	def pending(self) -> int:
		"""Tasks waiting to start (the in-flight task is not counted)."""
		return self._queue.qsize()

	@property
	def busy(self) -> bool:
		return self._active > 0

	@property
	def running(self) -> bool:
		return self._worker is not None and not self._worker.done()

	def enqueue(self, task: PlaybackTask) -> "asyncio.Future[bool]":
		"""Append `task` to the queue and return a future for its completion.

		The future resolves to True when playback succeeded and False when the
		handler raised. Must be called from inside the running event loop.
		"""
		if self._closed:
			raise RuntimeError("Playback sequencer is closed.")
		future = asyncio.get_running_loop().create_future()
		self._sequence += 1
		task.sequence = self._sequence
		self._queue.put_nowait((task, future))
		self._ensure_worker()
		return future

	async def join(self) -> None:
		"""Wait until every task enqueued so far has been played or has failed."""
		await self._queue.join()

	async def close(self, *, drain: bool = True) -> None:
		"""Stop the worker. With `drain`, queued tasks are played first."""
		self._closed = True
		if drain and self.running:
			await self.join()
		worker, self._worker = self._worker, None
		if worker is not None and not worker.done():
			worker.cancel()
			try:
				await worker
			except asyncio.CancelledError:
				pass
		while not self._queue.empty():
			_, future = self._queue.get_nowait()
			if not future.done():
				future.cancel()
			self._queue.task_done()

	def _ensure_worker(self) -> None:
		if not self.running:
			self._worker = asyncio.create_task(self._run(), name="playback-worker")

	async def _run(self) -> None:
		while True:
			task, future = await self._queue.get()
			try:
				succeeded = await self._execute(task)
			except asyncio.CancelledError:
				if not future.done():
					future.cancel()
				self._queue.task_done()
				raise
			if not future.done():
				future.set_result(succeeded)
			self._queue.task_done()

	async def _execute(self, task: PlaybackTask) -> bool:
		self._active += 1
		try:
			await self._handler(task)
			return True
		except asyncio.CancelledError:
			raise
		except Exception as exc:
			logging.error("Error in audio playback of task %d (%s): %s", task.sequence, task.audio_path, exc)
			return False
		finally:
			self._active -= 1
