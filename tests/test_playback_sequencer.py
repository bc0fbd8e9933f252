import asyncio
from pathlib import Path

import pytest

from models.artifacts import PlaybackTask
from services.playback.playback_sequencer import PlaybackSequencer


def _task(name):
    return PlaybackTask(audio_path=Path(f"{name}.mp3"), text=name)


def test_tasks_play_in_enqueue_order_despite_staggered_delays():
    played = []
    delays = {"first": 0.05, "second": 0.0, "third": 0.02, "fourth": 0.0}

    async def handler(task):
        await asyncio.sleep(delays[task.text])
        played.append(task.text)

    async def scenario():
        sequencer = PlaybackSequencer(handler)
        futures = [sequencer.enqueue(_task(name)) for name in delays]
        results = await asyncio.gather(*futures)
        await sequencer.close()
        return results

    results = asyncio.run(scenario())

    assert played == ["first", "second", "third", "fourth"]
    assert results == [True, True, True, True]


def test_order_follows_enqueue_not_synthesis_start():
    """Producers that finish at different times are played in the order they enqueued."""
    played = []

    async def handler(task):
        played.append(task.text)

    async def produce(sequencer, name, synth_delay):
        await asyncio.sleep(synth_delay)
        return sequencer.enqueue(_task(name))

    async def scenario():
        sequencer = PlaybackSequencer(handler)
        futures = await asyncio.gather(
            produce(sequencer, "slow", 0.05),
            produce(sequencer, "fast", 0.0),
            produce(sequencer, "medium", 0.02),
        )
        await asyncio.gather(*futures)
        await sequencer.close()

    asyncio.run(scenario())

    assert played == ["fast", "medium", "slow"]


def test_failing_task_does_not_stop_the_queue():
    attempts = []

    async def handler(task):
        attempts.append(task.text)
        if task.text == "A":
            raise RuntimeError("player exploded")

    async def scenario():
        sequencer = PlaybackSequencer(handler)
        first = sequencer.enqueue(_task("A"))
        second = sequencer.enqueue(_task("B"))
        results = await asyncio.gather(first, second)
        await sequencer.close()
        return results

    results = asyncio.run(scenario())

    assert attempts == ["A", "B"]
    assert results == [False, True]


def test_back_to_back_enqueues_never_run_concurrently():
    active = 0
    peak = 0

    async def handler(task):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        active -= 1

    async def scenario():
        sequencer = PlaybackSequencer(handler)
        sequencer.enqueue(_task("busy"))
        await asyncio.sleep(0)
        assert sequencer.busy
        sequencer.enqueue(_task("one"))
        sequencer.enqueue(_task("two"))
        await sequencer.join()
        await sequencer.close()

    asyncio.run(scenario())

    assert peak == 1


def test_enqueue_returns_before_the_task_runs():
    played = []

    async def handler(task):
        played.append(task.text)

    async def scenario():
        sequencer = PlaybackSequencer(handler)
        future = sequencer.enqueue(_task("later"))
        assert played == []
        assert not future.done()
        assert await future is True
        await sequencer.close()

    asyncio.run(scenario())

    assert played == ["later"]


def test_worker_idles_between_tasks():
    played = []

    async def handler(task):
        played.append(task.text)

    async def scenario():
        sequencer = PlaybackSequencer(handler)
        await sequencer.enqueue(_task("one"))
        await asyncio.sleep(0.01)
        assert sequencer.pending == 0
        assert not sequencer.busy
        await sequencer.enqueue(_task("two"))
        await sequencer.close()

    asyncio.run(scenario())

    assert played == ["one", "two"]


def test_sequence_numbers_follow_enqueue_order():
    async def handler(task):
        return None

    async def scenario():
        sequencer = PlaybackSequencer(handler)
        tasks = [_task(str(i)) for i in range(3)]
        for task in tasks:
            sequencer.enqueue(task)
        await sequencer.close()
        return [task.sequence for task in tasks]

    assert asyncio.run(scenario()) == [1, 2, 3]


def test_close_without_drain_cancels_waiting_tasks():
    release = None

    async def handler(task):
        await release.wait()

    async def scenario():
        nonlocal release
        release = asyncio.Event()
        sequencer = PlaybackSequencer(handler)
        sequencer.enqueue(_task("in-flight"))
        waiting = sequencer.enqueue(_task("waiting"))
        await asyncio.sleep(0)
        await sequencer.close(drain=False)
        with pytest.raises(RuntimeError):
            sequencer.enqueue(_task("too-late"))
        return waiting.cancelled()

    assert asyncio.run(scenario()) is True
