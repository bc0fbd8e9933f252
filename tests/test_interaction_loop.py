import asyncio
import logging

import pytest

from fakes import FakeCapture, FakeCommentary, FakeSynthesizer
from controllers.interaction_loop import InteractionLoop
from models.conversation import ConversationHistory
from models.loop_state import LoopMode, LoopState
from services.playback.playback_sequencer import PlaybackSequencer


class Recorder:
    def __init__(self):
        self.played = []

    async def __call__(self, task):
        self.played.append(task.text)


def _build(tmp_path, *, capture=None, commentary=None, synthesizer=None, key_press=None):
    recorder = Recorder()
    loop = InteractionLoop(
        capture or FakeCapture(tmp_path / "screenshots_dir"),
        commentary or FakeCommentary(),
        synthesizer or FakeSynthesizer(tmp_path / "audio"),
        PlaybackSequencer(recorder),
        ConversationHistory("You are a commentator."),
        key_press=key_press,
    )
    return loop, recorder


@pytest.fixture(autouse=True)
def _screenshot_dir(tmp_path):
    (tmp_path / "screenshots_dir").mkdir()


def test_cycle_runs_every_stage_and_queues_playback(tmp_path):
    loop, recorder = _build(tmp_path)

    async def scenario():
        result = await loop.run_cycle()
        assert await result.playback is True
        await loop.sequencer.close()
        return result

    result = asyncio.run(scenario())

    assert result.text == "commentary 1"
    assert result.audio.path.exists()
    assert result.usage == {"input_tokens": 1000, "output_tokens": 100}
    assert result.cost["model"] == "gpt-4o"
    assert result.cost["speech_cost"] > 0
    assert recorder.played == ["commentary 1"]
    assert len(loop.history) == 3
    assert loop.cycles_completed == 1


def test_describe_failure_produces_no_audio_and_loop_moves_on(tmp_path):
    commentary = FakeCommentary(fail_on={1})
    synthesizer = FakeSynthesizer(tmp_path / "audio")
    loop, recorder = _build(tmp_path, commentary=commentary, synthesizer=synthesizer)

    async def scenario():
        failed = await loop.run_cycle()
        assert failed is None
        assert synthesizer.calls == 0
        assert loop.sequencer.pending == 0
        assert not (tmp_path / "audio").exists()
        succeeded = await loop.run_cycle()
        await loop.sequencer.close()
        return succeeded

    succeeded = asyncio.run(scenario())

    assert succeeded is not None
    assert recorder.played == ["commentary 2"]
    assert loop.cycles_failed == 1
    assert loop.cycles_completed == 1


def test_capture_and_synthesis_failures_are_not_fatal(tmp_path):
    capture = FakeCapture(tmp_path / "screenshots_dir", fail_on={1})
    synthesizer = FakeSynthesizer(tmp_path / "audio", fail_on={1})
    loop, recorder = _build(tmp_path, capture=capture, synthesizer=synthesizer)

    async def scenario():
        results = [await loop.run_cycle() for _ in range(3)]
        await loop.sequencer.close()
        return results

    results = asyncio.run(scenario())

    assert results[0] is None
    assert results[1] is None
    assert results[2].text == "commentary 2"
    assert recorder.played == ["commentary 2"]


def test_continuous_mode_runs_until_stopped(tmp_path):
    holder = {}

    def stop_on_third(call):
        if call == 3:
            holder["loop"].stop()

    capture = FakeCapture(tmp_path / "screenshots_dir", on_capture=stop_on_third)
    commentary = FakeCommentary(fail_on={2})
    loop, recorder = _build(tmp_path, capture=capture, commentary=commentary)
    holder["loop"] = loop

    async def scenario():
        await loop.run(LoopMode.CONTINUOUS)
        await loop.sequencer.close()

    asyncio.run(scenario())

    assert capture.calls == 3
    assert loop.state == LoopState.STOPPED
    assert recorder.played == ["commentary 1", "commentary 3"]


def test_manual_mode_runs_one_cycle_per_key_press(tmp_path):
    events = []
    presses = 3

    async def key_press(prompt):
        events.append("key")
        if events.count("key") > presses:
            raise EOFError
        return ""

    def on_capture(call):
        events.append("capture")

    capture = FakeCapture(tmp_path / "screenshots_dir", on_capture=on_capture)
    loop, recorder = _build(tmp_path, capture=capture, key_press=key_press)

    async def scenario():
        await loop.run(LoopMode.MANUAL)
        await loop.sequencer.close()

    asyncio.run(scenario())

    assert capture.calls == presses
    assert events == ["key", "capture", "key", "capture", "key", "capture", "key"]
    assert len(recorder.played) == presses
    assert loop.stopped


def test_manual_mode_without_key_press_runs_no_cycles(tmp_path):
    capture = FakeCapture(tmp_path / "screenshots_dir")

    async def never_pressed(prompt):
        await asyncio.Event().wait()

    loop, recorder = _build(tmp_path, capture=capture, key_press=never_pressed)

    async def scenario():
        runner = asyncio.ensure_future(loop.run(LoopMode.MANUAL))
        await asyncio.sleep(0.05)
        assert loop.state == LoopState.WAITING_FOR_KEY
        loop.stop()
        await asyncio.wait_for(runner, timeout=1)
        await loop.sequencer.close()

    asyncio.run(scenario())

    assert capture.calls == 0
    assert recorder.played == []
    assert loop.state == LoopState.STOPPED


def test_playback_of_previous_cycle_overlaps_next_capture(tmp_path):
    timeline = []
    release = {}

    async def slow_player(task):
        timeline.append(f"play-start {task.text}")
        await release["event"].wait()
        timeline.append(f"play-end {task.text}")

    def on_capture(call):
        timeline.append(f"capture {call}")

    loop = InteractionLoop(
        FakeCapture(tmp_path / "screenshots_dir", on_capture=on_capture),
        FakeCommentary(),
        FakeSynthesizer(tmp_path / "audio"),
        PlaybackSequencer(slow_player),
        ConversationHistory("You are a commentator."),
    )

    async def scenario():
        release["event"] = asyncio.Event()
        await loop.run_cycle()
        await asyncio.sleep(0)
        await loop.run_cycle()
        release["event"].set()
        await loop.sequencer.close()

    asyncio.run(scenario())

    assert timeline.index("play-start commentary 1") < timeline.index("capture 2")
    assert timeline.index("capture 2") < timeline.index("play-end commentary 1")
    assert timeline[-1] == "play-end commentary 2"


def test_unknown_mode_is_rejected(tmp_path):
    loop, _ = _build(tmp_path)

    with pytest.raises(ValueError):
        asyncio.run(loop.run("sideways"))


def test_manual_mode_stops_when_stdin_errors(tmp_path):
    capture = FakeCapture(tmp_path / "screenshots_dir")

    async def broken_stdin(prompt):
        raise OSError("stdin gone")

    loop, recorder = _build(tmp_path, capture=capture, key_press=broken_stdin)

    async def scenario():
        await loop.run(LoopMode.MANUAL)
        await loop.sequencer.close()

    asyncio.run(scenario())

    assert capture.calls == 0
    assert loop.stopped
    assert loop.state == LoopState.STOPPED


def test_cycle_logs_recent_conversation_at_debug(tmp_path, caplog):
    loop, _ = _build(tmp_path)

    async def scenario():
        await loop.run_cycle()
        await loop.sequencer.close()

    with caplog.at_level(logging.DEBUG):
        asyncio.run(scenario())

    logged = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Recent conversation:")]
    assert len(logged) == 1
    assert "ASSISTANT: commentary 1" in logged[0]
    assert "USER: describe screenshot_1.png [image]" in logged[0]
