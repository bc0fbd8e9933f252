"""Artifacts produced by one narration cycle."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional


@dataclass(frozen=True)
class SnapshotArtifact:
    """Screenshot written by the capture driver.

    Attributes:
        path: Location of the PNG file on disk.
        timestamp: Filesystem-safe timestamp embedded in the filename.
    """

    path: Path
    timestamp: str


@dataclass(frozen=True)
class AudioArtifact:
    """Synthesized speech written by the speech synthesizer.

    Attributes:
        path: Location of the MP3 file on disk.
        timestamp: Filesystem-safe timestamp embedded in the filename.
        text: The text the audio was synthesized from.
    """

    path: Path
    timestamp: str
    text: str


@dataclass
class PlaybackTask:
    """One queued unit of playback: an audio file and its source text."""

    audio_path: Path
    text: str
    sequence: int = 0


@dataclass
class CycleResult:
    """Outcome of a successful capture → describe → synthesize → enqueue cycle."""

    snapshot: SnapshotArtifact
    text: str
    audio: AudioArtifact
    usage: Dict[str, Optional[int]] = field(default_factory=dict)
    latency: float = 0.0
    cost: Dict[str, object] = field(default_factory=dict)
    playback: Optional["asyncio.Future[bool]"] = None
