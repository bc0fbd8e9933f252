"""Naming and directory helpers for screenshot and audio artifacts."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


def timestamp_slug(moment: Optional[datetime] = None) -> str:
    """Return an ISO-8601 UTC timestamp with ':' replaced by '_'.

    The format matches `2024-05-01T12_30_45.123Z` (millisecond precision,
    trailing `Z`). Naive datetimes are treated as UTC.
    """
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    iso = moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"
    return iso.replace(":", "_")


def artifact_path(directory: Path | str, prefix: str, extension: str, timestamp: str) -> Path:
    """Return `<directory>/<prefix>_<timestamp>.<extension>`."""
    if not prefix:
        raise ValueError("Artifact prefix must not be empty.")
    if ":" in timestamp:
        raise ValueError("Artifact timestamps must not contain ':'.")
    ext = extension.lstrip(".")
    return Path(directory) / f"{prefix}_{timestamp}.{ext}"


def ensure_directory(directory: Path | str) -> Path:
    """Create `directory` if missing and return it as a Path.

    Raises:
        RuntimeError: If the path exists but is a file, or cannot be created.
    """
    path = Path(directory).expanduser()
    if path.exists() and not path.is_dir():
        raise RuntimeError(f"{path} points to a file, not a directory.")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except Exception as exc:
        raise RuntimeError(f"Failed to create or access directory at {path}") from exc
    return path
