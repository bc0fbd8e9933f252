from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from fakes import chat_completion


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=chat_completion("Three flights over Denver."))
    client.audio.speech.create = AsyncMock(return_value=SimpleNamespace(content=b"ID3-fake-mp3"))
    return client


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "screenshot_2024-05-01T12_30_45.123Z.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake")
    return path
