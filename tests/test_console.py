import asyncio
from unittest.mock import patch

import pytest

from models.loop_state import LoopMode
from utils.console import MODE_PROMPT, choose_mode, parse_mode, prompt_for_key_press


@pytest.mark.parametrize(
    "answer, expected",
    [
        ("1", LoopMode.MANUAL),
        (" 2\n", LoopMode.CONTINUOUS),
        ("3", None),
        ("", None),
        ("manual", None),
    ],
)
def test_parse_mode(answer, expected):
    assert parse_mode(answer) == expected


def test_prompt_returns_the_typed_line():
    with patch("builtins.input", return_value="typed") as fake_input:
        answer = asyncio.run(prompt_for_key_press("Go? "))

    assert answer == "typed"
    fake_input.assert_called_once_with("Go? ")


def test_prompt_raises_eof_when_stdin_is_closed():
    with patch("builtins.input", side_effect=EOFError):
        with pytest.raises(EOFError):
            asyncio.run(prompt_for_key_press("Go? "))


def test_choose_mode_reads_the_answer():
    with patch("builtins.input", return_value="2") as fake_input:
        assert asyncio.run(choose_mode()) == LoopMode.CONTINUOUS
    fake_input.assert_called_once_with(MODE_PROMPT)


@pytest.mark.parametrize("error", [EOFError(), OSError("stdin gone")])
def test_choose_mode_with_closed_stdin_returns_none(error):
    with patch("builtins.input", side_effect=error):
        assert asyncio.run(choose_mode()) is None
