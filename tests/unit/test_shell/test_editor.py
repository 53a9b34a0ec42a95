"""Tests for the line editor and the masked secret input."""

from __future__ import annotations

import pytest

from folioshell.domain.models import LineState
from folioshell.shell.editor import LineEditor, LineFrozenError, SecretInput


class TestLineEditor:
    def test_starts_empty_and_focused(self) -> None:
        line = LineEditor("user@host:~$ ")
        assert line.state is LineState.EMPTY
        assert line.focused is True
        assert line.render() == "user@host:~$ "

    def test_insert_and_backspace(self) -> None:
        line = LineEditor()
        line.insert("l")
        line.insert("s")
        assert line.text == "ls"
        assert line.state is LineState.EDITING
        line.backspace()
        line.backspace()
        assert line.text == ""
        assert line.state is LineState.EMPTY

    def test_backspace_at_start_is_noop(self) -> None:
        line = LineEditor()
        line.backspace()
        assert line.text == ""

    def test_insert_at_caret(self) -> None:
        line = LineEditor()
        line.insert("ac")
        line.move_caret(-1)
        line.insert("b")
        assert line.text == "abc"
        assert line.caret == 2

    def test_caret_is_clamped(self) -> None:
        line = LineEditor()
        line.insert("ab")
        line.move_caret(-10)
        assert line.caret == 0
        line.move_caret(10)
        assert line.caret == 2

    def test_replace_moves_caret_to_end(self) -> None:
        line = LineEditor()
        line.insert("x")
        line.replace("weather Padua")
        assert line.text == "weather Padua"
        assert line.caret == len("weather Padua")

    def test_submit_trims_and_freezes(self) -> None:
        line = LineEditor()
        line.insert("  help  ")
        assert line.submit() == "help"
        assert line.state is LineState.SUBMITTED
        assert line.focused is False
        with pytest.raises(LineFrozenError):
            line.insert("x")

    def test_cancel_freezes(self) -> None:
        line = LineEditor()
        line.insert("ls")
        line.cancel()
        assert line.state is LineState.CANCELLED
        assert line.render().endswith("ls")
        with pytest.raises(LineFrozenError):
            line.submit()


class TestSecretInput:
    def test_never_echoes(self) -> None:
        secret = SecretInput()
        secret.insert("h")
        secret.insert("u")
        assert secret.render() == "[sudo] password: "
        assert "hu" not in secret.render()

    def test_submit_returns_secret(self) -> None:
        secret = SecretInput()
        for c in "pw1":
            secret.insert(c)
        secret.backspace()
        assert secret.submit() == "pw"
        assert secret.state is LineState.SUBMITTED

    def test_cancel_discards(self) -> None:
        secret = SecretInput()
        secret.insert("x")
        secret.cancel()
        assert secret.state is LineState.CANCELLED
        with pytest.raises(LineFrozenError):
            secret.submit()
