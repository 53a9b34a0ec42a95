"""Editable input lines.

:class:`LineEditor` is the normal command prompt line; :class:`SecretInput`
is the masked password line used during privilege escalation. Both become
immutable once submitted or cancelled.
"""

from __future__ import annotations

from folioshell.domain.models import LineState


class LineEditor:
    """One prompt line: ``EMPTY -> EDITING -> SUBMITTED | CANCELLED``."""

    def __init__(self, prompt: str = "") -> None:
        self.prompt = prompt
        self.focused = True
        self._text = ""
        self._caret = 0
        self._state = LineState.EMPTY

    @property
    def text(self) -> str:
        return self._text

    @property
    def caret(self) -> int:
        return self._caret

    @property
    def state(self) -> LineState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state in (LineState.EMPTY, LineState.EDITING)

    def insert(self, chars: str) -> None:
        self._require_active()
        self._text = self._text[: self._caret] + chars + self._text[self._caret :]
        self._caret += len(chars)
        self._touch()

    def backspace(self) -> None:
        self._require_active()
        if self._caret == 0:
            return
        self._text = self._text[: self._caret - 1] + self._text[self._caret :]
        self._caret -= 1
        self._touch()

    def move_caret(self, offset: int) -> None:
        self._require_active()
        self._caret = min(len(self._text), max(0, self._caret + offset))

    def replace(self, text: str) -> None:
        """Swap the whole content (history recall); caret goes to the end."""
        self._require_active()
        self._text = text
        self._caret = len(text)
        self._touch()

    def submit(self) -> str:
        """Freeze the line and return its trimmed text."""
        self._require_active()
        self._state = LineState.SUBMITTED
        self.focused = False
        return self._text.strip()

    def cancel(self) -> None:
        self._require_active()
        self._state = LineState.CANCELLED
        self.focused = False

    def render(self) -> str:
        return f"{self.prompt}{self._text}"

    def _touch(self) -> None:
        self._state = LineState.EDITING if self._text else LineState.EMPTY

    def _require_active(self) -> None:
        if not self.is_active:
            raise LineFrozenError(f"Line is {self._state.value}")


class SecretInput:
    """Masked single-line input. Characters are captured, never echoed."""

    def __init__(self, prompt: str = "[sudo] password: ") -> None:
        self.prompt = prompt
        self.focused = True
        self._secret = ""
        self._state = LineState.EMPTY

    @property
    def state(self) -> LineState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state in (LineState.EMPTY, LineState.EDITING)

    def insert(self, chars: str) -> None:
        self._require_active()
        self._secret += chars
        self._state = LineState.EDITING

    def backspace(self) -> None:
        self._require_active()
        self._secret = self._secret[:-1]
        self._state = LineState.EDITING if self._secret else LineState.EMPTY

    def submit(self) -> str:
        self._require_active()
        self._state = LineState.SUBMITTED
        self.focused = False
        return self._secret

    def cancel(self) -> None:
        self._require_active()
        self._state = LineState.CANCELLED
        self.focused = False
        self._secret = ""

    def render(self) -> str:
        return self.prompt

    def _require_active(self) -> None:
        if not self.is_active:
            raise LineFrozenError(f"Secret input is {self._state.value}")


class LineFrozenError(Exception):
    """Raised when an edit reaches a line that is no longer active."""
