"""Line-oriented message-of-the-day store.

One message per line in a plain text file. Blank lines are filtered out
on read and every write rewrites the file from the filtered lines.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class MotdStore:
    """Read and mutate the MOTD file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> list[str]:
        """Return the non-blank lines in order. A missing file is empty."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise MotdStoreError(f"Cannot read {self._path}: {e}") from e
        return [line for line in text.splitlines() if line.strip()]

    def append(self, text: str) -> None:
        self._write(self.read() + [text])
        logger.info("MOTD line added (%d chars)", len(text))

    def remove(self, index: int) -> str:
        """Remove the line at 1-based ``index`` and return it.

        Raises:
            IndexError: If ``index`` is outside ``1..len(lines)``.
        """
        lines = self.read()
        if not 1 <= index <= len(lines):
            raise IndexError(index)
        removed = lines.pop(index - 1)
        self._write(lines)
        logger.info("MOTD line %d removed", index)
        return removed

    def clear(self) -> None:
        self._write([])
        logger.info("MOTD cleared")

    def _write(self, lines: list[str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        except OSError as e:
            raise MotdStoreError(f"Cannot write {self._path}: {e}") from e


class MotdStoreError(Exception):
    """Raised when the MOTD file cannot be read or written."""
