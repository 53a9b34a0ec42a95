"""Scrollable terminal transcript.

The transcript is an ordered list of output blocks. Most blocks are
written once; a live session owns one block and re-renders its body on
every tick. ``clear()`` detaches all blocks, after which writes into a
detached block are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class Block:
    """A container of output lines: a replaceable body plus appended notes."""

    def __init__(self, lines: Iterable[str] = ()) -> None:
        self._body: list[str] = list(lines)
        self._notes: list[str] = []
        self.attached = True

    @property
    def lines(self) -> list[str]:
        return self._body + self._notes

    def set_body(self, lines: Iterable[str]) -> None:
        if self.attached:
            self._body = list(lines)

    def add_note(self, text: str) -> None:
        if self.attached:
            self._notes.append(text)


class Transcript:
    """Persistent terminal output; only ``clear`` removes anything."""

    def __init__(self) -> None:
        self._blocks: list[Block] = []

    def print(self, text: str = "") -> Block:
        block = Block(text.split("\n"))
        self._blocks.append(block)
        return block

    def error(self, context: str, message: str) -> Block:
        """Write a ``"{context}: {message}"`` line (bare message without context)."""
        return self.print(f"{context}: {message}" if context else message)

    def block(self, lines: Iterable[str] = ()) -> Block:
        block = Block(lines)
        self._blocks.append(block)
        return block

    def clear(self) -> None:
        for block in self._blocks:
            block.attached = False
        self._blocks = []

    @property
    def blocks(self) -> list[Block]:
        return list(self._blocks)

    def lines(self) -> list[str]:
        return [line for block in self._blocks for line in block.lines]

    def text(self) -> str:
        return "\n".join(self.lines())

    def __iter__(self) -> Iterator[Block]:
        return iter(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)
