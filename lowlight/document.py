"""Document positions, ranges, and the read-only line-access protocol.

The engine only ever reads a document through ``Document``. ``TextDocument``
is the in-memory implementation used by the CLI host and the tests.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Protocol

from .errors import LineUnavailable


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based ``(line, character)`` location, ordered in document order."""

    line: int
    character: int = 0


@dataclass(frozen=True)
class Range:
    """Ordered pair of positions.

    A reversed pair is swapped on construction so ``start <= end`` always holds.
    """

    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.end < self.start:
            start, end = self.end, self.start
            object.__setattr__(self, "start", start)
            object.__setattr__(self, "end", end)

    @classmethod
    def from_lines(cls, start_line: int, end_line: int) -> Range:
        """Build a range covering ``start_line`` through the start of ``end_line``."""
        return cls(Position(start_line, 0), Position(end_line, 0))

    @classmethod
    def on_line(cls, line: int, start_character: int, end_character: int) -> Range:
        """Build a single-line range."""
        return cls(Position(line, start_character), Position(line, end_character))

    @property
    def is_single_line(self) -> bool:
        return self.start.line == self.end.line

    def with_line(self, line: int) -> Range:
        """Move a single-line range onto ``line`` keeping its character offsets."""
        return Range.on_line(line, self.start.character, self.end.character)

    def intersection(self, other: Range) -> Range | None:
        """Return the overlap with ``other``, or ``None`` if the two do not touch."""
        start = max(self.start, other.start)
        end = min(self.end, other.end)
        if end < start:
            return None
        return Range(start, end)

    def as_list(self) -> list[int]:
        """Flatten into ``[start_line, start_char, end_line, end_char]``."""
        return [self.start.line, self.start.character, self.end.line, self.end.character]


def connect_ranges(start: Range, end: Range) -> Range:
    """Span from the start of ``start`` to the end of ``end``."""
    return Range(start.start, end.end)


class Document(Protocol):
    """Read-only view of a host text buffer."""

    def line_count(self) -> int: ...

    def line_text(self, line: int) -> str: ...

    def offset_at(self, position: Position) -> int: ...

    def position_at(self, offset: int) -> Position: ...


class TextDocument:
    """Immutable list-of-lines document.

    Line terminators are not part of line text. Offsets count one character
    per terminator, matching ``"\\n".join(lines)``.
    """

    def __init__(self, lines: list[str] | tuple[str, ...]) -> None:
        self._lines: tuple[str, ...] = tuple(lines) if lines else ("",)
        self._line_starts: list[int] = []
        offset = 0
        for text in self._lines:
            self._line_starts.append(offset)
            offset += len(text) + 1

    @classmethod
    def from_text(cls, text: str) -> TextDocument:
        """Split ``text`` on universal newlines; a trailing newline adds an empty line."""
        lines = text.splitlines()
        if not lines:
            lines = [""]
        elif text.endswith(("\n", "\r")):
            lines.append("")
        return cls(lines)

    @property
    def lines(self) -> tuple[str, ...]:
        return self._lines

    def line_count(self) -> int:
        return len(self._lines)

    def line_text(self, line: int) -> str:
        """Return the text of ``line``; raise ``LineUnavailable`` when out of range."""
        if line < 0 or line >= len(self._lines):
            raise LineUnavailable(line, len(self._lines))
        return self._lines[line]

    def offset_at(self, position: Position) -> int:
        """Convert a position to a flat offset, clamping to document bounds."""
        if position.line < 0:
            return 0
        if position.line >= len(self._lines):
            last = len(self._lines) - 1
            return self._line_starts[last] + len(self._lines[last])
        text = self._lines[position.line]
        character = max(0, min(position.character, len(text)))
        return self._line_starts[position.line] + character

    def position_at(self, offset: int) -> Position:
        """Convert a flat offset to a position, clamping to document bounds."""
        if offset <= 0:
            return Position(0, 0)
        line = bisect_right(self._line_starts, offset) - 1
        character = min(offset - self._line_starts[line], len(self._lines[line]))
        return Position(line, character)
