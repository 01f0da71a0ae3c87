"""Bound visible ranges by the global line ceiling.

A visible range that lies entirely past the ceiling is replaced by the full
ceiling window, so the top of the document is still scanned after the user
scrolls beyond it.
"""

from __future__ import annotations

from collections.abc import Iterable

from .document import Position, Range


def ceiling_range(ceiling_line: int) -> Range:
    """Return the ``[0, ceiling_line]`` window, treating negatives as 0."""
    return Range.from_lines(0, max(0, ceiling_line))


def clip(visible_ranges: Iterable[Range], ceiling_line: int) -> list[Range]:
    """Intersect each visible range with the ceiling window, preserving order."""
    limit = ceiling_range(ceiling_line)
    windows: list[Range] = []
    for visible in visible_ranges:
        clipped = visible.intersection(limit)
        windows.append(clipped if clipped is not None else limit)
    return windows


def bound_to_document(visible_ranges: Iterable[Range], line_count: int) -> list[Range]:
    """Cut visible ranges at the document's last line, preserving order.

    Ranges that start past the end of the document are dropped.
    """
    last_line = max(0, line_count - 1)
    bounded: list[Range] = []
    for visible in visible_ranges:
        if visible.start.line > last_line:
            continue
        if visible.end.line > last_line:
            visible = Range(visible.start, Position(last_line, 0))
        bounded.append(visible)
    return bounded


def parse_line_span(text: str) -> Range:
    """Parse ``"A:B"`` (zero-based, inclusive) into a line range.

    Raises ``ValueError`` for malformed input or negative line numbers.
    """
    head, sep, tail = text.partition(":")
    if not sep:
        raise ValueError(f"expected START:END, got {text!r}")
    start = int(head) if head.strip() else 0
    end = int(tail)
    if start < 0 or end < 0:
        raise ValueError(f"line numbers must be >= 0, got {text!r}")
    return Range.from_lines(start, end)
