"""Compiled line patterns and first-match lookup.

Patterns are plain Python regular expressions compiled once per configuration
load. Matching always searches anywhere in a line; it never anchors to the
whole line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import InvalidPatternError


@dataclass(frozen=True)
class Pattern:
    """Immutable compiled pattern together with the string it came from."""

    source: str
    regex: re.Pattern[str]

    def __repr__(self) -> str:
        return f"Pattern({self.source!r})"


@dataclass(frozen=True)
class LineMatch:
    """One match inside a line: character offset and matched length."""

    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


def compile_pattern(source: object) -> Pattern:
    """Compile a user-supplied pattern string.

    Raises ``InvalidPatternError`` for non-strings, empty strings, and strings
    that ``re`` rejects.
    """
    if not isinstance(source, str):
        raise InvalidPatternError(source, "pattern must be a string")
    if not source:
        raise InvalidPatternError(source, "pattern must not be empty")
    try:
        regex = re.compile(source)
    except re.error as exc:
        raise InvalidPatternError(source, str(exc)) from exc
    return Pattern(source=source, regex=regex)


def find_first(line_text: str, pattern: Pattern) -> LineMatch | None:
    """Return the lowest-offset match of ``pattern`` in ``line_text``."""
    match = pattern.regex.search(line_text)
    if match is None:
        return None
    return LineMatch(offset=match.start(), length=match.end() - match.start())


def find_all(line_text: str, pattern: Pattern) -> list[LineMatch]:
    """Return every non-overlapping match in ``line_text`` in offset order."""
    return [
        LineMatch(offset=match.start(), length=match.end() - match.start())
        for match in pattern.regex.finditer(line_text)
    ]
