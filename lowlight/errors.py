"""Error taxonomy for lowlight.

None of these are fatal to a scan: callers drop the offending rule, entry, or
line and keep going with whatever remains.
"""

from __future__ import annotations


class LowlightError(Exception):
    """Base class for all lowlight errors."""


class InvalidPatternError(LowlightError):
    """A configured pattern string could not be compiled."""

    def __init__(self, source: object, reason: str) -> None:
        super().__init__(f"invalid pattern {source!r}: {reason}")
        self.source = source
        self.reason = reason


class LineUnavailable(LowlightError):
    """The document has no line at the requested index."""

    def __init__(self, line: int, line_count: int) -> None:
        super().__init__(f"line {line} out of range (document has {line_count} lines)")
        self.line = line
        self.line_count = line_count


class ConfigurationShapeError(LowlightError):
    """A rule entry matches none of the recognized shapes."""

    def __init__(self, entry: object, reason: str = "unrecognized rule shape") -> None:
        super().__init__(f"{reason}: {entry!r}")
        self.entry = entry
        self.reason = reason
