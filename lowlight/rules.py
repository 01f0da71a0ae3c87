"""Rule variants and intensity tiers.

A rule is either a ``FragmentRule`` or a ``BlockRule``. The variant is fixed
when configuration is parsed; scanning dispatches on the type alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .patterns import Pattern


class Tier(str, Enum):
    """How strongly a matched range is de-emphasized."""

    MAX = "max"
    MID = "mid"
    MIN = "min"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]

    # str already defines every comparison, so each one is overridden here.
    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: object) -> Tier | None:
        """Map a config value such as ``"Max"`` onto a tier, or ``None``."""
        if isinstance(value, Tier):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_TIER_RANK = {Tier.MIN: 0, Tier.MID: 1, Tier.MAX: 2}

# Bucket order and renderer apply order.
TIER_ORDER: tuple[Tier, ...] = (Tier.MAX, Tier.MID, Tier.MIN)


@dataclass(frozen=True)
class FragmentRule:
    """Single-line pattern; each hit is one range."""

    pattern: Pattern
    tier: Tier = Tier.MID


@dataclass(frozen=True)
class BlockRule:
    """Range opened by ``start_pattern`` and closed by a later ``end_pattern``.

    ``max_lines_between`` caps how far below the start line the end may sit.
    ``same_scope`` is a textual proximity heuristic, not syntax-aware scope
    detection: the block is rejected when a blank (whitespace-only) line sits
    between the start and end lines.
    """

    start_pattern: Pattern
    end_pattern: Pattern
    tier: Tier = Tier.MID
    max_lines_between: int | None = None
    same_scope: bool = False


Rule = Union[FragmentRule, BlockRule]
