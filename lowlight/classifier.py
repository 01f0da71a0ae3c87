"""Group resolved matches into per-tier range queues."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .document import Range
from .rules import TIER_ORDER, Tier


@dataclass(frozen=True)
class MatchResult:
    range: Range
    tier: Tier


def _empty_queues() -> dict[Tier, list[Range]]:
    return {tier: [] for tier in TIER_ORDER}


@dataclass
class TieredRangeSet:
    """Ranges keyed by tier, each list in discovery order.

    Every tier is always present. Duplicates are kept: the renderer decides
    which overlapping style wins.
    """

    queues: dict[Tier, list[Range]] = field(default_factory=_empty_queues)

    def __getitem__(self, tier: Tier) -> list[Range]:
        return self.queues[tier]

    def add(self, result: MatchResult) -> None:
        self.queues[result.tier].append(result.range)

    def is_empty(self) -> bool:
        return not any(self.queues.values())

    def total(self) -> int:
        return sum(len(ranges) for ranges in self.queues.values())

    def items(self) -> list[tuple[Tier, list[Range]]]:
        """Return ``(tier, ranges)`` pairs in tier apply order."""
        return [(tier, self.queues[tier]) for tier in TIER_ORDER]

    def to_json(self) -> dict[str, list[list[int]]]:
        """Serialize as ``{"max": [[sl, sc, el, ec], ...], ...}``."""
        return {tier.value: [rng.as_list() for rng in ranges] for tier, ranges in self.items()}


def empty_tiered_range_set() -> TieredRangeSet:
    return TieredRangeSet()


def bucket(results: Iterable[MatchResult]) -> TieredRangeSet:
    """Append each result's range under its tier, preserving input order."""
    tiered = TieredRangeSet()
    for result in results:
        tiered.add(result)
    return tiered
