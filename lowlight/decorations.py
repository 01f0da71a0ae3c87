"""Per-view rendering resources with dispose-after-apply handoff.

A host keeps one ``DecorationRegistry``. Each view id maps to the
decorations most recently applied to it. A new scan result is applied with
fresh decorations first; only then are the previous ones disposed, so the
view never shows a frame of undecorated text. ``forget`` is the hook a host
calls when a view closes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass

from .classifier import TieredRangeSet
from .document import Range
from .rules import TIER_ORDER, Tier

logger = logging.getLogger(__name__)


@dataclass
class Decoration:
    """Rendering handle for one tier at one opacity."""

    tier: Tier
    opacity: float
    style: str = ""
    disposed: bool = False

    def dispose(self) -> None:
        self.disposed = True


DecorationFactory = Callable[[Tier, float], Decoration]
ApplyCallback = Callable[[Decoration, list[Range]], None]


def default_decoration_factory(tier: Tier, opacity: float) -> Decoration:
    return Decoration(tier=tier, opacity=opacity)


class DecorationRegistry:
    """Explicit ``view id -> applied decorations`` mapping."""

    def __init__(self, factory: DecorationFactory = default_decoration_factory) -> None:
        self._factory = factory
        self._applied: dict[Hashable, dict[Tier, Decoration]] = {}

    def __contains__(self, view_id: Hashable) -> bool:
        return view_id in self._applied

    def __len__(self) -> int:
        return len(self._applied)

    def applied(self, view_id: Hashable) -> dict[Tier, Decoration] | None:
        """Return the decorations currently applied to ``view_id``."""
        return self._applied.get(view_id)

    def apply(
        self,
        view_id: Hashable,
        tiered: TieredRangeSet,
        opacities: Mapping[Tier, float],
        apply: ApplyCallback,
    ) -> dict[Tier, Decoration]:
        """Apply ``tiered`` to ``view_id`` and retire the previous decorations.

        ``apply`` is called once per tier, in tier order, with the new
        decoration and that tier's ranges (possibly empty, which clears the
        tier). The previous decorations are disposed only after every tier
        has been applied.
        """
        decorations = {tier: self._factory(tier, opacities[tier]) for tier in TIER_ORDER}
        for tier in TIER_ORDER:
            apply(decorations[tier], tiered[tier])

        previous = self._applied.get(view_id)
        self._applied[view_id] = decorations
        if previous is not None:
            _dispose_all(previous)
        logger.debug("Applied %d ranges to view %r", tiered.total(), view_id)
        return decorations

    def forget(self, view_id: Hashable) -> None:
        """Dispose and drop everything held for a closed view."""
        previous = self._applied.pop(view_id, None)
        if previous is not None:
            _dispose_all(previous)

    def clear(self) -> None:
        for view_id in list(self._applied):
            self.forget(view_id)


def _dispose_all(decorations: Mapping[Tier, Decoration]) -> None:
    for tier in TIER_ORDER:
        decoration = decorations.get(tier)
        if decoration is not None:
            decoration.dispose()
