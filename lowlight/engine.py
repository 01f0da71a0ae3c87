"""Drive every rule across every clipped viewport window.

``evaluate`` is the engine's single entry point. It keeps no state between
calls: identical inputs produce identical ``TieredRangeSet`` contents.
Releasing the previous result's rendering resources is the caller's job and
must happen only after the new result has been applied (see
``lowlight.decorations``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from .classifier import MatchResult, TieredRangeSet, bucket
from .document import Document, Range
from .rules import Rule
from .scanner import scan
from .viewport import clip

if TYPE_CHECKING:
    from .config import LowlightConfig

logger = logging.getLogger(__name__)


def evaluate(
    document: Document,
    viewport: Iterable[Range],
    rules: Sequence[Rule],
    ceiling_line: int,
) -> TieredRangeSet:
    """Scan ``viewport`` (bounded by ``ceiling_line``) with ``rules``.

    Results are collected in rule order, then window order, and bucketed by
    tier.
    """
    windows = clip(viewport, ceiling_line)
    results: list[MatchResult] = []
    for rule in rules:
        for window in windows:
            result = scan(document, window, rule)
            if result is not None:
                results.append(result)
    tiered = bucket(results)
    logger.debug(
        "Evaluated %d rules over %d windows: %d ranges",
        len(rules),
        len(windows),
        tiered.total(),
    )
    return tiered


def evaluate_config(
    document: Document,
    viewport: Iterable[Range],
    config: LowlightConfig,
) -> TieredRangeSet:
    """Run ``evaluate`` with rules and ceiling taken from ``config``."""
    return evaluate(document, viewport, config.rules, config.max_lines_to_scan)
