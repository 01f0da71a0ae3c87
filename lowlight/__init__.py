"""Public package surface for lowlight.

Exports the scan engine entry point and its value types. ``main`` imports the
CLI lazily to keep package imports lightweight.
"""

from __future__ import annotations

from .classifier import MatchResult, TieredRangeSet, bucket
from .document import Document, Position, Range, TextDocument
from .engine import evaluate, evaluate_config
from .errors import ConfigurationShapeError, InvalidPatternError, LineUnavailable, LowlightError
from .patterns import Pattern, compile_pattern
from .rules import TIER_ORDER, BlockRule, FragmentRule, Rule, Tier


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "BlockRule",
    "ConfigurationShapeError",
    "Document",
    "FragmentRule",
    "InvalidPatternError",
    "LineUnavailable",
    "LowlightError",
    "MatchResult",
    "Pattern",
    "Position",
    "Range",
    "Rule",
    "TIER_ORDER",
    "TextDocument",
    "Tier",
    "TieredRangeSet",
    "bucket",
    "compile_pattern",
    "evaluate",
    "evaluate_config",
    "main",
]
