"""Resolve one rule against one scan window.

Each (rule, window) pair yields at most one match: the earliest start and,
for block rules, the earliest end after that start. Lines the document cannot
provide are skipped with a warning.
"""

from __future__ import annotations

import logging

from .classifier import MatchResult
from .document import Document, Position, Range, connect_ranges
from .errors import LineUnavailable
from .patterns import Pattern, find_first
from .rules import BlockRule, FragmentRule, Rule

logger = logging.getLogger(__name__)


def scan_for_pattern(document: Document, window: Range, pattern: Pattern) -> Range | None:
    """Return the first hit of ``pattern`` on lines of ``window``, top to bottom."""
    for line in range(window.start.line, window.end.line + 1):
        try:
            text = document.line_text(line)
        except LineUnavailable as exc:
            logger.warning("Failed to get line %d: %s", line, exc)
            continue
        found = find_first(text, pattern)
        if found is not None:
            return Range.on_line(line, found.offset, found.end)
    return None


def remaining_range(window: Range, scanned: Range) -> Range | None:
    """Return the part of ``window`` strictly below ``scanned``.

    ``None`` unless at least two lines of the window follow the scanned line.
    """
    if window.end.line - scanned.end.line <= 1:
        return None
    return Range(Position(scanned.end.line + 1, scanned.end.character), window.end)


def _blank_line_between(document: Document, start_line: int, end_line: int) -> bool:
    for line in range(start_line + 1, end_line):
        try:
            text = document.line_text(line)
        except LineUnavailable:
            continue
        if not text.strip():
            return True
    return False


def _scan_block(document: Document, window: Range, rule: BlockRule) -> Range | None:
    start_match = scan_for_pattern(document, window, rule.start_pattern)
    if start_match is None:
        return None
    remaining = remaining_range(window, start_match)
    if remaining is None:
        return None
    end_match = scan_for_pattern(document, remaining, rule.end_pattern)
    if end_match is None:
        return None

    start_line = start_match.start.line
    end_line = end_match.end.line
    if rule.max_lines_between is not None and end_line > start_line + rule.max_lines_between:
        logger.debug(
            "Block %r..%r at line %d ends %d lines later, limit is %d",
            rule.start_pattern.source,
            rule.end_pattern.source,
            start_line,
            end_line - start_line,
            rule.max_lines_between,
        )
        return None
    if rule.same_scope and _blank_line_between(document, start_line, end_line):
        return None
    return connect_ranges(start_match, end_match)


def scan(document: Document, window: Range, rule: Rule) -> MatchResult | None:
    """Evaluate ``rule`` inside ``window`` and tag the hit with the rule's tier."""
    if isinstance(rule, FragmentRule):
        found = scan_for_pattern(document, window, rule.pattern)
    elif isinstance(rule, BlockRule):
        found = _scan_block(document, window, rule)
    else:
        raise TypeError(f"unsupported rule type: {type(rule).__name__}")
    if found is None:
        return None
    return MatchResult(range=found, tier=rule.tier)
