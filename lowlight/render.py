"""Overlay tier styles onto ANSI-rendered source lines.

Ranges use plain-text character offsets. The helpers here map those offsets
onto visible characters of an already colorized line, keep the existing
escape sequences intact, and recolor the covered characters with the tier's
gray. Where styles overlap the tier applied last wins.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence

from .classifier import TieredRangeSet
from .decorations import Decoration
from .document import Range
from .rules import TIER_ORDER, Tier

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
_RESET_PARAMS = {"", "0", "00", "39"}

GRAY_RAMP_START = 232
GRAY_RAMP_STEPS = 23


def tier_sgr(opacity: float) -> str:
    """Map an opacity in ``[0, 1]`` to a 256-color gray foreground SGR parameter."""
    clamped = max(0.0, min(1.0, opacity))
    return f"38;5;{GRAY_RAMP_START + round(clamped * GRAY_RAMP_STEPS)}"


def tier_styles(opacities: Mapping[Tier, float]) -> dict[Tier, str]:
    return {tier: tier_sgr(opacities[tier]) for tier in TIER_ORDER}


def line_span(line_idx: int, line_length: int, rng: Range) -> tuple[int, int] | None:
    """Project ``rng`` onto one line as a ``[start, end)`` character span.

    Multi-line ranges cover the tail of their first line, whole middle lines,
    and the head of their last line. Empty projections return ``None``.
    """
    if line_idx < rng.start.line or line_idx > rng.end.line:
        return None

    if rng.start.line == rng.end.line:
        start = rng.start.character
        end = rng.end.character
    elif line_idx == rng.start.line:
        start = rng.start.character
        end = line_length
    elif line_idx == rng.end.line:
        start = 0
        end = rng.end.character
    else:
        start = 0
        end = line_length

    start = max(0, min(start, line_length))
    end = max(start, min(end, line_length))
    if end <= start:
        return None
    return start, end


def line_spans(
    line_idx: int,
    line_length: int,
    tiered: TieredRangeSet,
    styles: Mapping[Tier, str],
) -> list[tuple[int, int, str]]:
    """Collect styled spans for one line in tier apply order."""
    spans: list[tuple[int, int, str]] = []
    for tier, ranges in tiered.items():
        for rng in ranges:
            span = line_span(line_idx, line_length, rng)
            if span is not None:
                spans.append((span[0], span[1], styles[tier]))
    return spans


def _is_reset(params: str) -> bool:
    return any(part in _RESET_PARAMS for part in params.split(";"))


def apply_line_styles(text: str, spans: Sequence[tuple[int, int, str]]) -> str:
    """Recolor visible characters of ANSI ``text`` covered by ``spans``.

    Existing SGR sequences are kept. Inside a styled run the overlay is
    re-applied after each of them; when a run ends, the line's own active
    styling is restored.
    """
    if not text or not spans:
        return text

    visible_count = len(ANSI_ESCAPE_RE.sub("", text))
    overlay: list[str | None] = [None] * visible_count
    for start, end, sgr in spans:
        for idx in range(max(0, start), min(end, visible_count)):
            overlay[idx] = sgr

    out: list[str] = []
    active: list[str] = []
    current: str | None = None
    visible_idx = 0
    idx = 0
    while idx < len(text):
        if text[idx] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, idx)
            if match is not None:
                seq = match.group(0)
                out.append(seq)
                if seq.endswith("m"):
                    if _is_reset(seq[2:-1]):
                        active.clear()
                    else:
                        active.append(seq)
                    if current is not None:
                        out.append(f"\033[{current}m")
                idx = match.end()
                continue

        wanted = overlay[visible_idx] if visible_idx < visible_count else None
        if wanted != current:
            if wanted is None:
                out.append("\033[39m")
                out.extend(active)
            else:
                out.append(f"\033[{wanted}m")
            current = wanted
        out.append(text[idx])
        visible_idx += 1
        idx += 1

    if current is not None:
        out.append("\033[39m")
    return "".join(out)


def render_lines(
    plain_lines: Sequence[str],
    ansi_lines: Sequence[str],
    line_indices: Iterable[int],
    tiered: TieredRangeSet,
    styles: Mapping[Tier, str],
) -> list[str]:
    """Render the requested document lines with tier styles applied.

    A line whose colorized form is missing falls back to its plain text.
    """
    out: list[str] = []
    for line_idx in line_indices:
        if line_idx < 0 or line_idx >= len(plain_lines):
            continue
        plain = plain_lines[line_idx]
        base = ansi_lines[line_idx] if line_idx < len(ansi_lines) else plain
        if len(ANSI_ESCAPE_RE.sub("", base)) != len(plain):
            base = plain
        spans = line_spans(line_idx, len(plain), tiered, styles)
        out.append(apply_line_styles(base, spans))
    return out


def terminal_decoration(tier: Tier, opacity: float) -> Decoration:
    """Decoration factory for terminal output: the style is an SGR parameter."""
    return Decoration(tier=tier, opacity=opacity, style=tier_sgr(opacity))
