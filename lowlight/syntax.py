"""Source loading, sanitization, and Pygments colorizing for the terminal host.

Also resolves the language id used to pick ``"[language]"`` config sections.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

from pygments import highlight as pygments_highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1; as a final fallback decodes
    raw bytes with UTF-8 replacement semantics.
    """
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


@lru_cache(maxsize=64)
def _normalize_style(style: str) -> str:
    """Validate a Pygments style name, falling back to ``DEFAULT_STYLE``."""
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


@lru_cache(maxsize=16)
def _formatter_for_style(style: str) -> TerminalFormatter:
    return TerminalFormatter(style=style)


def _lexer_for(path: Path, source: str):
    # Leading/trailing blank lines must survive so line indices stay aligned.
    try:
        return get_lexer_for_filename(path.name, source, stripnl=False)
    except ClassNotFound:
        return TextLexer(stripnl=False)


def language_id_for_path(path: Path) -> str | None:
    """Return Pygments' primary alias for ``path`` (e.g. ``"python"``), if any."""
    try:
        lexer = get_lexer_for_filename(path.name)
    except ClassNotFound:
        return None
    return lexer.aliases[0] if lexer.aliases else None


def colorize_source(source: str, path: Path, style: str = DEFAULT_STYLE) -> str:
    """Colorize ``source`` as ANSI text.

    Line structure is preserved: the output has the same number of lines as
    the input, so line indices stay aligned with the document.
    """
    formatter = _formatter_for_style(_normalize_style(style))
    rendered = pygments_highlight(source, _lexer_for(path, source), formatter)
    # Pygments always terminates output with a newline.
    if not source.endswith("\n") and rendered.endswith("\n"):
        rendered = rendered[:-1]
    return rendered
