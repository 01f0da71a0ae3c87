"""Command-line front door for lowlight.

Loads a file, evaluates the configured rules over the requested viewport, and
prints the viewport with matched ranges de-emphasized (or the ranges as JSON).
``--watch`` keeps re-rendering as the file changes, debouncing bursts of
writes.
"""

from __future__ import annotations

import argparse
import json
import logging
import shutil
import sys
import time
from collections.abc import Callable, Hashable
from dataclasses import replace
from pathlib import Path
from typing import TextIO

from .classifier import TieredRangeSet
from .config import LowlightConfig, load_lowlight_config
from .decorations import Decoration, DecorationRegistry
from .document import Range, TextDocument
from .engine import evaluate_config
from .render import render_lines, terminal_decoration
from .rules import Tier
from .schedule import Debouncer
from .syntax import DEFAULT_STYLE, colorize_source, language_id_for_path, read_text, sanitize_terminal_text
from .viewport import bound_to_document, parse_line_span

logger = logging.getLogger(__name__)

WATCH_POLL_SECONDS = 0.1
WATCH_DEBOUNCE_SECONDS = 0.25
CLEAR_SCREEN = "\033[H\033[2J"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _nonnegative_int(value: str) -> int:
    """argparse type for integer values >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def _line_span(value: str) -> Range:
    """argparse type for ``START:END`` viewport spans."""
    try:
        return parse_line_span(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _default_viewport() -> list[Range]:
    """Top of the file, one terminal screen tall."""
    rows = shutil.get_terminal_size((80, 24)).lines
    return [Range.from_lines(0, max(0, rows - 1))]


def _path_signature(path: Path) -> tuple[str, int, int]:
    """Return a stat tuple that changes whenever ``path`` is rewritten."""
    try:
        st = path.stat()
    except FileNotFoundError:
        return ("missing", 0, 0)
    except OSError:
        return ("error", 0, 0)
    return ("ok", st.st_mtime_ns, st.st_size)


class LowlightView:
    """One file shown in the terminal, re-rendered on demand.

    The view id in the decoration registry is the resolved path.
    """

    def __init__(
        self,
        path: Path,
        registry: DecorationRegistry,
        *,
        config_path: Path | None = None,
        max_lines_to_scan: int | None = None,
        viewport: list[Range] | None = None,
        style: str = DEFAULT_STYLE,
        no_color: bool = False,
    ) -> None:
        self.path = path
        self.view_id = path.resolve()
        self.registry = registry
        self.config_path = config_path
        self.max_lines_to_scan = max_lines_to_scan
        self.viewport = viewport if viewport else _default_viewport()
        self.style = style
        self.no_color = no_color

    def load_config(self) -> LowlightConfig:
        config = load_lowlight_config(self.config_path, language_id_for_path(self.path))
        if self.max_lines_to_scan is not None:
            config = replace(config, max_lines_to_scan=self.max_lines_to_scan)
        return config

    def evaluate(self) -> tuple[str, TextDocument, LowlightConfig, TieredRangeSet]:
        source = sanitize_terminal_text(read_text(self.path))
        document = TextDocument.from_text(source)
        config = self.load_config()
        # Editor viewports never extend past the document; terminal ones can.
        viewport = bound_to_document(self.viewport, document.line_count())
        return source, document, config, evaluate_config(document, viewport, config)

    def ranges_json(self) -> str:
        _source, _document, _config, tiered = self.evaluate()
        return json.dumps(tiered.to_json())

    def render(self) -> str:
        """Evaluate and render every viewport section, separated by a rule line."""
        source, document, config, tiered = self.evaluate()
        if self.no_color:
            ansi_lines: list[str] = list(document.lines)
        else:
            ansi_lines = colorize_source(source, self.path, self.style).splitlines()

        styles: dict[Tier, str] = {}

        def collect(decoration: Decoration, ranges: list[Range]) -> None:
            styles[decoration.tier] = decoration.style

        self.registry.apply(self.view_id, tiered, config.opacities, collect)

        sections: list[str] = []
        for window in self.viewport:
            lines = render_lines(
                document.lines,
                ansi_lines,
                range(window.start.line, window.end.line + 1),
                tiered,
                styles,
            )
            sections.append("".join(f"{line}\033[0m\n" for line in lines))
        width = shutil.get_terminal_size((80, 24)).columns
        return f"\033[2m{'─' * max(1, width)}\033[0m\n".join(sections)

    def close(self) -> None:
        self.registry.forget(self.view_id)


def watch(
    view: LowlightView,
    out: TextIO,
    *,
    poll_seconds: float = WATCH_POLL_SECONDS,
    debounce_seconds: float = WATCH_DEBOUNCE_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    monotonic: Callable[[], float] = time.monotonic,
    max_iterations: int | None = None,
) -> None:
    """Re-render ``view`` whenever its file changes, until interrupted."""

    def redraw(_key: Hashable, _payload: object) -> None:
        try:
            rendered = view.render()
        except OSError as exc:
            logger.warning("Cannot render %s: %s", view.path, exc)
            return
        out.write(CLEAR_SCREEN + rendered)
        out.flush()

    debouncer = Debouncer(debounce_seconds, redraw, monotonic=monotonic)
    signature = _path_signature(view.path)
    redraw(view.view_id, None)
    iterations = 0
    try:
        while max_iterations is None or iterations < max_iterations:
            iterations += 1
            current = _path_signature(view.path)
            if current != signature:
                signature = current
                debouncer.trigger(view.view_id)
            debouncer.poll()
            sleep(poll_seconds)
    except KeyboardInterrupt:
        pass
    finally:
        view.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lowlight",
        description="Print a file viewport with configured text patterns de-emphasized.",
    )
    parser.add_argument("path", help="Path to file.")
    parser.add_argument(
        "--viewport",
        metavar="START:END",
        type=_line_span,
        action="append",
        default=None,
        help="Zero-based inclusive line span to show; repeat for a split view (default: first screen).",
    )
    parser.add_argument("--config", type=Path, default=None, help="Config JSON file (default: user config dir).")
    parser.add_argument(
        "--max-lines-to-scan",
        type=_nonnegative_int,
        default=None,
        help="Override the configured line ceiling.",
    )
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name.")
    parser.add_argument("--no-color", action="store_true", help="Disable syntax colors; lowlight styles still apply.")
    parser.add_argument("--json", action="store_true", help="Print matched ranges per tier as JSON and exit.")
    parser.add_argument("--watch", action="store_true", help="Re-render whenever the file changes.")
    parser.add_argument(
        "--poll-interval",
        type=_positive_int,
        default=None,
        metavar="MS",
        help="Watch poll interval in milliseconds.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log diagnostics to stderr.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and render, print JSON, or watch ``path``."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    path = Path(args.path)
    if not path.is_file():
        raise SystemExit(f"File not found: {path}")

    registry = DecorationRegistry(terminal_decoration)
    view = LowlightView(
        path,
        registry,
        config_path=args.config,
        max_lines_to_scan=args.max_lines_to_scan,
        viewport=args.viewport,
        style=args.style,
        no_color=args.no_color,
    )

    if args.json:
        sys.stdout.write(view.ranges_json() + "\n")
        return

    if args.watch:
        poll_seconds = args.poll_interval / 1000.0 if args.poll_interval else WATCH_POLL_SECONDS
        watch(view, sys.stdout, poll_seconds=poll_seconds)
        return

    sys.stdout.write(view.render())
    view.close()


if __name__ == "__main__":
    main()
