from __future__ import annotations

import contextlib
import io
import json
import re
import tempfile
import unittest
from pathlib import Path

from lowlight.cli import CLEAR_SCREEN, LowlightView, main, watch
from lowlight.decorations import DecorationRegistry
from lowlight.document import Range
from lowlight.render import terminal_decoration

ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")

CONFIG = {
    "rules": [
        {"rule": "TODO", "tier": "max"},
        {"rule": "FIXME", "tier": "min"},
        {"startRule": "BEGIN", "endRule": "END", "tier": "mid"},
        "[broken",
    ],
}


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        root = Path(self._tmp.name)
        self.config_path = root / "config.json"
        self.config_path.write_text(json.dumps(CONFIG), encoding="utf-8")
        self.path = root / "notes.txt"
        self.path.write_text("foo TODO bar\nbaz\nqux FIXME end\nBEGIN\nx\nEND\n", encoding="utf-8")

    def _run(self, *argv: str) -> str:
        out = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(io.StringIO()):
            main([*argv])
        return out.getvalue()

    def test_json_output_lists_ranges_per_tier(self) -> None:
        output = self._run("--json", "--config", str(self.config_path), "--viewport", "0:6", str(self.path))

        self.assertEqual(
            json.loads(output),
            {"max": [[0, 4, 0, 8]], "mid": [[3, 0, 5, 3]], "min": [[2, 4, 2, 9]]},
        )

    def test_ceiling_override_limits_scan(self) -> None:
        output = self._run(
            "--json",
            "--config",
            str(self.config_path),
            "--viewport",
            "0:6",
            "--max-lines-to-scan",
            "1",
            str(self.path),
        )

        self.assertEqual(json.loads(output), {"max": [[0, 4, 0, 8]], "mid": [], "min": []})

    def test_render_styles_matches_and_keeps_text(self) -> None:
        output = self._run(
            "--no-color",
            "--config",
            str(self.config_path),
            "--viewport",
            "0:2",
            str(self.path),
        )

        self.assertEqual(ANSI_RE.sub("", output).splitlines(), ["foo TODO bar", "baz", "qux FIXME end"])
        self.assertIn("\x1b[38;5;239mTODO", output)

    def test_split_viewport_renders_each_section(self) -> None:
        output = self._run(
            "--no-color",
            "--config",
            str(self.config_path),
            "--viewport",
            "0:0",
            "--viewport",
            "2:2",
            str(self.path),
        )

        lines = ANSI_RE.sub("", output).splitlines()
        self.assertEqual(lines[0], "foo TODO bar")
        self.assertEqual(lines[-1], "qux FIXME end")
        self.assertEqual(len(lines), 3)

    def test_viewport_past_end_of_short_file_logs_nothing(self) -> None:
        self.config_path.write_text(json.dumps({"rules": ["TODO", "FIXME"]}), encoding="utf-8")
        self.path.write_text("a TODO\nb FIXME\n", encoding="utf-8")

        with self.assertNoLogs("lowlight", level="WARNING"):
            output = self._run(
                "--no-color",
                "--config",
                str(self.config_path),
                "--viewport",
                "0:23",
                str(self.path),
            )

        self.assertEqual(ANSI_RE.sub("", output).splitlines(), ["a TODO", "b FIXME", ""])

    def test_json_ranges_for_oversized_viewport(self) -> None:
        view = LowlightView(
            self.path,
            DecorationRegistry(terminal_decoration),
            config_path=self.config_path,
            viewport=[Range.from_lines(0, 40)],
        )

        with self.assertNoLogs("lowlight.scanner", level="WARNING"):
            output = view.ranges_json()

        self.assertEqual(
            json.loads(output),
            {"max": [[0, 4, 0, 8]], "mid": [[3, 0, 5, 3]], "min": [[2, 4, 2, 9]]},
        )

    def test_missing_file_exits(self) -> None:
        with self.assertRaises(SystemExit):
            self._run(str(Path(self._tmp.name) / "absent.txt"))

    def test_bad_viewport_is_an_argument_error(self) -> None:
        with self.assertRaises(SystemExit):
            self._run("--viewport", "nope", str(self.path))

    def test_watch_rerenders_after_file_change(self) -> None:
        registry = DecorationRegistry(terminal_decoration)
        view = LowlightView(
            self.path,
            registry,
            config_path=self.config_path,
            viewport=[Range.from_lines(0, 2)],
            no_color=True,
        )
        clock = [0.0]
        sleeps: list[float] = []

        def sleep(seconds: float) -> None:
            sleeps.append(seconds)
            clock[0] += seconds
            if len(sleeps) == 1:
                self.path.write_text("changed TODO line\n", encoding="utf-8")

        out = io.StringIO()
        watch(
            view,
            out,
            poll_seconds=0.1,
            debounce_seconds=0.25,
            sleep=sleep,
            monotonic=lambda: clock[0],
            max_iterations=6,
        )

        frames = out.getvalue().split(CLEAR_SCREEN)[1:]
        self.assertEqual(len(frames), 2)
        self.assertIn("foo TODO bar", ANSI_RE.sub("", frames[0]))
        self.assertIn("changed TODO line", ANSI_RE.sub("", frames[1]))
        self.assertNotIn(view.view_id, registry)


if __name__ == "__main__":
    unittest.main()
