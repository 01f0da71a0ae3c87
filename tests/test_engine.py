"""End-to-end engine tests over in-memory documents."""

from __future__ import annotations

import unittest

from lowlight.config import LowlightConfig, parse_rules
from lowlight.document import Position, Range, TextDocument
from lowlight.engine import evaluate, evaluate_config
from lowlight.patterns import compile_pattern
from lowlight.rules import FragmentRule, Tier


class EvaluateTests(unittest.TestCase):
    def test_fragment_rules_land_in_their_tiers(self) -> None:
        doc = TextDocument(["foo TODO bar", "baz", "qux FIXME end"])
        rules = [
            FragmentRule(compile_pattern("TODO"), Tier.MAX),
            FragmentRule(compile_pattern("FIXME"), Tier.MIN),
        ]

        tiered = evaluate(doc, [Range.from_lines(0, 2)], rules, 1000)

        self.assertEqual(tiered[Tier.MAX], [Range.on_line(0, 4, 8)])
        self.assertEqual(tiered[Tier.MID], [])
        self.assertEqual(tiered[Tier.MIN], [Range.on_line(2, 4, 9)])

    def test_no_rules_yields_all_tiers_empty(self) -> None:
        tiered = evaluate(TextDocument(["TODO"]), [Range.from_lines(0, 0)], [], 1000)

        self.assertTrue(tiered.is_empty())
        self.assertEqual(set(tiered.queues), {Tier.MAX, Tier.MID, Tier.MIN})

    def test_invalid_rule_does_not_block_valid_rules(self) -> None:
        with self.assertLogs("lowlight.config", level="WARNING"):
            rules = parse_rules(["[unclosed", {"rule": "TODO", "tier": "max"}])

        tiered = evaluate(TextDocument(["a TODO"]), [Range.from_lines(0, 0)], rules, 1000)

        self.assertEqual(len(rules), 1)
        self.assertEqual(tiered[Tier.MAX], [Range.on_line(0, 2, 6)])

    def test_results_follow_rule_order_then_window_order(self) -> None:
        doc = TextDocument(["b a", "x", "a b"])
        rules = [
            FragmentRule(compile_pattern("a"), Tier.MID),
            FragmentRule(compile_pattern("b"), Tier.MID),
        ]
        viewport = [Range.from_lines(2, 2), Range.from_lines(0, 0)]

        tiered = evaluate(doc, viewport, rules, 1000)

        self.assertEqual(
            tiered[Tier.MID],
            [
                Range.on_line(2, 0, 1),
                Range.on_line(0, 2, 3),
                Range.on_line(2, 2, 3),
                Range.on_line(0, 0, 1),
            ],
        )

    def test_viewport_past_ceiling_scans_top_of_document(self) -> None:
        lines = ["TODO top"] + [f"line {idx}" for idx in range(1, 50)]
        rules = [FragmentRule(compile_pattern("TODO"), Tier.MID)]

        tiered = evaluate(TextDocument(lines), [Range.from_lines(40, 49)], rules, 10)

        self.assertEqual(tiered[Tier.MID], [Range.on_line(0, 0, 4)])

    def test_block_rule_from_config_spans_lines(self) -> None:
        doc = TextDocument(["x", "/* start", "inside", "end */", "y"])
        config = LowlightConfig.from_mapping({"rules": [[r"/\*", r"\*/"]], "defaultTier": "min"})

        tiered = evaluate_config(doc, [Range.from_lines(0, 4)], config)

        self.assertEqual(tiered[Tier.MIN], [Range(Position(1, 0), Position(3, 6))])

    def test_repeated_evaluation_is_identical(self) -> None:
        doc = TextDocument(["foo TODO", "BEGIN", "a", "END", "FIXME"])
        config = LowlightConfig.from_mapping(
            {"rules": ["TODO", ["BEGIN", "END"], {"rule": "FIXME", "tier": "max"}]}
        )
        viewport = [Range.from_lines(0, 4), Range.from_lines(2, 3)]

        first = evaluate_config(doc, viewport, config)
        second = evaluate_config(doc, viewport, config)

        self.assertEqual(first, second)
        self.assertEqual(first.to_json(), second.to_json())


if __name__ == "__main__":
    unittest.main()
