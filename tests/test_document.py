from __future__ import annotations

import unittest

from lowlight.document import Position, Range, TextDocument, connect_ranges
from lowlight.errors import LineUnavailable


class RangeTests(unittest.TestCase):
    def test_reversed_positions_are_swapped(self) -> None:
        rng = Range(Position(4, 2), Position(1, 0))

        self.assertEqual(rng.start, Position(1, 0))
        self.assertEqual(rng.end, Position(4, 2))

    def test_intersection_of_overlapping_ranges(self) -> None:
        visible = Range.from_lines(5, 20)
        ceiling = Range.from_lines(0, 10)

        self.assertEqual(visible.intersection(ceiling), Range.from_lines(5, 10))

    def test_intersection_of_disjoint_ranges_is_none(self) -> None:
        self.assertIsNone(Range.from_lines(11, 20).intersection(Range.from_lines(0, 10)))

    def test_connect_ranges_spans_start_of_first_to_end_of_second(self) -> None:
        connected = connect_ranges(Range.on_line(2, 3, 8), Range.on_line(5, 0, 3))

        self.assertEqual(connected, Range(Position(2, 3), Position(5, 3)))
        self.assertFalse(connected.is_single_line)


class TextDocumentTests(unittest.TestCase):
    def test_from_text_keeps_trailing_empty_line(self) -> None:
        doc = TextDocument.from_text("a\nb\n")

        self.assertEqual(doc.lines, ("a", "b", ""))
        self.assertEqual(doc.line_count(), 3)

    def test_line_text_out_of_range_raises_line_unavailable(self) -> None:
        doc = TextDocument(["only"])

        with self.assertRaises(LineUnavailable) as ctx:
            doc.line_text(3)
        self.assertEqual(ctx.exception.line, 3)
        self.assertEqual(ctx.exception.line_count, 1)

    def test_offsets_and_positions_convert_both_ways(self) -> None:
        doc = TextDocument(["foo", "barbaz", ""])

        self.assertEqual(doc.offset_at(Position(1, 2)), 6)
        self.assertEqual(doc.position_at(6), Position(1, 2))
        self.assertEqual(doc.position_at(4), Position(1, 0))
        self.assertEqual(doc.position_at(3), Position(0, 3))

    def test_offsets_are_clamped_to_document_bounds(self) -> None:
        doc = TextDocument(["foo", "bar"])

        self.assertEqual(doc.offset_at(Position(0, 99)), 3)
        self.assertEqual(doc.offset_at(Position(9, 0)), 7)
        self.assertEqual(doc.position_at(-5), Position(0, 0))
        self.assertEqual(doc.position_at(100), Position(1, 3))


if __name__ == "__main__":
    unittest.main()
