"""Tests for width-aware clipping of styled rows."""

from __future__ import annotations

import unittest

from xrayview.ansi import cell_width, clip_ansi_line


class ClipAnsiLineTests(unittest.TestCase):
    def test_plain_text_is_cut_at_column_limit(self) -> None:
        self.assertEqual(clip_ansi_line("├─ [pods] web-7d9-abc", 8), "├─ [pods")

    def test_escapes_do_not_count_and_trailing_reset_survives(self) -> None:
        row = "\x1b[38;5;81mcoredns-55\x1b[0m"

        self.assertEqual(clip_ansi_line(row, 4), "\x1b[38;5;81mcore\x1b[0m")

    def test_wide_icon_is_not_split(self) -> None:
        self.assertEqual(cell_width("🚛"), 2)
        self.assertEqual(clip_ansi_line("🚛 web", 1), "")
        self.assertEqual(clip_ansi_line("🚛 web", 3), "🚛 ")

    def test_tabs_render_as_single_space(self) -> None:
        self.assertEqual(clip_ansi_line("a\tb", 10), "a b")

    def test_non_positive_width_yields_empty_row(self) -> None:
        self.assertEqual(clip_ansi_line("anything", 0), "")


if __name__ == "__main__":
    unittest.main()
