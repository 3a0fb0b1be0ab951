"""Tests for ordered-subsequence fuzzy matching and ranking."""

from __future__ import annotations

import unittest
from unittest import mock

from xrayview.search import fuzzy, fuzzy_find, fuzzy_positions, fuzzy_score


class FuzzyMatchingTests(unittest.TestCase):
    def test_positions_are_leftmost_and_case_insensitive(self) -> None:
        self.assertEqual(fuzzy_positions("WB", "default/web"), (8, 10))
        self.assertIsNone(fuzzy_positions("bw", "default/web"))

    def test_empty_query_matches_nothing(self) -> None:
        self.assertEqual(fuzzy_find("", ["default/web"]), [])

    def test_non_subsequence_scores_none(self) -> None:
        self.assertIsNone(fuzzy_score("xyz", "default/web"))

    def test_contiguous_boundary_hits_rank_first(self) -> None:
        candidates = ["default/wxexb", "default/web", "kube-system/coredns"]

        matches = fuzzy_find("web", candidates)

        self.assertEqual([match.text for match in matches], ["default/web", "default/wxexb"])
        self.assertEqual(matches[0].index, 1)

    def test_ties_prefer_shorter_then_earlier(self) -> None:
        matches = fuzzy_find("web", ["b/web", "a/web", "ns/web"])

        self.assertEqual([match.index for match in matches], [0, 1, 2])

    def test_find_scans_each_candidate_once_and_agrees_with_score(self) -> None:
        candidates = ["default/web", "default/web-7d9", "kube-system/coredns-55"]

        with mock.patch.object(fuzzy, "fuzzy_positions", wraps=fuzzy.fuzzy_positions) as positions:
            matches = fuzzy_find("web", candidates)

        self.assertEqual(positions.call_count, len(candidates))
        for match in matches:
            self.assertEqual(match.score, fuzzy_score("web", match.text))

    def test_limit_caps_results(self) -> None:
        matches = fuzzy_find("a", [f"ns/a{i}" for i in range(10)], limit=3)

        self.assertEqual(len(matches), 3)


if __name__ == "__main__":
    unittest.main()
