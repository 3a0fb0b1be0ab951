"""Ordered-subsequence fuzzy matching over resource paths."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

WORD_BOUNDARIES = "/_-. "


@dataclass(frozen=True)
class FuzzyMatch:
    """One fuzzy hit: candidate index, text, score, and matched positions."""

    index: int
    text: str
    score: int
    positions: tuple[int, ...]


def fuzzy_positions(query: str, candidate: str) -> tuple[int, ...] | None:
    """Return the leftmost case-insensitive subsequence positions, or ``None``."""
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()
    positions: list[int] = []
    prev_idx = -1
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        positions.append(idx)
        prev_idx = idx
    return tuple(positions)


def fuzzy_score(query: str, candidate: str) -> int | None:
    """Score ``candidate`` against ``query``; ``None`` means no match.

    Consecutive runs and hits right after a path/word boundary score higher,
    gaps and long candidates score lower.
    """
    if not query:
        return 0
    positions = fuzzy_positions(query, candidate)
    if positions is None:
        return None
    return _score_positions(positions, candidate)


def _score_positions(positions: tuple[int, ...], candidate: str) -> int:
    candidate_folded = candidate.casefold()
    score = 0
    prev_idx = -1
    run = 0
    for idx in positions:
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in WORD_BOUNDARIES:
            score += 35
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score


def fuzzy_find(query: str, candidates: Sequence[str], limit: int = 200) -> list[FuzzyMatch]:
    """Return fuzzy hits for ``query`` best first.

    An empty query matches nothing; ties keep shorter, then earlier, candidates.
    """
    if not query:
        return []
    scored: list[FuzzyMatch] = []
    for idx, candidate in enumerate(candidates):
        positions = fuzzy_positions(query, candidate)
        if positions is None:
            continue
        score = _score_positions(positions, candidate)
        scored.append(FuzzyMatch(index=idx, text=candidate, score=score, positions=positions))
    scored.sort(key=lambda item: (-item.score, len(item.text), item.index))
    return scored[: max(1, limit)]
