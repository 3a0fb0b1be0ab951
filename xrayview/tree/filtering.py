"""Pruned tree projections for text filter queries.

Two local strategies exist: a case-insensitive regex tried against each path
segment, and a fuzzy subsequence match against the whole path. Label-selector
queries are never applied here; the watch source evaluates them.

User regexes run on the ``regex`` engine with a per-search timeout, so a
pathological pattern costs one bounded search instead of stalling the UI.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import lru_cache

import regex

from ..search.fuzzy import fuzzy_find
from .types import PATH_SEPARATOR, DomainNode

logger = logging.getLogger(__name__)

LABEL_SELECTOR_PREFIX = "-l"
FUZZY_SELECTOR_PREFIX = "-f"
MATCH_TIMEOUT_SECONDS = 0.05

Matcher = Callable[[str], bool]
ErrorSink = Callable[[str], None]


def is_label_selector(query: str) -> bool:
    """Return whether ``query`` is meant for the watch source's label selector."""
    return query.startswith(LABEL_SELECTOR_PREFIX)


def is_fuzzy_selector(query: str) -> bool:
    return query.startswith(FUZZY_SELECTOR_PREFIX)


def trim_selector(query: str) -> str:
    """Drop the two-character strategy prefix and surrounding whitespace."""
    return query[2:].strip()


@lru_cache(maxsize=64)
def _compile_segment_rx(query: str) -> regex.Pattern:
    return regex.compile(query, regex.IGNORECASE)


def segment_matcher(query: str) -> Matcher:
    """Build a predicate matching ``query`` against any single path segment.

    Raises ``regex.error`` for a malformed expression. The predicate raises
    ``TimeoutError`` when one segment search exceeds ``MATCH_TIMEOUT_SECONDS``.
    """
    rx = _compile_segment_rx(query)

    def matches(path: str) -> bool:
        return any(
            rx.search(token, timeout=MATCH_TIMEOUT_SECONDS) is not None for token in path.split(PATH_SEPARATOR)
        )

    return matches


def fuzzy_matcher(query: str) -> Matcher:
    """Build a predicate fuzzy-matching the prefix-stripped ``query`` against the full path."""
    needle = trim_selector(query)

    def matches(path: str) -> bool:
        return len(fuzzy_find(needle, [path])) > 0

    return matches


def _report(query: str, exc: Exception, on_error: ErrorSink | None) -> None:
    if isinstance(exc, TimeoutError):
        message = f"Filter {query!r} is too expensive to match"
    else:
        message = f"Invalid filter {query!r}: {exc}"
    logger.warning("%s", message)
    if on_error is not None:
        on_error(message)


def filter_tree(
    root: DomainNode | None,
    query: str,
    matches: Matcher,
    on_error: ErrorSink | None = None,
) -> DomainNode | None:
    """Return a pruned copy of ``root`` keeping matches and their ancestors.

    The root is always kept, so a query with no hits yields a childless root
    rather than ``None``. ``None`` comes back only when there is no snapshot.
    Empty and label-selector queries return ``root`` unchanged. A matcher that
    fails (bad expression, timeout) is reported to ``on_error`` and counts as
    no hits at all.
    """
    if root is None:
        return None
    if not query or is_label_selector(query):
        return root

    def keep(node: DomainNode) -> DomainNode | None:
        kept_children = [kept for kept in (keep(child) for child in node.children) if kept is not None]
        if not kept_children and not matches(node.path):
            return None
        clone = node.shallow_copy()
        for child in kept_children:
            clone.add_child(child)
        return clone

    pruned = root.shallow_copy()
    try:
        for child in root.children:
            kept = keep(child)
            if kept is not None:
                pruned.add_child(kept)
    except (regex.error, TimeoutError) as exc:
        _report(query, exc, on_error)
        return root.shallow_copy()
    return pruned


def filter_for_query(
    root: DomainNode | None,
    query: str,
    on_error: ErrorSink | None = None,
) -> DomainNode | None:
    """Filter ``root`` with the strategy implied by the query prefix."""
    if root is None or not query or is_label_selector(query):
        return root
    if is_fuzzy_selector(query):
        return filter_tree(root, query, fuzzy_matcher(query), on_error)
    try:
        matcher = segment_matcher(query)
    except regex.error as exc:
        _report(query, exc, on_error)
        return root.shallow_copy()
    return filter_tree(root, query, matcher, on_error)
