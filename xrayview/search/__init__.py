"""Text matching helpers used by the tree filter."""

from .fuzzy import FuzzyMatch, fuzzy_find, fuzzy_positions, fuzzy_score

__all__ = ["FuzzyMatch", "fuzzy_find", "fuzzy_positions", "fuzzy_score"]
