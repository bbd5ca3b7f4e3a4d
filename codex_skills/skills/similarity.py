"""Fuzzy whole-string similarity between a query and short skill fields."""
from rapidfuzz.distance import JaroWinkler

# Winkler scaling factor; the common prefix is capped at 4 characters by the algorithm.
PREFIX_WEIGHT = 0.1


def similarity(a: str, b: str) -> float:
    """Jaro-Winkler similarity in [0, 1] for two normalized strings.

    1.0 for identical non-empty input, 0.0 when no characters match inside the Jaro
    window. An empty string has nothing to match, so it scores 0.0 against anything.
    """
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    return JaroWinkler.normalized_similarity(a, b, prefix_weight=PREFIX_WEIGHT)
