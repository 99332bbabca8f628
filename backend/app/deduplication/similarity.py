"""Edit-distance similarity for provider names."""

from __future__ import annotations

import math

from rapidfuzz.distance import Levenshtein


def name_similarity(left: str, right: str) -> int:
    """Return the Levenshtein similarity of two strings as an integer percentage.

    Inputs are case-folded and trimmed. Two empty strings are 100% similar.
    Halves round up.
    """

    norm_left = left.casefold().strip()
    norm_right = right.casefold().strip()
    if norm_left == norm_right:
        return 100
    max_length = max(len(norm_left), len(norm_right))
    distance = Levenshtein.distance(norm_left, norm_right)
    return math.floor((1 - distance / max_length) * 100 + 0.5)
