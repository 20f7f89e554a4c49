"""
"Did you mean" ranking for unknown function names.
"""

from typing import Iterable, List, Tuple

MAX_SUGGESTION_DISTANCE = 3
MAX_SUGGESTIONS = 3


def levenshtein_distance(s1: str, s2: str) -> int:
    """
    Minimum number of single-character insertions, deletions or
    substitutions needed to turn ``s1`` into ``s2``.
    """
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    # Two rows are enough for the DP table
    previous_row = list(range(len(s2) + 1))

    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def suggest_similar(
    name: str,
    candidates: Iterable[str],
    max_distance: int = MAX_SUGGESTION_DISTANCE,
    max_suggestions: int = MAX_SUGGESTIONS,
) -> List[str]:
    """
    Return up to ``max_suggestions`` candidates within ``max_distance`` edits
    of ``name``, closest first.  Equal distances keep candidate order.
    """
    scored: List[Tuple[int, int, str]] = []
    for order, candidate in enumerate(candidates):
        distance = levenshtein_distance(name, candidate)
        if distance <= max_distance:
            scored.append((distance, order, candidate))

    scored.sort()
    return [candidate for _, _, candidate in scored[:max_suggestions]]
