"""Case-insensitive edit distance."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein


def edit_distance(a: str, b: str, score_cutoff: int | None = None) -> int:
    """Unit-cost Levenshtein distance between ``a`` and ``b``, ignoring case.

    When ``score_cutoff`` is given and the true distance exceeds it, the
    return value is ``score_cutoff + 1`` rather than the exact distance.
    """
    return Levenshtein.distance(a.lower(), b.lower(), score_cutoff=score_cutoff)
