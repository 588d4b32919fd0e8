"""Similarity normalization and confidence tiers."""

from __future__ import annotations

from rplmatch.config import Thresholds
from rplmatch.distance import edit_distance
from rplmatch.types import Tier

_DEFAULT_THRESHOLDS = Thresholds()


def similarity_from_distance(a: str, b: str, distance: int) -> float:
    """Normalize an edit distance into [0, 1] by the longer string's length.

    Lengths are taken from the lower-cased copies the distance was computed
    on, since some characters expand when lower-cased ("İ" becomes two code
    points). Two empty strings are a perfect match.
    """
    max_len = max(len(a.lower()), len(b.lower()))
    if max_len == 0:
        return 1.0
    return (max_len - distance) / max_len


def similarity(a: str, b: str) -> float:
    return similarity_from_distance(a, b, edit_distance(a, b))


def to_percent(score: float) -> float:
    return round(score * 100, 2)


def classify(score: float, thresholds: Thresholds | None = None) -> Tier:
    """Map a similarity score to a tier. Bounds are strict, so 0.85 is Medium."""
    t = thresholds or _DEFAULT_THRESHOLDS
    if score > t.high:
        return "High"
    if score > t.medium:
        return "Medium"
    if score > t.low:
        return "Low"
    return "No Match"
