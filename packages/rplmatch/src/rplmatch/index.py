"""Deduplicated reference candidates and best-candidate selection."""

from __future__ import annotations

import math
from collections.abc import Iterable

from rplmatch.distance import edit_distance
from rplmatch.scoring import similarity_from_distance
from rplmatch.types import BestCandidate, FieldValue, to_text

NO_CANDIDATE = BestCandidate(candidate=None, similarity=0.0)


class CandidateIndex:
    """Distinct, trimmed, non-empty reference values in first-appearance order.

    Dedup is by exact string equality after trimming, so values differing
    only in case are kept as separate candidates. The index is read-only
    once built.
    """

    def __init__(self, values: Iterable[str]) -> None:
        self._candidates: tuple[str, ...] = tuple(dict.fromkeys(values))

    @classmethod
    def build(cls, values: Iterable[FieldValue]) -> CandidateIndex:
        trimmed = (to_text(v).strip() for v in values)
        return cls(v for v in trimmed if v)

    @property
    def candidates(self) -> tuple[str, ...]:
        return self._candidates

    def __len__(self) -> int:
        return len(self._candidates)

    def __iter__(self):
        return iter(self._candidates)

    def __bool__(self) -> bool:
        return bool(self._candidates)

    def best_match(self, query: str, early_termination: bool = True) -> BestCandidate:
        """Return the candidate most similar to ``query``.

        Candidates are scanned in index order and a later candidate only
        replaces the running best on a strictly greater score, so the first
        one seen wins ties. With ``early_termination`` each distance call is
        bounded by what would be needed to beat the running best; the winner
        is the same as for the exhaustive scan.
        """
        if not self._candidates:
            return NO_CANDIDATE

        query_len = len(query.lower())
        best: str | None = None
        best_score = 0.0
        for candidate in self._candidates:
            cutoff = None
            if early_termination and best is not None:
                max_len = max(query_len, len(candidate.lower()))
                # Distances above the cutoff cannot score > best_score.
                cutoff = math.floor((1.0 - best_score) * max_len) + 1
            distance = edit_distance(query, candidate, score_cutoff=cutoff)
            score = similarity_from_distance(query, candidate, distance)
            if best is None or score > best_score:
                best = candidate
                best_score = score
                if best_score >= 1.0:
                    break

        return BestCandidate(candidate=best, similarity=best_score)
