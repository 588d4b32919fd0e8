"""Core types for the rplmatch fuzzy lookup engine."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, Union

FieldValue = Union[str, int, float, bool, None]
Record = Mapping[str, FieldValue]

Tier = Literal["High", "Medium", "Low", "No Match"]
TIERS: tuple[Tier, ...] = ("High", "Medium", "Low", "No Match")

RunState = Literal["IDLE", "RUNNING", "COMPLETED", "FAILED"]

# Matched value reported for rows that never reach matching.
NO_MATCH_SENTINEL = "N/A"


def to_text(value: FieldValue) -> str:
    """Coerce a cell value to text.

    Missing values (None, NaN) become the empty string. Booleans are
    rendered lowercase and integral floats lose their trailing ``.0`` so a
    spreadsheet cell holding ``42`` compares as ``"42"``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    return str(value)


@dataclass(frozen=True)
class FieldSelector:
    customer_field: str
    reference_field: str


@dataclass(frozen=True)
class BestCandidate:
    """Winner of a candidate scan. ``candidate`` is None when nothing was scanned."""

    candidate: str | None
    similarity: float

    @property
    def found(self) -> bool:
        return self.candidate is not None


@dataclass(frozen=True)
class MatchResult:
    customer_text: str
    original_reference_text: str
    matched_reference_text: str
    similarity_percent: float
    tier: Tier
    source_index: int

    def to_dict(self) -> dict[str, str | float | int]:
        return {
            "customer_text": self.customer_text,
            "original_reference_text": self.original_reference_text,
            "matched_reference_text": self.matched_reference_text,
            "similarity_percent": self.similarity_percent,
            "tier": self.tier,
            "source_index": self.source_index,
        }
