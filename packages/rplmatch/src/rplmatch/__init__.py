"""rplmatch - Fuzzy lookup of customer names against restricted party lists."""

from rplmatch.config import MatchConfig
from rplmatch.index import CandidateIndex
from rplmatch.insights import GeminiTextGenerator, Summarizer
from rplmatch.matcher import Matcher, MatcherStats, match
from rplmatch.scoring import classify, similarity
from rplmatch.types import FieldSelector, MatchResult

__all__ = [
    "CandidateIndex",
    "FieldSelector",
    "GeminiTextGenerator",
    "MatchConfig",
    "Matcher",
    "MatcherStats",
    "MatchResult",
    "Summarizer",
    "classify",
    "match",
    "similarity",
]
