"""Explicit per-run context: loaded table, column mapping, progress, results."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from rplmatch.columns import detect_fields, discover_fields
from rplmatch.config import MatchConfig
from rplmatch.errors import CallerContractViolation
from rplmatch.insights import Summarizer
from rplmatch.matcher import CancelCheck, Matcher, MatcherStats
from rplmatch.types import FieldSelector, MatchResult, Record, RunState

log = structlog.get_logger()


@dataclass
class MatchSession:
    records: Sequence[Record]
    columns: list[str] = field(default_factory=list)
    selector: FieldSelector | None = None
    state: RunState = "IDLE"
    progress: int = 0
    message: str = ""
    results: list[MatchResult] = field(default_factory=list)
    insights: str | None = None
    stats: MatcherStats | None = None

    @classmethod
    def load(cls, records: Sequence[Record], selector: FieldSelector | None = None) -> MatchSession:
        """Start a session, auto-detecting the column mapping when none is given."""
        columns = discover_fields(records)
        if selector is None and columns:
            selector = detect_fields(columns)
        return cls(records=records, columns=columns, selector=selector)

    def set_progress(self, percent: int) -> None:
        self.progress = percent

    def summary(self) -> dict[str, Any]:
        return {
            "state": self.state,
            "progress": self.progress,
            "message": self.message,
            "rows": len(self.records),
            "results": len(self.results),
        }


def run_session(
    session: MatchSession,
    config: MatchConfig | None = None,
    summarizer: Summarizer | None = None,
    should_cancel: CancelCheck | None = None,
) -> MatchSession:
    """Drive a session through matching and, optionally, the summary step.

    A failed summary never fails the session; the summarizer substitutes
    its fallback text.
    """
    if session.selector is None:
        raise CallerContractViolation("session has no column mapping")

    matcher = Matcher(config)
    session.state = "RUNNING"
    session.progress = 0
    session.message = "Performing fuzzy lookup..."
    try:
        session.results = matcher.run(
            session.records,
            session.selector,
            on_progress=session.set_progress,
            should_cancel=should_cancel,
        )
    except Exception:
        session.state = "FAILED"
        session.progress = 0
        session.message = "Error during matching process."
        session.stats = matcher.stats
        raise

    session.state = "COMPLETED"
    session.progress = 100
    session.message = "Matching complete!"
    session.stats = matcher.stats

    if summarizer is not None:
        session.message = "Generating AI analysis..."
        session.insights = summarizer.generate(session.results)
        session.message = "Matching complete!"

    log.info("session_done", rows=len(session.records), state=session.state)
    return session
