"""Batch orchestration: candidate index, per-record matching, progress."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import structlog

from rplmatch.config import MatchConfig
from rplmatch.errors import CallerContractViolation, MatchCancelled
from rplmatch.index import CandidateIndex
from rplmatch.scoring import classify, to_percent
from rplmatch.types import (
    NO_MATCH_SENTINEL,
    TIERS,
    FieldSelector,
    MatchResult,
    Record,
    RunState,
    to_text,
)

log = structlog.get_logger()

ProgressCallback = Callable[[int], None]
CheckpointCallback = Callable[[int], None]
CancelCheck = Callable[[], bool]


@dataclass
class MatcherStats:
    """Statistics collected during a run."""

    records: int = 0
    candidates: int = 0
    comparisons: int = 0
    empty_customers: int = 0
    tiers: dict[str, int] = field(default_factory=lambda: {t: 0 for t in TIERS})


def progress_percent(processed: int, total: int) -> int:
    """Percentage of records processed, rounding halves up."""
    return (200 * processed + total) // (2 * total)


def validate_selector(records: Sequence[Record], selector: FieldSelector | None) -> FieldSelector:
    if selector is None:
        raise CallerContractViolation("field selector is required")
    for name, value in (
        ("customer_field", selector.customer_field),
        ("reference_field", selector.reference_field),
    ):
        if not isinstance(value, str) or not value.strip():
            raise CallerContractViolation(f"{name} must be a non-empty field name")

    if records:
        for name in (selector.customer_field, selector.reference_field):
            if not any(name in record for record in records):
                raise CallerContractViolation(f"field {name!r} not present in any record")
    return selector


class Matcher:
    """Fuzzy lookup of customer values against the reference column of the same table."""

    def __init__(self, config: MatchConfig | None = None) -> None:
        self.config = config or MatchConfig()
        self.config.validate()
        self.state: RunState = "IDLE"
        self.stats = MatcherStats()

    def run(
        self,
        records: Sequence[Record],
        selector: FieldSelector,
        on_progress: ProgressCallback | None = None,
        checkpoint: CheckpointCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> list[MatchResult]:
        """Match every record and return one result per record, in input order.

        ``on_progress`` receives the rounded percentage after each record.
        ``checkpoint`` is called every ``run.checkpoint_every`` records as a
        cooperative yield point. ``should_cancel`` is polled before each
        record; a true value aborts the run with :class:`MatchCancelled`.
        """
        self.state = "RUNNING"
        self.stats = MatcherStats()
        try:
            results = self._run(records, selector, on_progress, checkpoint, should_cancel)
        except Exception as e:
            self.state = "FAILED"
            log.warning("match_failed", error=str(e), error_type=type(e).__name__)
            raise
        self.state = "COMPLETED"
        return results

    def build_index(self, records: Sequence[Record], selector: FieldSelector) -> CandidateIndex:
        return CandidateIndex.build(r.get(selector.reference_field) for r in records)

    def match_record(self, record: Record, index: CandidateIndex, selector: FieldSelector, source_index: int) -> MatchResult:
        """Match a single record against a prebuilt candidate index."""
        if index is None:
            raise CallerContractViolation("candidate index is required")

        customer = to_text(record.get(selector.customer_field)).strip()
        original_reference = to_text(record.get(selector.reference_field)).strip()

        if not customer:
            self.stats.empty_customers += 1
            self.stats.tiers["No Match"] += 1
            return MatchResult(
                customer_text="",
                original_reference_text=original_reference,
                matched_reference_text=NO_MATCH_SENTINEL,
                similarity_percent=0.0,
                tier="No Match",
                source_index=source_index,
            )

        best = index.best_match(customer, early_termination=self.config.run.early_termination)
        self.stats.comparisons += len(index)

        if best.found:
            matched = best.candidate
            score = best.similarity
        else:
            matched = NO_MATCH_SENTINEL
            score = 0.0
        tier = classify(score, self.config.thresholds)
        self.stats.tiers[tier] += 1

        log.debug(
            "match_record_done",
            source_index=source_index,
            customer=customer,
            matched=matched,
            similarity=round(score, 4),
            tier=tier,
        )

        return MatchResult(
            customer_text=customer,
            original_reference_text=original_reference,
            matched_reference_text=matched,
            similarity_percent=to_percent(score),
            tier=tier,
            source_index=source_index,
        )

    def _run(
        self,
        records: Sequence[Record],
        selector: FieldSelector,
        on_progress: ProgressCallback | None,
        checkpoint: CheckpointCallback | None,
        should_cancel: CancelCheck | None,
    ) -> list[MatchResult]:
        if records is None or isinstance(records, (str, bytes)) or not isinstance(records, Sequence):
            raise CallerContractViolation("records must be a sequence of mappings")
        selector = validate_selector(records, selector)

        total = len(records)
        self.stats.records = total
        log.info(
            "match_start",
            records=total,
            customer_field=selector.customer_field,
            reference_field=selector.reference_field,
        )

        index = self.build_index(records, selector)
        self.stats.candidates = len(index)
        log.info("candidate_set_built", candidates=len(index))
        if not index:
            log.warning("no_candidates", reference_field=selector.reference_field)

        every = self.config.run.checkpoint_every
        results: list[MatchResult] = []
        for i, record in enumerate(records):
            if should_cancel is not None and should_cancel():
                log.info("match_cancelled", processed=i, total=total)
                raise MatchCancelled(i, total)

            results.append(self.match_record(record, index, selector, source_index=i))

            processed = i + 1
            if on_progress is not None:
                on_progress(progress_percent(processed, total))
            if processed % every == 0:
                log.info("match_progress", processed=processed, total=total)
                if checkpoint is not None:
                    checkpoint(processed)

        log.info("match_done", records=total, tiers=self.stats.tiers)
        return results


def match(
    records: Sequence[Record],
    customer_field: str,
    reference_field: str,
    on_progress: ProgressCallback | None = None,
    config: MatchConfig | None = None,
) -> list[MatchResult]:
    """Match each record's customer value against the table's reference column."""
    matcher = Matcher(config)
    return matcher.run(records, FieldSelector(customer_field, reference_field), on_progress)
