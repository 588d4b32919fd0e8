"""Tests for the batch orchestrator."""

import pytest

from rplmatch.config import MatchConfig
from rplmatch.errors import CallerContractViolation, MatchCancelled
from rplmatch.matcher import Matcher, match, progress_percent
from rplmatch.types import FieldSelector, MatchResult

SELECTOR = FieldSelector("Customer", "RPL")


def make_records(*pairs):
    return [{"Customer": c, "RPL": r} for c, r in pairs]


def test_end_to_end_example():
    records = make_records(("Jon Smith", "Jonathan Smith"), ("", "Acme Co"))
    matcher = Matcher()

    results = matcher.run(records, SELECTOR)

    assert matcher.build_index(records, SELECTOR).candidates == ("Jonathan Smith", "Acme Co")
    assert results[0] == MatchResult(
        customer_text="Jon Smith",
        original_reference_text="Jonathan Smith",
        matched_reference_text="Jonathan Smith",
        similarity_percent=64.29,
        tier="Medium",
        source_index=0,
    )
    assert results[1] == MatchResult(
        customer_text="",
        original_reference_text="Acme Co",
        matched_reference_text="N/A",
        similarity_percent=0.0,
        tier="No Match",
        source_index=1,
    )


def test_match_function():
    records = make_records(("ACME Corp", "acme corp"))
    results = match(records, "Customer", "RPL")
    assert results[0].similarity_percent == 100.0
    assert results[0].tier == "High"


def test_one_result_per_record_in_input_order():
    records = make_records(("a", "x"), ("b", "y"), ("c", "z"), ("", ""))
    results = Matcher().run(records, SELECTOR)
    assert [r.source_index for r in results] == [0, 1, 2, 3]


def test_empty_customer_skips_matching():
    records = make_records(("   ", "Acme"), (None, "Acme"), ("Acme", "Acme"))
    matcher = Matcher()
    results = matcher.run(records, SELECTOR)

    for r in results[:2]:
        assert r.matched_reference_text == "N/A"
        assert r.similarity_percent == 0.0
        assert r.tier == "No Match"
    assert results[2].tier == "High"
    assert matcher.stats.empty_customers == 2
    assert matcher.stats.comparisons == 1


def test_no_candidates_available():
    records = make_records(("Acme", ""), ("Beta", None), ("Gamma", "  "))
    matcher = Matcher()
    results = matcher.run(records, SELECTOR)

    assert matcher.state == "COMPLETED"
    assert matcher.stats.candidates == 0
    for r in results:
        assert r.matched_reference_text == "N/A"
        assert r.similarity_percent == 0.0
        assert r.tier == "No Match"


def test_values_are_trimmed_and_coerced():
    records = [
        {"Customer": "  Acme Co  ", "RPL": " Acme Co "},
        {"Customer": 12345, "RPL": 12345.0},
        {"Customer": True, "RPL": "TRUE"},
    ]
    results = Matcher().run(records, SELECTOR)

    assert results[0].customer_text == "Acme Co"
    assert results[0].original_reference_text == "Acme Co"
    assert results[1].customer_text == "12345"
    assert results[1].matched_reference_text == "12345"
    assert results[1].similarity_percent == 100.0
    assert results[2].customer_text == "true"
    assert results[2].matched_reference_text == "TRUE"


def test_missing_field_on_some_records_coerced_to_empty():
    records = [{"Customer": "Acme", "RPL": "Acme"}, {"Customer": "Beta"}]
    results = Matcher().run(records, SELECTOR)
    assert results[1].original_reference_text == ""
    assert results[1].matched_reference_text == "Acme"


def test_tie_break_uses_first_appearance():
    records = make_records(("abx", "abd"), ("", "abc"))
    results = Matcher().run(records, SELECTOR)
    assert results[0].matched_reference_text == "abd"


def test_deterministic():
    records = make_records(
        ("Jon Smith", "Jonathan Smith"),
        ("Acme", "Acme Co"),
        ("Globex", "Initech"),
        ("", "Umbrella"),
        ("Initec", "Globex Corp"),
    )
    assert match(records, "Customer", "RPL") == match(records, "Customer", "RPL")


def test_early_termination_does_not_change_results():
    records = make_records(
        ("Jon Smith", "Jonathan Smith"),
        ("Acme", "Acme Co"),
        ("Globex", "Initech"),
        ("Initec", "Globex Corp"),
        ("Umbrela Corp", "Umbrella Corporation"),
    )
    exhaustive = MatchConfig()
    exhaustive.run.early_termination = False
    assert match(records, "Customer", "RPL") == match(records, "Customer", "RPL", config=exhaustive)


class TestProgress:
    def test_sequence_for_three_records(self):
        seen = []
        match(make_records(("a", "a"), ("b", "b"), ("c", "c")), "Customer", "RPL", seen.append)
        assert seen == [33, 67, 100]

    def test_halves_round_up(self):
        seen = []
        records = make_records(*[("a", "a")] * 8)
        match(records, "Customer", "RPL", seen.append)
        assert seen == [13, 25, 38, 50, 63, 75, 88, 100]

    def test_reported_for_empty_customers_too(self):
        seen = []
        match(make_records(("", "a"), ("", "b")), "Customer", "RPL", seen.append)
        assert seen == [50, 100]

    @pytest.mark.parametrize("n", [1, 2, 7, 100, 333])
    def test_progress_percent_monotonic_and_ends_at_100(self, n):
        values = [progress_percent(k, n) for k in range(1, n + 1)]
        assert values == sorted(values)
        assert values[-1] == 100

    def test_no_progress_for_empty_batch(self):
        seen = []
        assert match([], "Customer", "RPL", seen.append) == []
        assert seen == []


def test_checkpoint_called_every_k_records():
    config = MatchConfig()
    config.run.checkpoint_every = 2
    calls = []
    records = make_records(*[("a", "a")] * 5)
    Matcher(config).run(records, SELECTOR, checkpoint=calls.append)
    assert calls == [2, 4]


def test_cancel_aborts_without_results():
    polls = []

    def should_cancel():
        polls.append(1)
        return len(polls) > 2

    matcher = Matcher()
    records = make_records(*[("a", "a")] * 5)
    with pytest.raises(MatchCancelled) as exc_info:
        matcher.run(records, SELECTOR, should_cancel=should_cancel)

    assert exc_info.value.processed == 2
    assert exc_info.value.total == 5
    assert matcher.state == "FAILED"


class TestContractViolations:
    def test_unknown_field(self):
        matcher = Matcher()
        with pytest.raises(CallerContractViolation):
            matcher.run(make_records(("a", "b")), FieldSelector("Customer", "Missing"))
        assert matcher.state == "FAILED"

    def test_blank_field_name(self):
        with pytest.raises(CallerContractViolation):
            match(make_records(("a", "b")), "", "RPL")

    def test_missing_selector(self):
        with pytest.raises(CallerContractViolation):
            Matcher().run(make_records(("a", "b")), None)

    def test_records_not_a_sequence(self):
        with pytest.raises(CallerContractViolation):
            match(None, "Customer", "RPL")

    def test_missing_index(self):
        with pytest.raises(CallerContractViolation):
            Matcher().match_record({"Customer": "a"}, None, SELECTOR, 0)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            match(make_records(("a", "b")), "Customer", "Nope")


def test_stats_tier_counts():
    records = make_records(("Acme", "Acme"), ("", "x"), ("Zzzz", "Qqqq"))
    matcher = Matcher()
    matcher.run(records, SELECTOR)
    assert matcher.stats.records == 3
    assert matcher.stats.tiers["High"] == 1
    assert matcher.stats.tiers["No Match"] == 2


def test_state_transitions():
    matcher = Matcher()
    assert matcher.state == "IDLE"
    matcher.run(make_records(("a", "a")), SELECTOR)
    assert matcher.state == "COMPLETED"


def test_expanding_lowercase_still_reports_real_candidate():
    results = match([{"Customer": "İ", "RPL": "x"}], "Customer", "RPL")
    assert results[0].matched_reference_text == "x"
    assert results[0].similarity_percent == 0.0
    assert results[0].tier == "No Match"


def test_similarity_percent_in_range_for_turkish_names():
    records = make_records(("İSTANBUL TİCARET", "Istanbul Ticaret"), ("İİİ", "ab"))
    for r in match(records, "Customer", "RPL"):
        assert 0.0 <= r.similarity_percent <= 100.0
