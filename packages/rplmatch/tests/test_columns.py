"""Tests for field discovery and automatic column mapping."""

import pytest

from rplmatch.columns import detect_fields, discover_fields
from rplmatch.errors import CallerContractViolation
from rplmatch.types import FieldSelector


def test_discover_fields_from_first_record():
    records = [{"Id": 1, "Customer Name": "a", "RPL Entry": "b"}, {"Other": 2}]
    assert discover_fields(records) == ["Id", "Customer Name", "RPL Entry"]


def test_discover_fields_empty():
    assert discover_fields([]) == []


def test_detect_by_name_case_insensitive():
    fields = ["Id", "rpl_name", "CUSTOMER_NAME"]
    assert detect_fields(fields) == FieldSelector("CUSTOMER_NAME", "rpl_name")


def test_detect_first_containing_match_wins():
    fields = ["Customer Id", "Customer Name", "RPL A", "RPL B"]
    assert detect_fields(fields) == FieldSelector("Customer Id", "RPL A")


def test_detect_defaults_to_first_and_second():
    assert detect_fields(["Name", "Watchlist", "Country"]) == FieldSelector("Name", "Watchlist")


def test_detect_single_column():
    assert detect_fields(["Name"]) == FieldSelector("Name", "Name")


def test_detect_no_fields():
    with pytest.raises(CallerContractViolation):
        detect_fields([])
