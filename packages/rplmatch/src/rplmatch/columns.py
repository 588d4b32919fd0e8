"""Field discovery and automatic column mapping."""

from __future__ import annotations

from collections.abc import Sequence

from rplmatch.errors import CallerContractViolation
from rplmatch.types import FieldSelector, Record


def discover_fields(records: Sequence[Record]) -> list[str]:
    """Field names of the first record, in order. Headers come from row one."""
    if not records:
        return []
    return list(records[0].keys())


def _find(fields: Sequence[str], needle: str) -> str | None:
    for name in fields:
        if needle in name.lower():
            return name
    return None


def detect_fields(fields: Sequence[str]) -> FieldSelector:
    """Guess the customer and reference columns from their names.

    The customer column is the first name containing "customer", else the
    first column. The reference column is the first containing "rpl", else
    the second column (the first when there is only one).
    """
    if not fields:
        raise CallerContractViolation("cannot map columns of a table with no fields")
    customer = _find(fields, "customer") or fields[0]
    reference = _find(fields, "rpl") or fields[min(1, len(fields) - 1)]
    return FieldSelector(customer_field=customer, reference_field=reference)
