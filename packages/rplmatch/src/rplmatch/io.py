"""Spreadsheet/CSV input and output for fuzzy lookup runs."""

from __future__ import annotations

import zipfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd
import structlog

from rplmatch.config import ExportConfig
from rplmatch.errors import DatasetError
from rplmatch.types import TIERS, MatchResult, Record

log = structlog.get_logger()

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


def read_records(path: str | Path) -> list[dict[str, Any]]:
    """Read the first sheet of a workbook (or a CSV file) into records.

    Column order is preserved and empty cells become None.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in EXCEL_SUFFIXES and suffix != ".csv":
        raise DatasetError(f"unsupported file type: {path.suffix or '(none)'}")

    try:
        if suffix == ".csv":
            df = pd.read_csv(path)
        else:
            df = pd.read_excel(path, sheet_name=0)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise DatasetError(f"could not read {path}: {e}") from e

    df = df.astype(object).where(pd.notna(df), None)
    records = df.to_dict(orient="records")
    log.info("records_loaded", path=str(path), rows=len(records), columns=len(df.columns))
    return records


def build_export_rows(
    records: Sequence[Record],
    results: Sequence[MatchResult],
    config: ExportConfig | None = None,
) -> list[dict[str, Any]]:
    """Join results back onto their source records and add the match columns."""
    config = config or ExportConfig()
    rows = []
    for r in results:
        row = dict(records[r.source_index])
        row[config.matched_column] = r.matched_reference_text
        row[config.similarity_column] = r.similarity_percent
        row[config.tier_column] = r.tier
        rows.append(row)
    return rows


def export_results(
    records: Sequence[Record],
    results: Sequence[MatchResult],
    path: str | Path,
    config: ExportConfig | None = None,
) -> Path:
    """Write the enriched table to ``.xlsx`` or ``.csv``."""
    config = config or ExportConfig()
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in EXCEL_SUFFIXES and suffix != ".csv":
        raise DatasetError(f"unsupported output type: {path.suffix or '(none)'}")

    df = pd.DataFrame(build_export_rows(records, results, config))

    if suffix == ".csv":
        df.to_csv(path, index=False)
    else:
        df.to_excel(path, index=False, sheet_name=config.sheet_name)

    log.info("results_exported", path=str(path), rows=len(df))
    return path


def default_output_path(input_path: str | Path, config: ExportConfig | None = None) -> Path:
    config = config or ExportConfig()
    input_path = Path(input_path)
    suffix = input_path.suffix if input_path.suffix.lower() == ".csv" else ".xlsx"
    return input_path.with_name(f"{input_path.stem}{config.filename_suffix}{suffix}")


def tier_counts(results: Sequence[MatchResult]) -> dict[str, int]:
    counts = {t: 0 for t in TIERS}
    for r in results:
        counts[r.tier] += 1
    counts["Total"] = len(results)
    return counts
