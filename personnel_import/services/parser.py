from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import IO, Any

import pandas as pd

from ..csvfile.columns import COLUMN_MAP, DATE_COLUMNS
from ..csvfile.reader import RawRow, read_csv_stream
from ..models.import_row import ImportRow
from ..validation.dates import parse_date
from ..validation.rules import validate_row

"""Parser/Validator: CSV input -> ordered list of validated ImportRow.

Every data line yields exactly one ImportRow, in file order. Problems inside a
row are recorded on the row and never abort the parse; only an unreadable
stream raises (``CsvFormatError`` from the reader).
"""

__all__ = [
    "parse_csv",
    "build_import_row",
]

logger = logging.getLogger(__name__)


def _cell(values: dict[str, Any], column: str) -> str | None:
    """Trimmed cell text; None for missing columns, missing values or blanks."""
    value = values.get(column)
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


def build_import_row(raw: RawRow, today: date | None = None) -> ImportRow:
    """Extract, date-parse and validate a single raw CSV row."""
    if raw.error is not None:
        return ImportRow.parse_failure(raw.row_number, raw.error)

    row = ImportRow(row_number=raw.row_number)
    for attr, column in COLUMN_MAP.items():
        setattr(row, attr, _cell(raw.values, column))
    for raw_attr, (parsed_attr, label) in DATE_COLUMNS.items():
        setattr(row, parsed_attr, parse_date(getattr(row, raw_attr), label, row))
    return validate_row(row, today=today)


def parse_csv(
    stream: IO[bytes] | IO[str] | bytes | str,
    *,
    today: date | None = None,
    on_row: Callable[[ImportRow], None] | None = None,
    warnings: list[str] | None = None,
) -> list[ImportRow]:
    """Parse and validate every data row of a personnel CSV export.

    Parameters
    ----------
    stream: binary/text stream (rewound when seekable), bytes or str
    today: reference date for age and future-date rules (default: today)
    on_row: optional callback invoked with each finished row (progress display)
    warnings: optional list receiving file-level notes (missing header columns)

    Raises
    ------
    CsvFormatError: when the input cannot be read as CSV at all
    """
    table = read_csv_stream(stream)
    if table.columns:
        missing = [c for c in COLUMN_MAP.values() if c not in table.columns]
        if missing:
            note = f"CSV header lacks columns (values treated as empty): {', '.join(missing)}"
            logger.warning(note)
            if warnings is not None:
                warnings.append(note)

    rows: list[ImportRow] = []
    for raw in table.rows:
        try:
            row = build_import_row(raw, today=today)
        except Exception as e:  # noqa: BLE001 - one bad row must not abort the file
            logger.warning("Error parsing row %d: %s", raw.row_number, e)
            row = ImportRow.parse_failure(raw.row_number, str(e))
        rows.append(row)
        if on_row is not None:
            on_row(row)

    invalid = sum(1 for r in rows if not r.is_valid)
    logger.info("Parsed %d rows from CSV (%d invalid)", len(rows), invalid)
    return rows
