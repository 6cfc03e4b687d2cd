from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import IO, Any

import pandas as pd

from ..errors import CsvFormatError

"""CSV reader for personnel exports.

The first non-blank line is the header, every following non-blank line is a
data row numbered from 1. The file is read with pandas (python engine) without
a header so that the header line fixes the expected field count; lines with
more fields than the header are caught through ``on_bad_lines``: blank
trailing cells (a trailing delimiter) are dropped, anything else surfaces as
``RawRow.error`` instead of aborting the read. Short lines are padded with
missing values.

Only an undecodable or structurally unreadable stream raises ``CsvFormatError``.
"""

__all__ = [
    "CANDIDATE_DELIMITERS",
    "RawRow",
    "CsvTable",
    "detect_delimiter",
    "decode_stream",
    "read_csv_stream",
]

logger = logging.getLogger(__name__)

CANDIDATE_DELIMITERS = (",", ";", "\t", "|")
DEFAULT_DELIMITER = ","

# Placeholder row returned to pandas for over-long lines; never a real value.
_BAD_ROW_MARKER = "\x00__bad_row__\x00"


@dataclass
class RawRow:
    """One data line: header -> raw cell value, or an error when unsplittable."""
    row_number: int
    values: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


@dataclass
class CsvTable:
    columns: list[str]
    rows: list[RawRow]
    delimiter: str = DEFAULT_DELIMITER


class _BadLineCollector:
    """``on_bad_lines`` callable keeping reasons in file order."""

    def __init__(self, expected: int) -> None:
        self.reasons: list[str] = []
        self.expected = expected

    def __call__(self, bad_line: list[str]) -> list[str]:
        # trailing delimiters only add blank cells; keep the row
        if all(not cell.strip() for cell in bad_line[self.expected :]):
            return bad_line[: self.expected]
        self.reasons.append(f"expected {self.expected} fields, saw {len(bad_line)}")
        return [_BAD_ROW_MARKER]


def detect_delimiter(header_line: str) -> str:
    """Pick the candidate delimiter occurring most often in the header line.

    Ties resolve in ``CANDIDATE_DELIMITERS`` order; comma when none occurs.
    """
    best = DEFAULT_DELIMITER
    best_count = 0
    for candidate in CANDIDATE_DELIMITERS:
        count = header_line.count(candidate)
        if count > best_count:
            best, best_count = candidate, count
    return best


def decode_stream(stream: IO[bytes] | IO[str] | bytes | str) -> str:
    """Read the whole input from its start and return it as text.

    Bytes are decoded as UTF-8 (a leading BOM is dropped).
    """
    if isinstance(stream, (bytes, bytearray)):
        data: bytes | str = bytes(stream)
    elif isinstance(stream, str):
        data = stream
    else:
        try:
            if stream.seekable():
                stream.seek(0)
            data = stream.read()
        except (OSError, ValueError) as e:
            raise CsvFormatError(f"failed reading input stream: {e}") from e
    if isinstance(data, str):
        return data.lstrip("\ufeff")
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CsvFormatError(f"input is not valid UTF-8 text: {e}") from e


def _first_non_blank_line(text: str) -> str | None:
    for line in text.splitlines():
        if line.strip():
            return line
    return None


def _header_name(value: Any) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


def read_csv_stream(stream: IO[bytes] | IO[str] | bytes | str) -> CsvTable:
    """Read a CSV input into a ``CsvTable``.

    Raises:
        CsvFormatError: the input cannot be decoded or tokenized at all
    """
    text = decode_stream(stream)
    header_line = _first_non_blank_line(text)
    if header_line is None:
        return CsvTable(columns=[], rows=[])
    delimiter = detect_delimiter(header_line)

    collector = _BadLineCollector(expected=len(header_line.split(delimiter)))
    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            sep=delimiter,
            engine="python",
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines=collector,
        )
    except pd.errors.EmptyDataError:
        return CsvTable(columns=[], rows=[], delimiter=delimiter)
    except (pd.errors.ParserError, ValueError) as e:
        raise CsvFormatError(f"failed to parse CSV file: {e}") from e

    if df.empty:
        return CsvTable(columns=[], rows=[], delimiter=delimiter)

    columns = [_header_name(v) for v in df.iloc[0].tolist()]
    rows: list[RawRow] = []
    reasons = iter(collector.reasons)
    for row_number, raw in enumerate(df.iloc[1:].itertuples(index=False, name=None), start=1):
        cells = list(raw)
        if cells and cells[0] == _BAD_ROW_MARKER:
            reason = next(reasons, "too many fields")
            logger.warning("row %d: %s", row_number, reason)
            rows.append(RawRow(row_number=row_number, error=reason))
            continue
        rows.append(RawRow(row_number=row_number, values=dict(zip(columns, cells, strict=False))))

    logger.debug("read %d data rows (delimiter=%r, columns=%s)", len(rows), delimiter, columns)
    return CsvTable(columns=columns, rows=rows, delimiter=delimiter)
