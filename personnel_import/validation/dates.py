from __future__ import annotations

import re
from datetime import date, datetime

import pandas as pd

from ..models.import_row import ImportRow

"""Day-first date parsing for personnel CSV fields.

Exact formats are tried first, in order; anything else goes through the
generic day-first (UK style) parser of pandas. ``%d`` and ``%m`` accept one or
two digits, so each pattern covers both the ``dd/MM/yyyy`` and ``d/M/yyyy``
spellings.
"""

__all__ = [
    "DATE_FORMATS",
    "parse_date",
    "parse_date_value",
    "years_before",
]

DATE_FORMATS: tuple[str, ...] = (
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%d.%m.%Y",
)

EXPECTED_FORMAT_HINT = "dd/MM/yyyy"

# pandas resolves "today"/"now" and reads bare digit runs as yyyymmdd; the
# fallback only gets values holding a digit and something besides digits
_DIGIT_RE = re.compile(r"\d")


def parse_date_value(value: str) -> date | None:
    """Parse a trimmed date string, returning None when nothing matches.

    Relative keywords and bare digit runs are never dates here.
    """
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    if not _DIGIT_RE.search(value) or value.isdigit():
        return None
    parsed = pd.to_datetime(value, dayfirst=True, errors="coerce")
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def parse_date(raw: str | None, field_name: str, row: ImportRow) -> date | None:
    """Parse ``raw`` for ``field_name``, annotating ``row`` on failure.

    Blank input records "<field> is required"; unparseable input records the
    offending value. The parsed value is None in both cases.
    """
    if raw is None or not raw.strip():
        row.add_error(f"{field_name} is required")
        return None
    parsed = parse_date_value(raw.strip())
    if parsed is None:
        row.add_error(
            f"{field_name} '{raw}' is not a valid date. Expected format: {EXPECTED_FORMAT_HINT}"
        )
    return parsed


def years_before(day: date, years: int) -> date:
    """Same calendar day ``years`` earlier; 29 Feb falls back to 28 Feb."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)
