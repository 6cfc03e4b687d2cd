from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

"""ImportRow model: one parsed CSV data line awaiting import.

ImportRow is transient. The parser creates one per non-blank data line, the
validators append errors to it, and the orchestrator consumes it and maps the
valid ones to ``EmployeeRecord``. It is never persisted.
"""

__all__ = [
    "ImportRow",
]


@dataclass
class ImportRow:
    """Logical representation of a single CSV data line after field extraction.

    ``row_number`` is 1-based with the header line counted as row 0. Blank lines
    are skipped and do not consume a number.
    """
    row_number: int
    payroll_number: str | None = None
    forenames: str | None = None
    surname: str | None = None
    telephone: str | None = None
    mobile: str | None = None
    address: str | None = None
    address_2: str | None = None
    postcode: str | None = None
    email_home: str | None = None
    date_of_birth: date | None = None
    date_of_birth_raw: str | None = None
    start_date: date | None = None
    start_date_raw: str | None = None
    validation_errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        # 有効 <=> エラーなし (flag is derived, never stored)
        return not self.validation_errors

    def add_error(self, message: str) -> None:
        self.validation_errors.append(message)

    @classmethod
    def parse_failure(cls, row_number: int, reason: str) -> ImportRow:
        """Minimal row carrying only its number and a single parse-failure error."""
        row = cls(row_number=row_number)
        row.add_error(f"Failed to parse row: {reason}")
        return row
