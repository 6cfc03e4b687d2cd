from __future__ import annotations

from dataclasses import dataclass, field

from .employee_record import EmployeeRecord
from .import_row import ImportRow

"""Report shapes returned to the presentation layer.

ImportReport is the outcome of a committing import, ValidationReport of a dry
run. Both are always returned complete; failures are encoded in their fields.
"""

__all__ = [
    "ImportReport",
    "ValidationReport",
    "DEFAULT_PREVIEW_LIMIT",
]

DEFAULT_PREVIEW_LIMIT = 10


@dataclass
class ImportReport:
    """Aggregated outcome of ``import_csv``.

    Attributes:
        total_rows: Number of non-blank data lines parsed
        success_count: Records committed to the store
        failure_count: Rows rejected (validation, duplicate or commit failure)
        errors: Human readable error lines, row-prefixed where a row is known
        warnings: Non-fatal notes
        imported_records: Committed records sorted by surname then forenames
        fatal: True when the stream or the store was unusable
    """
    total_rows: int = 0
    success_count: int = 0
    failure_count: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    imported_records: list[EmployeeRecord] = field(default_factory=list)
    fatal: bool = False

    @property
    def is_success(self) -> bool:
        return self.success_count > 0 and not self.errors

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass
class ValidationReport:
    """Outcome of the ``validate_csv`` dry run."""
    is_valid: bool = False
    valid_row_count: int = 0
    invalid_row_count: int = 0
    validation_errors: list[str] = field(default_factory=list)
    preview_rows: list[ImportRow] = field(default_factory=list)
    fatal: bool = False

    @property
    def message(self) -> str:
        if self.is_valid:
            return f"CSV is valid. {self.valid_row_count} rows ready for import."
        return f"CSV has {len(self.validation_errors)} validation errors."
