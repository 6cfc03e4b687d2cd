from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import IO

from ..db.store import RecordStore, sort_records
from ..errors import CsvFormatError, StoreError
from ..logging.error_log import ErrorLogBuffer
from ..models.employee_record import EmployeeRecord
from ..models.error_record import FILE_LEVEL_ROW, ErrorRecord
from ..models.import_report import DEFAULT_PREVIEW_LIMIT, ImportReport, ValidationReport
from ..models.import_row import ImportRow
from .parser import parse_csv

"""Import orchestrator: parse -> partition -> duplicate check -> atomic commit.

``import_csv`` and ``validate_csv`` never raise; every failure ends up in the
returned report. Row order from the parser is kept throughout so that row
numbers in the report are deterministic.
"""

__all__ = [
    "NO_VALID_ROWS_MESSAGE",
    "import_csv",
    "validate_csv",
    "check_for_duplicates",
    "map_to_record",
]

logger = logging.getLogger(__name__)

NO_VALID_ROWS_MESSAGE = "No valid rows found in CSV file"

# error_type values written to the JSON Lines error log
ROW_VALIDATION = "ROW_VALIDATION"
DUPLICATE_KEY = "DUPLICATE_KEY"
NO_VALID_ROWS = "NO_VALID_ROWS"
DATABASE_ERROR = "DATABASE_ERROR"
FILE_UNREADABLE = "FILE_UNREADABLE"
STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class _ErrorSink:
    """Feeds the optional JSON Lines buffer alongside the report."""

    def __init__(self, buffer: ErrorLogBuffer | None, file_name: str) -> None:
        self._buffer = buffer
        self._file_name = file_name

    def add(self, row: int, error_type: str, message: str) -> None:
        if self._buffer is not None:
            self._buffer.append(ErrorRecord.create(self._file_name, row, error_type, message))


def _log_failure(context: str, e: Exception) -> None:
    """Known failures log one line; anything else keeps its traceback."""
    if isinstance(e, (CsvFormatError, StoreError)):
        logger.error("%s: %s", context, e)
    else:
        logger.exception("%s: %s", context, e)


def _row_errors(rows: list[ImportRow], sink: _ErrorSink) -> list[str]:
    lines: list[str] = []
    for row in rows:
        for message in row.validation_errors:
            lines.append(f"Row {row.row_number}: {message}")
            sink.add(row.row_number, ROW_VALIDATION, message)
    return lines


def check_for_duplicates(payroll_numbers: list[str], store: RecordStore) -> set[str]:
    """Payroll numbers already persisted; one ``exists`` call per distinct value."""
    existing: set[str] = set()
    for payroll_number in dict.fromkeys(payroll_numbers):
        if store.exists(payroll_number):
            existing.add(payroll_number)
    return existing


def _remove_existing(
    valid: list[ImportRow], store: RecordStore, sink: _ErrorSink
) -> tuple[list[ImportRow], list[str]]:
    """Split off rows whose payroll number the store already holds."""
    existing = check_for_duplicates([r.payroll_number for r in valid], store)
    if not existing:
        return valid, []
    kept: list[ImportRow] = []
    errors: list[str] = []
    for row in valid:
        if row.payroll_number in existing:
            message = f"Payroll number '{row.payroll_number}' already exists in database"
            errors.append(message)
            row.add_error("Payroll number already exists")
            sink.add(row.row_number, DUPLICATE_KEY, message)
        else:
            kept.append(row)
    logger.info("%d rows rejected as already present in store", len(valid) - len(kept))
    return kept, errors


def map_to_record(row: ImportRow, created: datetime | None = None) -> EmployeeRecord:
    """One-to-one field copy of a valid row into the persisted shape."""
    return EmployeeRecord(
        payroll_number=row.payroll_number,
        forenames=row.forenames,
        surname=row.surname,
        date_of_birth=row.date_of_birth,
        telephone=row.telephone,
        mobile=row.mobile,
        address=row.address,
        address_2=row.address_2,
        postcode=row.postcode,
        email_home=row.email_home,
        start_date=row.start_date,
        created_date=created or datetime.now(UTC),
    )


def import_csv(
    stream: IO[bytes] | IO[str] | bytes | str,
    store: RecordStore,
    *,
    file_name: str = "upload.csv",
    today: date | None = None,
    error_log: ErrorLogBuffer | None = None,
    on_row: Callable[[ImportRow], None] | None = None,
) -> ImportReport:
    """Parse, validate, deduplicate and commit a personnel CSV file.

    The commit is a single ``store.add_many`` call: either every remaining
    valid row is persisted or none is.
    """
    report = ImportReport()
    sink = _ErrorSink(error_log, file_name)
    logger.info("Starting CSV import from file: %s", file_name)

    try:
        rows = parse_csv(stream, today=today, on_row=on_row, warnings=report.warnings)
    except Exception as e:  # noqa: BLE001 - reported as a fatal import failure
        _log_failure(f"Unreadable CSV {file_name}", e)
        report.errors.append(f"Import failed: {e}")
        report.fatal = True
        sink.add(FILE_LEVEL_ROW, FILE_UNREADABLE, str(e))
        return report

    report.total_rows = len(rows)
    valid = [r for r in rows if r.is_valid]
    invalid = [r for r in rows if not r.is_valid]
    report.errors.extend(_row_errors(invalid, sink))
    report.failure_count = len(invalid)

    if not valid:
        report.errors.append(NO_VALID_ROWS_MESSAGE)
        sink.add(FILE_LEVEL_ROW, NO_VALID_ROWS, NO_VALID_ROWS_MESSAGE)
        logger.warning("No valid employees found in CSV file: %s", file_name)
        return report

    try:
        valid, duplicate_errors = _remove_existing(valid, store, sink)
    except Exception as e:  # noqa: BLE001 - store backends are injected
        _log_failure(f"Duplicate check failed for {file_name}", e)
        report.errors.append(f"Import failed: {e}")
        report.failure_count += len(valid)
        report.fatal = True
        sink.add(FILE_LEVEL_ROW, STORE_UNAVAILABLE, str(e))
        return report
    report.errors.extend(duplicate_errors)
    report.failure_count += len(duplicate_errors)

    committed_at = datetime.now(UTC)
    records = [map_to_record(r, committed_at) for r in valid]
    if not records:
        return report

    try:
        saved = store.add_many(records)
    except Exception as e:  # noqa: BLE001 - nothing was committed
        _log_failure("Error saving employees to database", e)
        report.errors.append(f"Database error: {e}")
        report.failure_count += len(records)
        sink.add(FILE_LEVEL_ROW, DATABASE_ERROR, str(e))
        return report

    report.success_count = saved
    report.imported_records = sort_records(records)
    logger.info("Successfully imported %d employees from %s", saved, file_name)
    return report


def validate_csv(
    stream: IO[bytes] | IO[str] | bytes | str,
    store: RecordStore,
    *,
    today: date | None = None,
    preview_limit: int = DEFAULT_PREVIEW_LIMIT,
) -> ValidationReport:
    """Dry run of ``import_csv``: everything up to, but excluding, the commit."""
    report = ValidationReport()
    logger.info("Validating CSV file")
    sink = _ErrorSink(None, "")

    try:
        rows = parse_csv(stream, today=today)
    except Exception as e:  # noqa: BLE001
        _log_failure("Error validating CSV file", e)
        report.validation_errors.append(f"Validation failed: {e}")
        report.fatal = True
        return report

    valid = [r for r in rows if r.is_valid]
    invalid = [r for r in rows if not r.is_valid]
    report.valid_row_count = len(valid)
    report.invalid_row_count = len(invalid)
    report.validation_errors.extend(_row_errors(invalid, sink))

    if not valid:
        report.validation_errors.append(NO_VALID_ROWS_MESSAGE)
    else:
        try:
            valid, duplicate_errors = _remove_existing(valid, store, sink)
        except Exception as e:  # noqa: BLE001
            _log_failure("Error validating CSV file", e)
            report.validation_errors.append(f"Validation failed: {e}")
            report.fatal = True
            return report
        report.validation_errors.extend(duplicate_errors)
        report.valid_row_count -= len(duplicate_errors)
        report.invalid_row_count += len(duplicate_errors)

    report.preview_rows = valid[:preview_limit]
    report.is_valid = report.valid_row_count > 0 and not report.validation_errors
    logger.info(
        "CSV validation complete. Valid: %d, Invalid: %d",
        report.valid_row_count,
        report.invalid_row_count,
    )
    return report
