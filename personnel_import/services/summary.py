from __future__ import annotations

from ..models.import_report import ImportReport, ValidationReport

"""SUMMARY line rendering for CLI output.

Formats (one line each, keys always present, in this order):
    SUMMARY rows=<total> success=<n> failed=<n> errors=<n>
    SUMMARY mode=validate valid=<n> invalid=<n> errors=<n> ok=<true|false>
"""


def render_summary_line(report: ImportReport) -> str:
    """Render the SUMMARY line of an import run.

    Examples:
        >>> render_summary_line(ImportReport(total_rows=3, success_count=2, failure_count=1,
        ...                                  errors=["Row 2: Surname is required"]))
        'SUMMARY rows=3 success=2 failed=1 errors=1'
    """
    return (
        f"SUMMARY rows={report.total_rows} "
        f"success={report.success_count} "
        f"failed={report.failure_count} "
        f"errors={len(report.errors)}"
    )


def render_validation_summary_line(report: ValidationReport) -> str:
    return (
        "SUMMARY mode=validate "
        f"valid={report.valid_row_count} "
        f"invalid={report.invalid_row_count} "
        f"errors={len(report.validation_errors)} "
        f"ok={'true' if report.is_valid else 'false'}"
    )
