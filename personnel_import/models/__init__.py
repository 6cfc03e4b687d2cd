"""Domain models for the personnel CSV import tool."""

from .config_models import DatabaseConfig, ImportConfig
from .employee_record import FIELD_LIMITS, EmployeeRecord
from .error_record import ErrorRecord
from .import_report import ImportReport, ValidationReport
from .import_row import ImportRow

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    # Pipeline models
    "ImportRow",
    "EmployeeRecord",
    "FIELD_LIMITS",
    "ImportReport",
    "ValidationReport",
    "ErrorRecord",
]
