from __future__ import annotations

"""Exception hierarchy for the personnel import tool.

Row-level problems never raise: they are collected on ``ImportRow`` instead.
Only the conditions below propagate out of a component.
"""

__all__ = [
    "PersonnelImportError",
    "CsvFormatError",
    "StoreError",
    "DuplicateKeyError",
    "RecordNotFoundError",
    "ConfigError",
]


class PersonnelImportError(Exception):
    """Base class for all tool errors."""


class CsvFormatError(PersonnelImportError):
    """Raised when the input stream cannot be read as tabular data at all."""


class StoreError(PersonnelImportError):
    """Raised when the record store fails (connection, SQL, constraint)."""


class DuplicateKeyError(StoreError):
    """Raised when a write would break payroll number uniqueness.

    ``keys`` lists every offending payroll number, in first-seen order.
    """

    def __init__(self, message: str, keys: list[str] | None = None) -> None:
        super().__init__(message)
        self.keys: list[str] = list(keys or [])


class RecordNotFoundError(StoreError):
    """Raised when an update targets an id the store does not hold."""


class ConfigError(PersonnelImportError):
    pass
