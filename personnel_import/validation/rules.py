from __future__ import annotations

from datetime import date

import email_validator
from email_validator import EmailNotValidError, validate_email

from ..models.employee_record import FIELD_LIMITS
from ..models.import_row import ImportRow
from .dates import years_before

"""Structural and business validation of a parsed ImportRow.

Checks run in a fixed order and never short-circuit: a row collects every
message that applies. Missing dates are already reported by the date parser,
so the date rules here only look at values that parsed.
"""

__all__ = [
    "MIN_AGE",
    "MAX_AGE",
    "MAX_SERVICE_YEARS",
    "calculate_age",
    "is_valid_email",
    "validate_row",
]

MIN_AGE = 16
MAX_AGE = 100
MAX_SERVICE_YEARS = 50

# Intranet mail domains found in HR exports (jane@corp.local); email-validator
# rejects these as special-use names unless removed from its list.
INTRANET_DOMAINS = ("local", "localhost")
for _name in INTRANET_DOMAINS:
    if _name in email_validator.SPECIAL_USE_DOMAIN_NAMES:
        email_validator.SPECIAL_USE_DOMAIN_NAMES.remove(_name)

# (attribute, label, required-message)
_REQUIRED_TEXT_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("payroll_number", "Payroll Number", "Payroll Number is required"),
    ("forenames", "Forenames", "Forenames are required"),
    ("surname", "Surname", "Surname is required"),
    ("address", "Address", "Address is required"),
    ("postcode", "Postcode", "Postcode is required"),
)

_OPTIONAL_TEXT_FIELDS: tuple[tuple[str, str], ...] = (
    ("telephone", "Telephone"),
    ("mobile", "Mobile"),
    ("address_2", "Address line 2"),
)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _too_long(label: str, attr: str) -> str:
    return f"{label} cannot exceed {FIELD_LIMITS[attr]} characters"


def is_valid_email(value: str) -> bool:
    """True when ``value`` is one bare ``local@domain`` address.

    Display-name forms such as ``Jane <jane@example.com>`` are rejected. Syntax
    only: dotless and intranet domains (``jane@server``, ``jane@corp.local``)
    are accepted.
    """
    if "<" in value or ">" in value:
        return False
    try:
        validate_email(value, check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError:
        return False
    return True


def calculate_age(date_of_birth: date, today: date) -> int:
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def _validate_email(row: ImportRow) -> None:
    email = row.email_home
    if _is_blank(email):
        row.add_error("Email is required")
    elif not is_valid_email(email):
        row.add_error("Email format is invalid")
    elif len(email) > FIELD_LIMITS["email_home"]:
        row.add_error(_too_long("Email", "email_home"))


def _validate_date_of_birth(row: ImportRow, today: date) -> None:
    dob = row.date_of_birth
    if dob is None:
        return
    if dob > today:
        row.add_error("Date of Birth cannot be in the future")
    age = calculate_age(dob, today)
    if age < MIN_AGE:
        row.add_error(f"Employee must be at least {MIN_AGE} years old")
    if age > MAX_AGE:
        row.add_error(f"Date of Birth appears invalid (age > {MAX_AGE} years)")


def _validate_start_date(row: ImportRow, today: date) -> None:
    start = row.start_date
    if start is None:
        return
    if start > today:
        row.add_error("Start Date cannot be in the future")
    if start < years_before(today, MAX_SERVICE_YEARS):
        row.add_error(f"Start Date appears invalid (more than {MAX_SERVICE_YEARS} years ago)")
    if row.date_of_birth is not None and start < row.date_of_birth:
        row.add_error("Start Date cannot be before Date of Birth")


def validate_row(row: ImportRow, today: date | None = None) -> ImportRow:
    """Run every row rule against ``row`` in order, appending messages.

    Returns the same row for convenience.
    """
    today = today or date.today()

    for attr, label, required_msg in _REQUIRED_TEXT_FIELDS:
        value = getattr(row, attr)
        if _is_blank(value):
            row.add_error(required_msg)
        elif len(value) > FIELD_LIMITS[attr]:
            row.add_error(_too_long(label, attr))

    _validate_email(row)

    for attr, label in _OPTIONAL_TEXT_FIELDS:
        value = getattr(row, attr)
        if not _is_blank(value) and len(value) > FIELD_LIMITS[attr]:
            row.add_error(_too_long(label, attr))

    _validate_date_of_birth(row, today)
    _validate_start_date(row, today)
    return row
