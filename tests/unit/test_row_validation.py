from __future__ import annotations

from datetime import date, timedelta

import pytest

from personnel_import.models.import_row import ImportRow
from personnel_import.validation.dates import years_before
from personnel_import.validation.rules import calculate_age, is_valid_email, validate_row

TODAY = date(2024, 6, 15)


def _row(**overrides) -> ImportRow:
    values = dict(
        row_number=1,
        payroll_number="TEST01",
        forenames="John",
        surname="Doe",
        address="123 Test St",
        postcode="AB12 3CD",
        email_home="john.doe@hotmail.co.uk",
        date_of_birth=date(1990, 3, 15),
        start_date=date(2020, 1, 1),
    )
    values.update(overrides)
    return ImportRow(**values)


def test_clean_row_is_valid():
    row = validate_row(_row(), today=TODAY)
    assert row.is_valid
    assert row.validation_errors == []


def test_validity_flag_tracks_error_list():
    row = _row()
    assert row.is_valid
    row.add_error("x")
    assert not row.is_valid


@pytest.mark.parametrize(
    "field, expected",
    [
        ("payroll_number", "Payroll Number is required"),
        ("forenames", "Forenames are required"),
        ("surname", "Surname is required"),
        ("address", "Address is required"),
        ("postcode", "Postcode is required"),
        ("email_home", "Email is required"),
    ],
)
def test_required_fields(field, expected):
    row = validate_row(_row(**{field: None}), today=TODAY)
    assert row.validation_errors == [expected]


@pytest.mark.parametrize(
    "field, limit, label",
    [
        ("payroll_number", 50, "Payroll Number"),
        ("forenames", 100, "Forenames"),
        ("surname", 100, "Surname"),
        ("address", 200, "Address"),
        ("postcode", 20, "Postcode"),
        ("telephone", 20, "Telephone"),
        ("mobile", 20, "Mobile"),
        ("address_2", 100, "Address line 2"),
    ],
)
def test_length_limits(field, limit, label):
    ok = validate_row(_row(**{field: "x" * limit}), today=TODAY)
    assert ok.is_valid
    too_long = validate_row(_row(**{field: "x" * (limit + 1)}), today=TODAY)
    assert too_long.validation_errors == [f"{label} cannot exceed {limit} characters"]


def test_optional_fields_absent_is_fine():
    row = validate_row(_row(telephone=None, mobile=None, address_2=None), today=TODAY)
    assert row.is_valid


def test_email_too_long():
    email = "a" * 60 + "@" + "b" * 40 + ".com"
    row = validate_row(_row(email_home=email), today=TODAY)
    assert row.validation_errors == ["Email cannot exceed 100 characters"]


@pytest.mark.parametrize(
    "email",
    ["plainaddress", "john@", "@hotmail.co.uk", "John Doe <john@hotmail.co.uk>", "a@b@hotmail.co.uk"],
)
def test_invalid_email_shapes(email):
    assert not is_valid_email(email)
    row = validate_row(_row(email_home=email), today=TODAY)
    assert row.validation_errors == ["Email format is invalid"]


def test_valid_email_shape():
    assert is_valid_email("nomadic20@hotmail.co.uk")


@pytest.mark.parametrize("email", ["jane@corp.local", "jane@server", "jane.smith@hr.localhost"])
def test_intranet_domains_accepted(email):
    assert is_valid_email(email)
    assert validate_row(_row(email_home=email), today=TODAY).is_valid


def test_errors_accumulate_in_order():
    row = validate_row(
        _row(payroll_number=None, surname=None, email_home="bad", postcode="P" * 21),
        today=TODAY,
    )
    assert row.validation_errors == [
        "Payroll Number is required",
        "Surname is required",
        "Postcode cannot exceed 20 characters",
        "Email format is invalid",
    ]


def test_age_exactly_sixteen_today_is_valid():
    dob = years_before(TODAY, 16)
    row = validate_row(_row(date_of_birth=dob, start_date=TODAY), today=TODAY)
    assert row.is_valid, row.validation_errors


def test_age_one_day_short_of_sixteen_is_invalid():
    dob = years_before(TODAY, 16) + timedelta(days=1)
    row = validate_row(_row(date_of_birth=dob, start_date=TODAY), today=TODAY)
    assert "Employee must be at least 16 years old" in row.validation_errors


def test_age_over_hundred():
    row = validate_row(_row(date_of_birth=date(1920, 1, 1)), today=TODAY)
    assert "Date of Birth appears invalid (age > 100 years)" in row.validation_errors


def test_date_of_birth_in_future():
    row = validate_row(_row(date_of_birth=TODAY + timedelta(days=1)), today=TODAY)
    assert "Date of Birth cannot be in the future" in row.validation_errors
    assert "Employee must be at least 16 years old" in row.validation_errors


def test_start_date_in_future():
    row = validate_row(_row(start_date=TODAY + timedelta(days=1)), today=TODAY)
    assert row.validation_errors == ["Start Date cannot be in the future"]


def test_start_date_more_than_fifty_years_ago():
    row = validate_row(
        _row(date_of_birth=date(1950, 1, 1), start_date=date(1970, 1, 1)), today=TODAY
    )
    assert row.validation_errors == ["Start Date appears invalid (more than 50 years ago)"]


def test_start_date_before_birth():
    row = validate_row(
        _row(date_of_birth=date(1990, 3, 15), start_date=date(1990, 3, 14)), today=TODAY
    )
    assert row.validation_errors == ["Start Date cannot be before Date of Birth"]


def test_missing_dates_are_not_reflagged():
    # the date parser already recorded "... is required"
    row = validate_row(_row(date_of_birth=None, start_date=None), today=TODAY)
    assert row.is_valid


def test_calculate_age_birthday_adjustment():
    assert calculate_age(date(1990, 6, 15), TODAY) == 34
    assert calculate_age(date(1990, 6, 16), TODAY) == 33
