from __future__ import annotations

import io
from datetime import date

import pytest

from personnel_import.errors import CsvFormatError
from personnel_import.services.parser import parse_csv


def test_parse_coop08_row(coop08_csv, today):
    rows = parse_csv(io.BytesIO(coop08_csv), today=today)
    assert len(rows) == 1
    row = rows[0]
    assert row.is_valid, row.validation_errors
    assert row.row_number == 1
    assert row.payroll_number == "COOP08"
    assert row.forenames == "John"
    assert row.surname == "William"
    assert row.date_of_birth == date(1955, 1, 26)
    assert row.start_date == date(2013, 4, 18)
    assert row.date_of_birth_raw == "26/01/1955"
    assert row.postcode == "GU12 6JW"
    assert row.email_home == "nomadic20@hotmail.co.uk"


def test_blank_payroll_number_marks_row_invalid(make_csv, make_line, today):
    rows = parse_csv(make_csv(make_line(payroll="")), today=today)
    assert len(rows) == 1
    assert not rows[0].is_valid
    assert any("Payroll Number is required" in e for e in rows[0].validation_errors)


def test_uk_dates(make_csv, make_line, today):
    rows = parse_csv(make_csv(make_line(dob="15/03/1990")), today=today)
    assert rows[0].date_of_birth == date(1990, 3, 15)


def test_validity_matches_error_list(make_csv, make_line, today):
    data = make_csv(
        make_line(payroll="A1"),
        make_line(payroll="A2", surname=""),
        make_line(payroll="A3", dob="99/99/9999"),
    )
    for row in parse_csv(data, today=today):
        assert row.is_valid == (row.validation_errors == [])


def test_row_numbers_follow_non_blank_lines(make_csv, make_line, today):
    data = make_csv(make_line(payroll="A1"), "", make_line(payroll="A2"), "  ", make_line(payroll="A3"))
    rows = parse_csv(data, today=today)
    assert [r.row_number for r in rows] == [1, 2, 3]
    assert [r.payroll_number for r in rows] == ["A1", "A2", "A3"]


def test_values_are_trimmed_and_blank_becomes_none(make_csv, make_line, today):
    rows = parse_csv(make_csv(make_line(payroll="  TEST01  ", mobile="   ")), today=today)
    assert rows[0].payroll_number == "TEST01"
    assert rows[0].mobile is None
    assert rows[0].is_valid


def test_missing_optional_column_yields_none(today):
    header = (
        "Personnel_Records.Payroll_Number,Personnel_Records.Forenames,Personnel_Records.Surname,"
        "Personnel_Records.Date_of_Birth,Personnel_Records.Address,Personnel_Records.Postcode,"
        "Personnel_Records.EMail_Home,Personnel_Records.Start_Date"
    )
    line = "P1,Jane,Smith,01/02/1985,1 High St,AB1 2CD,jane@hotmail.co.uk,03/04/2015"
    rows = parse_csv(f"{header}\n{line}\n".encode(), today=today)
    assert rows[0].is_valid, rows[0].validation_errors
    assert rows[0].telephone is None
    assert rows[0].mobile is None
    assert rows[0].address_2 is None


def test_missing_required_column_flags_field(today):
    header = "Personnel_Records.Payroll_Number,Personnel_Records.Forenames"
    rows = parse_csv(f"{header}\nP1,Jane\n".encode(), today=today)
    errors = rows[0].validation_errors
    assert "Surname is required" in errors
    assert "Date of Birth is required" in errors
    assert "Start Date is required" in errors


def test_headers_match_case_sensitively(make_line, today):
    header = (
        "personnel_records.payroll_number,Personnel_Records.Forenames,Personnel_Records.Surname,"
        "Personnel_Records.Date_of_Birth,Personnel_Records.Telephone,Personnel_Records.Mobile,"
        "Personnel_Records.Address,Personnel_Records.Address_2,Personnel_Records.Postcode,"
        "Personnel_Records.EMail_Home,Personnel_Records.Start_Date"
    )
    rows = parse_csv(f"{header}\n{make_line()}\n".encode(), today=today)
    assert rows[0].payroll_number is None
    assert "Payroll Number is required" in rows[0].validation_errors


def test_columns_in_any_order(today):
    header = (
        "Personnel_Records.Start_Date,Personnel_Records.EMail_Home,Personnel_Records.Postcode,"
        "Personnel_Records.Address,Personnel_Records.Surname,Personnel_Records.Forenames,"
        "Personnel_Records.Date_of_Birth,Personnel_Records.Payroll_Number"
    )
    line = "03/04/2015,jane@hotmail.co.uk,AB1 2CD,1 High St,Smith,Jane,01/02/1985,P9"
    rows = parse_csv(f"{header}\n{line}\n".encode(), today=today)
    assert rows[0].payroll_number == "P9"
    assert rows[0].start_date == date(2015, 4, 3)
    assert rows[0].is_valid


def test_blank_date_reported_once(make_csv, make_line, today):
    rows = parse_csv(make_csv(make_line(dob="")), today=today)
    assert rows[0].validation_errors.count("Date of Birth is required") == 1


def test_invalid_date_names_value(make_csv, make_line, today):
    rows = parse_csv(make_csv(make_line(start="32/13/2020")), today=today)
    assert rows[0].start_date is None
    assert any("Start Date '32/13/2020'" in e for e in rows[0].validation_errors)


def test_overlong_row_becomes_parse_failure(make_csv, make_line, today):
    data = make_csv(make_line(payroll="A1"), make_line(payroll="A2") + ",extra,fields", make_line(payroll="A3"))
    rows = parse_csv(data, today=today)
    assert len(rows) == 3
    bad = rows[1]
    assert bad.row_number == 2
    assert bad.payroll_number is None
    assert len(bad.validation_errors) == 1
    assert bad.validation_errors[0].startswith("Failed to parse row:")
    assert rows[0].is_valid and rows[2].is_valid


def test_trailing_comma_on_every_line_still_imports(make_csv, make_line, today):
    data = make_csv(make_line(payroll="A1") + ",", make_line(payroll="A2") + ",")
    rows = parse_csv(data, today=today)
    assert [r.payroll_number for r in rows] == ["A1", "A2"]
    assert all(r.is_valid for r in rows)
    assert rows[0].start_date is not None


def test_short_row_pads_missing_fields(make_csv, today):
    rows = parse_csv(make_csv("P1,Jane,Smith,01/02/1985"), today=today)
    errors = rows[0].validation_errors
    assert "Address is required" in errors
    assert "Email is required" in errors
    assert "Start Date is required" in errors


def test_semicolon_delimited_file(make_line, today):
    from personnel_import.csvfile.columns import COLUMN_MAP

    header = ";".join(
        COLUMN_MAP[a]
        for a in (
            "payroll_number", "forenames", "surname", "date_of_birth_raw", "telephone",
            "mobile", "address", "address_2", "postcode", "email_home", "start_date_raw",
        )
    )
    line = make_line().replace(",", ";")
    rows = parse_csv(f"{header}\n{line}\n".encode(), today=today)
    assert rows[0].is_valid, rows[0].validation_errors


def test_empty_and_header_only_inputs(make_csv):
    assert parse_csv(b"") == []
    assert parse_csv(make_csv()) == []


def test_text_stream_input(coop08_csv, today):
    rows = parse_csv(io.StringIO(coop08_csv.decode("utf-8")), today=today)
    assert rows[0].payroll_number == "COOP08"


def test_unreadable_stream_raises():
    with pytest.raises(CsvFormatError):
        parse_csv(b"\xff\xfe\xfa\xfb")


def test_on_row_callback_sees_every_row(make_csv, make_line, today):
    seen = []
    parse_csv(make_csv(make_line(payroll="A1"), make_line(payroll="")), today=today, on_row=seen.append)
    assert [r.row_number for r in seen] == [1, 2]
    assert [r.is_valid for r in seen] == [True, False]
