from __future__ import annotations

"""CSV header names of the personnel export and the fields they feed.

Headers are matched exactly (case-sensitive) after whitespace trimming.
"""

__all__ = [
    "COLUMN_MAP",
    "DATE_COLUMNS",
]

# ImportRow attribute -> CSV header
COLUMN_MAP: dict[str, str] = {
    "payroll_number": "Personnel_Records.Payroll_Number",
    "forenames": "Personnel_Records.Forenames",
    "surname": "Personnel_Records.Surname",
    "date_of_birth_raw": "Personnel_Records.Date_of_Birth",
    "telephone": "Personnel_Records.Telephone",
    "mobile": "Personnel_Records.Mobile",
    "address": "Personnel_Records.Address",
    "address_2": "Personnel_Records.Address_2",
    "postcode": "Personnel_Records.Postcode",
    "email_home": "Personnel_Records.EMail_Home",
    "start_date_raw": "Personnel_Records.Start_Date",
}

# raw attribute -> (parsed attribute, label used in error messages)
DATE_COLUMNS: dict[str, tuple[str, str]] = {
    "date_of_birth_raw": ("date_of_birth", "Date of Birth"),
    "start_date_raw": ("start_date", "Start Date"),
}
