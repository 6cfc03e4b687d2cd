from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime

"""EmployeeRecord: the persisted personnel entity.

Column widths mirror the ``employees`` table; ``FIELD_LIMITS`` is shared by the
row validators so that anything that validates also fits the table.
"""

__all__ = [
    "EmployeeRecord",
    "FIELD_LIMITS",
]

FIELD_LIMITS: dict[str, int] = {
    "payroll_number": 50,
    "forenames": 100,
    "surname": 100,
    "telephone": 20,
    "mobile": 20,
    "address": 200,
    "address_2": 100,
    "postcode": 20,
    "email_home": 100,
}


@dataclass
class EmployeeRecord:
    """Persisted employee row.

    ``id`` is ``None`` until a store assigns it on creation. ``created_date`` is
    set once at commit and never changed afterwards.
    """
    payroll_number: str
    forenames: str
    surname: str
    date_of_birth: date
    address: str
    postcode: str
    email_home: str
    start_date: date
    telephone: str | None = None
    mobile: str | None = None
    address_2: str | None = None
    created_date: datetime | None = None
    id: int | None = None

    @property
    def full_name(self) -> str:
        return f"{self.forenames} {self.surname}"

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.surname, self.forenames)

    def copy(self) -> EmployeeRecord:
        return replace(self)
