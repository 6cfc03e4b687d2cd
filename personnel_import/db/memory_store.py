from __future__ import annotations

import logging
from collections.abc import Sequence

from ..errors import DuplicateKeyError, RecordNotFoundError
from ..models.employee_record import EmployeeRecord
from .store import find_batch_duplicates, sort_records

"""Dict-backed RecordStore for unit tests and DB-less runs."""

logger = logging.getLogger(__name__)


class MemoryRecordStore:
    """In-memory RecordStore.

    Records are copied in and out so callers cannot mutate stored state. The
    payroll number index plays the role of the table's unique constraint.
    """

    def __init__(self, records: Sequence[EmployeeRecord] | None = None) -> None:
        self._records: dict[int, EmployeeRecord] = {}
        self._by_payroll: dict[str, int] = {}
        self._next_id = 1
        if records:
            self.add_many(records)

    def _insert(self, record: EmployeeRecord) -> None:
        record.id = self._next_id
        self._next_id += 1
        self._records[record.id] = record.copy()
        self._by_payroll[record.payroll_number] = record.id

    def exists(self, payroll_number: str) -> bool:
        return payroll_number in self._by_payroll

    def add_one(self, record: EmployeeRecord) -> EmployeeRecord:
        if self.exists(record.payroll_number):
            raise DuplicateKeyError(
                f"Employee with payroll number {record.payroll_number} already exists",
                [record.payroll_number],
            )
        self._insert(record)
        return record

    def add_many(self, records: Sequence[EmployeeRecord]) -> int:
        if not records:
            logger.warning("add_many called with an empty collection")
            return 0
        dupes = find_batch_duplicates(records)
        if dupes:
            raise DuplicateKeyError(
                f"Duplicate payroll numbers in batch: {', '.join(dupes)}", dupes
            )
        existing = [r.payroll_number for r in records if self.exists(r.payroll_number)]
        if existing:
            raise DuplicateKeyError(
                f"Following payroll numbers already exist: {', '.join(existing)}", existing
            )
        for record in records:
            self._insert(record)
        return len(records)

    def update(self, record: EmployeeRecord) -> EmployeeRecord:
        if record.id is None or record.id not in self._records:
            raise RecordNotFoundError(f"Employee with ID {record.id} not found")
        current = self._records[record.id]
        owner = self._by_payroll.get(record.payroll_number)
        if owner is not None and owner != record.id:
            raise DuplicateKeyError(
                f"Employee with payroll number {record.payroll_number} already exists",
                [record.payroll_number],
            )
        updated = record.copy()
        # created_date is immutable after the first commit
        updated.created_date = current.created_date
        del self._by_payroll[current.payroll_number]
        self._by_payroll[updated.payroll_number] = updated.id
        self._records[updated.id] = updated
        return updated.copy()

    def delete(self, record_id: int) -> bool:
        record = self._records.pop(record_id, None)
        if record is None:
            return False
        del self._by_payroll[record.payroll_number]
        return True

    def get_by_id(self, record_id: int) -> EmployeeRecord | None:
        record = self._records.get(record_id)
        return record.copy() if record else None

    def get_by_payroll_number(self, payroll_number: str) -> EmployeeRecord | None:
        record_id = self._by_payroll.get(payroll_number)
        return self.get_by_id(record_id) if record_id is not None else None

    def get_all(self) -> list[EmployeeRecord]:
        return sort_records(r.copy() for r in self._records.values())

    def search(self, term: str | None) -> list[EmployeeRecord]:
        if term is None or not term.strip():
            return self.get_all()
        needle = term.casefold()
        return sort_records(
            r.copy()
            for r in self._records.values()
            if needle in r.payroll_number.casefold()
            or needle in r.forenames.casefold()
            or needle in r.surname.casefold()
        )

    def count(self) -> int:
        return len(self._records)
