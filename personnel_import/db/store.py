from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from ..errors import DuplicateKeyError, RecordNotFoundError, StoreError
from ..models.employee_record import EmployeeRecord

"""RecordStore protocol consumed by the import orchestrator.

Implementations: ``MemoryRecordStore`` (dict-backed) and
``PostgresRecordStore`` (psycopg2). ``add_many`` is all-or-nothing: it rejects
the whole batch on any in-batch or persisted payroll number collision.
"""

__all__ = [
    "RecordStore",
    "DuplicateKeyError",
    "RecordNotFoundError",
    "StoreError",
    "find_batch_duplicates",
    "sort_records",
]


@runtime_checkable
class RecordStore(Protocol):
    def exists(self, payroll_number: str) -> bool: ...

    def add_one(self, record: EmployeeRecord) -> EmployeeRecord: ...

    def add_many(self, records: Sequence[EmployeeRecord]) -> int: ...

    def update(self, record: EmployeeRecord) -> EmployeeRecord: ...

    def delete(self, record_id: int) -> bool: ...

    def get_by_id(self, record_id: int) -> EmployeeRecord | None: ...

    def get_by_payroll_number(self, payroll_number: str) -> EmployeeRecord | None: ...

    def get_all(self) -> list[EmployeeRecord]: ...

    def search(self, term: str | None) -> list[EmployeeRecord]: ...

    def count(self) -> int: ...


def find_batch_duplicates(records: Iterable[EmployeeRecord]) -> list[str]:
    """Payroll numbers occurring more than once, in first-seen order."""
    counts = Counter(r.payroll_number for r in records)
    return [key for key, n in counts.items() if n > 1]


def sort_records(records: Iterable[EmployeeRecord]) -> list[EmployeeRecord]:
    return sorted(records, key=lambda r: r.sort_key)
