from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import psycopg2
import psycopg2.errors

from ..errors import DuplicateKeyError, RecordNotFoundError, StoreError
from ..models.config_models import DatabaseConfig
from ..models.employee_record import EmployeeRecord
from .batch_insert import batch_insert
from .store import find_batch_duplicates

"""PostgreSQL RecordStore backed by psycopg2.

Every public method runs in its own transaction (``with conn:`` commits on
success and rolls back on error). The table is expected to exist with a
UNIQUE constraint on ``payroll_number``; that constraint is what finally
rejects a batch racing with another import.

Connection parameters resolve in this order:
    1. DATABASE_URL / PGDSN environment variables (whole DSN)
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the ``database`` section of the YAML config
"""

__all__ = [
    "COLUMNS",
    "PostgresRecordStore",
    "resolve_dsn",
    "connect_store",
]

logger = logging.getLogger(__name__)

COLUMNS: tuple[str, ...] = (
    "payroll_number",
    "forenames",
    "surname",
    "date_of_birth",
    "telephone",
    "mobile",
    "address",
    "address_2",
    "postcode",
    "email_home",
    "start_date",
    "created_date",
)
_UPDATABLE = COLUMNS[:-1]  # created_date is write-once
_SELECT_COLUMNS = ", ".join(("id",) + COLUMNS)
_TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")
_KEY_DETAIL_RE = re.compile(r"\(payroll_number\)=\((?P<key>[^)]*)\)")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_record(row: Sequence[Any]) -> EmployeeRecord:
    values = dict(zip(("id",) + COLUMNS, row, strict=True))
    return EmployeeRecord(**values)


def _record_values(record: EmployeeRecord, columns: Sequence[str] = COLUMNS) -> list[Any]:
    return [getattr(record, c) for c in columns]


def _duplicate_from_violation(e: psycopg2.Error, fallback: list[str]) -> DuplicateKeyError:
    detail = getattr(getattr(e, "diag", None), "message_detail", None) or ""
    m = _KEY_DETAIL_RE.search(detail)
    keys = [m.group("key")] if m else fallback
    return DuplicateKeyError(f"Payroll number already exists: {detail or e}", keys)


class PostgresRecordStore:
    """RecordStore over a psycopg2 connection (autocommit off)."""

    def __init__(self, connection: Any, table: str = "employees") -> None:
        if not _TABLE_NAME_RE.match(table):
            raise StoreError(f"invalid table name: {table!r}")
        self._conn = connection
        self._table = table

    @property
    def table(self) -> str:
        return self._table

    def _fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[tuple[Any, ...]]:
        try:
            with self._conn:
                with self._conn.cursor() as cur:
                    cur.execute(sql, params)
                    return cur.fetchall()
        except psycopg2.Error as e:
            raise StoreError(str(e)) from e

    def exists(self, payroll_number: str) -> bool:
        rows = self._fetch_all(
            f"SELECT 1 FROM {self._table} WHERE payroll_number = %s LIMIT 1",
            (payroll_number,),
        )
        return bool(rows)

    def add_one(self, record: EmployeeRecord) -> EmployeeRecord:
        self.add_many([record])
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
        keys = [r.payroll_number for r in records]
        logger.info("Adding %d employees in bulk", len(records))
        try:
            with self._conn:
                with self._conn.cursor() as cur:
                    cur.execute(
                        f"SELECT payroll_number FROM {self._table} WHERE payroll_number = ANY(%s)",
                        (keys,),
                    )
                    existing = [r[0] for r in cur.fetchall()]
                    if existing:
                        raise DuplicateKeyError(
                            f"Following payroll numbers already exist: {', '.join(existing)}",
                            existing,
                        )
                    result = batch_insert(
                        cur,
                        self._table,
                        COLUMNS,
                        [_record_values(r) for r in records],
                        returning=["id"],
                    )
        except psycopg2.errors.UniqueViolation as e:
            raise _duplicate_from_violation(e, keys) from e
        except psycopg2.Error as e:
            raise StoreError(str(e)) from e

        for record, (new_id,) in zip(records, result.returned_values or [], strict=True):
            record.id = new_id
        logger.info("Successfully added %d employees", result.inserted_rows)
        return result.inserted_rows

    def update(self, record: EmployeeRecord) -> EmployeeRecord:
        assignments = ", ".join(f"{c} = %s" for c in _UPDATABLE)
        sql = (
            f"UPDATE {self._table} SET {assignments} WHERE id = %s "
            f"RETURNING {_SELECT_COLUMNS}"
        )
        try:
            with self._conn:
                with self._conn.cursor() as cur:
                    cur.execute(sql, [*_record_values(record, _UPDATABLE), record.id])
                    row = cur.fetchone()
        except psycopg2.errors.UniqueViolation as e:
            raise _duplicate_from_violation(e, [record.payroll_number]) from e
        except psycopg2.Error as e:
            raise StoreError(str(e)) from e
        if row is None:
            raise RecordNotFoundError(f"Employee with ID {record.id} not found")
        return _row_to_record(row)

    def delete(self, record_id: int) -> bool:
        try:
            with self._conn:
                with self._conn.cursor() as cur:
                    cur.execute(f"DELETE FROM {self._table} WHERE id = %s", (record_id,))
                    deleted = cur.rowcount > 0
        except psycopg2.Error as e:
            raise StoreError(str(e)) from e
        if not deleted:
            logger.warning("Employee with ID %s not found for deletion", record_id)
        return deleted

    def get_by_id(self, record_id: int) -> EmployeeRecord | None:
        rows = self._fetch_all(
            f"SELECT {_SELECT_COLUMNS} FROM {self._table} WHERE id = %s", (record_id,)
        )
        return _row_to_record(rows[0]) if rows else None

    def get_by_payroll_number(self, payroll_number: str) -> EmployeeRecord | None:
        rows = self._fetch_all(
            f"SELECT {_SELECT_COLUMNS} FROM {self._table} WHERE payroll_number = %s",
            (payroll_number,),
        )
        return _row_to_record(rows[0]) if rows else None

    def get_all(self) -> list[EmployeeRecord]:
        rows = self._fetch_all(
            f"SELECT {_SELECT_COLUMNS} FROM {self._table} ORDER BY surname, forenames"
        )
        return [_row_to_record(r) for r in rows]

    def search(self, term: str | None) -> list[EmployeeRecord]:
        if term is None or not term.strip():
            return self.get_all()
        pattern = f"%{_escape_like(term)}%"
        rows = self._fetch_all(
            f"SELECT {_SELECT_COLUMNS} FROM {self._table} "
            "WHERE payroll_number ILIKE %s ESCAPE '\\' "
            "OR forenames ILIKE %s ESCAPE '\\' "
            "OR surname ILIKE %s ESCAPE '\\' "
            "ORDER BY surname, forenames",
            (pattern, pattern, pattern),
        )
        return [_row_to_record(r) for r in rows]

    def count(self) -> int:
        rows = self._fetch_all(f"SELECT COUNT(*) FROM {self._table}")
        return int(rows[0][0])


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def connect_store(db_cfg: DatabaseConfig) -> Iterator[PostgresRecordStore]:
    """Open a connection, yield a store over it, always close it.

    Raises:
        StoreError: the database cannot be reached
    """
    try:
        conn = psycopg2.connect(resolve_dsn(db_cfg))
    except psycopg2.Error as e:
        raise StoreError(f"cannot connect to database: {e}") from e
    conn.autocommit = False
    try:
        yield PostgresRecordStore(conn, table=db_cfg.table)
    finally:
        conn.close()
