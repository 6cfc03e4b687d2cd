from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

"""Batched INSERT helper on top of psycopg2.extras.execute_values.

The caller owns the transaction: nothing here commits or rolls back, so a
failing page leaves the surrounding transaction to be rolled back as a whole.
"""

__all__ = [
    "InsertResult",
    "batch_insert",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    returned_values: list[tuple[Any, ...]] | None = None
    elapsed_seconds: float = 0.0


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    returning: Sequence[str] | None = None,
    page_size: int = 1000,
) -> InsertResult:
    """Insert ``rows`` into ``table`` with one multi-row VALUES statement per page.

    Parameters
    ----------
    cursor: psycopg2 cursor inside an open transaction
    table: target table (trusted identifier from configuration)
    columns: insert columns, in row order
    rows: row value sequences
    returning: columns to return per inserted row (e.g. ``["id"]``), in input order
    page_size: rows per statement

    Driver errors propagate unchanged so callers can classify them.
    """
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0, returned_values=[] if returning else None)

    cols_sql = ",".join(f'"{c}"' for c in columns)
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"
    if returning:
        sql += " RETURNING " + ",".join(f'"{c}"' for c in returning)

    start = time.perf_counter()
    returned = execute_values(cursor, sql, rows_list, page_size=page_size, fetch=bool(returning))
    elapsed = time.perf_counter() - start
    logger.debug("batch insert table=%s rows=%d elapsed=%.4fs", table, len(rows_list), elapsed)

    return InsertResult(
        inserted_rows=len(rows_list),
        returned_values=list(returned) if returning else None,
        elapsed_seconds=elapsed,
    )
