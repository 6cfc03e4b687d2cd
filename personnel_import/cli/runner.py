from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, load_config
from ..db.memory_store import MemoryRecordStore
from ..db.postgres_store import connect_store
from ..db.store import RecordStore
from ..errors import ConfigError, StoreError
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import ImportConfig
from ..services.orchestrator import import_csv, validate_csv
from ..services.progress import ProgressTracker
from ..services.summary import render_summary_line, render_validation_summary_line

"""CLI entrypoint.

Sub-commands:
- ``import FILE``   parse, validate and commit a personnel CSV export
- ``validate FILE`` dry run; report what an import would do
- ``search [TERM]`` list stored records matching TERM (all when omitted)

Exit codes: 0 clean run, 2 finished with rejected rows, 1 fatal (config,
missing file, unreadable CSV, database unreachable).
Set ``DISABLE_DB_CONNECT=1`` to run against an empty in-memory store.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="personnel-import", description="Personnel CSV -> database importer")
    p.add_argument("--config", default=None, help=f"YAML config path (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import a CSV file")
    imp.add_argument("file", type=Path)

    val = sub.add_parser("validate", help="Validate a CSV file without importing")
    val.add_argument("file", type=Path)

    search = sub.add_parser("search", help="Search stored records")
    search.add_argument("term", nargs="?", default=None)
    return p.parse_args(argv)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load ``.env`` so that its DB variables win over the YAML config."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _load_config(path_arg: str | None) -> ImportConfig:
    if path_arg is None and not DEFAULT_CONFIG_PATH.exists():
        return ImportConfig()
    return load_config(Path(path_arg) if path_arg else DEFAULT_CONFIG_PATH)


@contextmanager
def _open_store(cfg: ImportConfig) -> Iterator[RecordStore]:
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> in-memory store")
        yield MemoryRecordStore()
        return
    with connect_store(cfg.database) as store:
        yield store


def _run_import(cfg: ImportConfig, path: Path, store: RecordStore) -> int:
    error_log = ErrorLogBuffer(cfg.logs_directory)
    with path.open("rb") as f, ProgressTracker() as progress:
        report = import_csv(f, store, file_name=path.name, error_log=error_log, on_row=progress)

    for line in report.warnings:
        logger.warning(line)
    for line in report.errors:
        logger.error(line)
    for record in report.imported_records:
        logger.info(f"imported id={record.id} payroll={record.payroll_number} name={record.surname}, {record.forenames}")
    log_summary(render_summary_line(report)[len("SUMMARY "):])

    written = error_log.flush()
    if written is not None:
        logger.info(f"error log written: {written}")

    if report.fatal:
        return EXIT_FATAL
    if report.failure_count > 0 or report.errors:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS


def _run_validate(cfg: ImportConfig, path: Path, store: RecordStore) -> int:
    with path.open("rb") as f:
        report = validate_csv(f, store, preview_limit=cfg.preview_limit)

    logger.info(report.message)
    for line in report.validation_errors:
        logger.error(line)
    for row in report.preview_rows:
        logger.info(f"preview row={row.row_number} payroll={row.payroll_number} name={row.surname}, {row.forenames}")
    log_summary(render_validation_summary_line(report)[len("SUMMARY "):])

    if report.fatal:
        return EXIT_FATAL
    return EXIT_SUCCESS if report.is_valid else EXIT_PARTIAL_FAILURE


def _run_search(store: RecordStore, term: str | None) -> int:
    records = store.search(term)
    for r in records:
        logger.info(f"id={r.id} payroll={r.payroll_number} name={r.surname}, {r.forenames} email={r.email_home}")
    log_summary(f"records={len(records)}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    app_logger = setup_logging()

    # None のときのみ sys.argv を読む (tests pass [] explicitly)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(app_logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    file_path: Path | None = getattr(args, "file", None)
    if file_path is not None and not file_path.is_file():
        logger.error(f"file not found: {file_path}")
        return EXIT_FATAL

    try:
        with _open_store(cfg) as store:
            if args.command == "import":
                return _run_import(cfg, file_path, store)
            if args.command == "validate":
                return _run_validate(cfg, file_path, store)
            return _run_search(store, args.term)
    except StoreError as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL
