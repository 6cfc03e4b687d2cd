from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

from ..models.import_row import ImportRow

"""Row progress display with tqdm (TTY only).

The bar counts parsed rows; it is disabled when stdout is not a TTY so that
CI logs stay free of control sequences. Instances are callable and plug into
``parse_csv(on_row=...)`` / ``import_csv(on_row=...)``.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Counts parsed rows and invalid rows, optionally drawing a tqdm bar."""

    def __init__(self, *, description: str = "Parsing rows", enabled: bool | None = None) -> None:
        self.description = description
        self.rows = 0
        self.invalid_rows = 0
        self.enabled = is_tty_enabled() if enabled is None else enabled
        self.pbar: Any | None = None
        if self.enabled:
            self.pbar = tqdm(
                total=None,
                desc=description,
                unit="row",
                leave=True,
                ncols=80,
                ascii=True,
            )

    def __call__(self, row: ImportRow) -> None:
        self.rows += 1
        if not row.is_valid:
            self.invalid_rows += 1
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(invalid=self.invalid_rows)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
