from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the personnel import tool.

Built by ``personnel_import.config.loader.load_config`` from the validated YAML
document. Environment variables take precedence over ``DatabaseConfig`` when a
connection is opened.
"""

__all__ = [
    "DatabaseConfig",
    "ImportConfig",
]


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection settings, used as fallback for unset env vars."""
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None
    table: str = "employees"


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logs_directory: str = "./logs"
    preview_limit: int = 10
