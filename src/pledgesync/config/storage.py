"""Where the snapshot database lives."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DATABASE_FILENAME: Final[str] = "pledgesync.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def data_dir() -> Path:
    """``PLEDGESYNC_DATA_DIR``, else ``pledgesync`` under the XDG data home."""

    override = os.getenv("PLEDGESYNC_DATA_DIR")
    if override:
        return Path(override).expanduser().resolve()
    xdg_data_home = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"
    return (base / "pledgesync").expanduser().resolve()


def get_database_config() -> DatabaseConfig:
    """``DATABASE_URI`` if set; otherwise a SQLite file in :func:`data_dir`, created on demand."""

    uri = os.getenv("DATABASE_URI")
    if uri:
        return DatabaseConfig(uri=uri)
    directory = data_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{directory / DATABASE_FILENAME}")
