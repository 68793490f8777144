"""Location of the local track database."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from pathlib import Path

from drakn.config import BINARY_NAME

SQLITE_FILE_NAME = "db.sqlite"


class StorageError(RuntimeError):
    """Raised when the local storage location cannot be determined or created."""


def get_database_storage_path(
    environ: Mapping[str, str] | None = None, platform: str | None = None
) -> Path:
    """Return the database file path, creating its directory if needed."""
    env = os.environ if environ is None else environ
    platform = sys.platform if platform is None else platform

    if platform.startswith("linux") or platform in ("darwin", "macos"):
        if "HOME" not in env:
            raise StorageError("HOME environment variable not found")
        base = Path(env["HOME"]) / ".local" / "share"
    elif platform in ("win32", "windows"):
        raise NotImplementedError("Windows local storage has not been implemented yet")
    else:
        raise NotImplementedError(f"unsupported platform: {platform}")

    directory = base / BINARY_NAME
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise StorageError(
            "Failed to create all directories for local share sqlite storage"
        ) from err

    return directory / SQLITE_FILE_NAME