"""The track model and its SQLite table."""

from __future__ import annotations

import logging
import os
import re
import sqlite3
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from drakn.hashing import hash_file
from drakn.metadata import MetadataError, extract_track_duration, extract_track_metadata

log = logging.getLogger(__name__)

TRACKS_TABLE = """
CREATE TABLE IF NOT EXISTS tracks (
    id TEXT PRIMARY KEY,
    path TEXT NOT NULL,
    hash TEXT UNIQUE,
    duration_secs REAL NOT NULL,
    valid BOOLEAN NOT NULL,

    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""

PLAYLISTS_TABLE = """
CREATE TABLE IF NOT EXISTS playlists (
    id TEXT PRIMARY KEY,
    parent_id TEXT,

    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,

    FOREIGN KEY (parent_id) REFERENCES playlists(id)
);
"""

_INSERT_TRACK = "INSERT INTO tracks VALUES(?, ?, ?, ?, ?, ?, ?) ON CONFLICT DO NOTHING"
_SELECT_TRACKS = (
    "SELECT id, path, hash, duration_secs, valid, created_at, updated_at FROM tracks"
)

_DATETIME = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[T ](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?\s*(?P<tz>UTC|Z|[+-]\d{2}:?\d{2})"
)


class TrackRowError(ValueError):
    """Raised when a database row cannot be turned into a track."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_datetime(value: datetime) -> str:
    value = value.astimezone(timezone.utc)
    text = value.strftime("%Y-%m-%d %H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond:06d}"
    return text + " UTC"


def _parse_datetime(text: str) -> datetime:
    match = _DATETIME.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")

    parsed = datetime.fromisoformat(f"{match['date']}T{match['time']}")
    fraction = (match["frac"] or "").ljust(6, "0")[:6]

    zone = match["tz"]
    if zone in ("UTC", "Z"):
        tz = timezone.utc
    else:
        digits = zone[1:].replace(":", "")
        offset = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
        tz = timezone(-offset if zone[0] == "-" else offset)

    return parsed.replace(microsecond=int(fraction), tzinfo=tz).astimezone(timezone.utc)


@dataclass
class Track:
    """An audio file known to the library."""

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    path: Path = field(default_factory=Path)
    hash: str | None = None
    duration_secs: float = 0.0
    valid: bool = True
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    @classmethod
    def from_row(cls, row: Mapping[str, Any] | sqlite3.Row) -> Track:
        """Build a track from a row of the tracks table."""
        try:
            return cls(
                id=uuid.UUID(row["id"]),
                path=Path(row["path"]),
                hash=row["hash"],
                duration_secs=float(row["duration_secs"]),
                valid=bool(row["valid"]),
                created_at=_parse_datetime(row["created_at"]),
                updated_at=_parse_datetime(row["updated_at"]),
            )
        except (ValueError, TypeError, AttributeError, KeyError, IndexError) as err:
            raise TrackRowError(f"cannot read track row: {err}") from err

    @classmethod
    def insert(cls, conn: sqlite3.Connection, path: str | os.PathLike[str]) -> Track | None:
        """Hash and probe a file, store it, and return it; None if it is already stored."""
        path = Path(path)
        file_hash = hash_file(path)

        duration = extract_track_duration(extract_track_metadata(path))
        if duration is None:
            raise MetadataError(f"Failed to get duration from track {str(path)!r}")

        track = cls(path=path, hash=file_hash, duration_secs=duration)

        with conn:
            cursor = conn.execute(
                _INSERT_TRACK,
                (
                    str(track.id),
                    str(track.path),
                    track.hash,
                    track.duration_secs,
                    track.valid,
                    _format_datetime(track.created_at),
                    _format_datetime(track.updated_at),
                ),
            )

        if cursor.rowcount == 0:
            log.debug("Skipped duplicate track: %s", path)
            return None

        log.debug("Inserted track into database: %s", path)
        return track

    @classmethod
    def select_all(cls, conn: sqlite3.Connection) -> list[Track]:
        """Return every stored track."""
        cursor = conn.cursor()
        cursor.row_factory = sqlite3.Row
        tracks = [cls.from_row(row) for row in cursor.execute(_SELECT_TRACKS)]
        log.debug("Found %d track(s) from table query", len(tracks))
        return tracks


def create_tables(conn: sqlite3.Connection) -> None:
    """Create the tracks and playlists tables if they do not exist."""
    conn.executescript(f"BEGIN;\n{TRACKS_TABLE}\n{PLAYLISTS_TABLE}\nCOMMIT;")