"""Background worker that owns the SQLite connection."""

from __future__ import annotations

import logging
import os
import queue
import sqlite3
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from drakn.storage import get_database_storage_path
from drakn.tracks import Track, TrackRowError, create_tables

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsertTracks:
    """Store the audio files at these paths."""

    paths: tuple[Path, ...]

    def __init__(self, paths: Iterable[str | os.PathLike[str]]) -> None:
        object.__setattr__(self, "paths", tuple(Path(p) for p in paths))


@dataclass(frozen=True)
class QueryAllTracks:
    """Fetch every stored track."""


DatabaseCommand = InsertTracks | QueryAllTracks


@dataclass(frozen=True)
class TracksInserted:
    """The tracks that were newly stored; duplicates and failures are left out."""

    tracks: tuple[Track, ...]


@dataclass(frozen=True)
class TracksQueried:
    """The result of a query: the tracks found, or the error that stopped it."""

    tracks: tuple[Track, ...] = ()
    error: Exception | None = None


DatabaseEvent = TracksInserted | TracksQueried


class Database:
    """Executes database commands against one connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def handle(self, command: DatabaseCommand) -> DatabaseEvent:
        """Execute one command and return the event that reports its outcome."""
        match command:
            case InsertTracks(paths=paths):
                new_tracks = []
                for path in paths:
                    try:
                        track = Track.insert(self.conn, path)
                    except (OSError, ValueError, sqlite3.Error) as err:
                        log.error("Error when inserting track: %s", err)
                        continue
                    if track is not None:
                        new_tracks.append(track)
                return TracksInserted(tuple(new_tracks))
            case QueryAllTracks():
                try:
                    return TracksQueried(tracks=tuple(Track.select_all(self.conn)))
                except (sqlite3.Error, TrackRowError) as err:
                    return TracksQueried(error=err)
            case _:
                raise TypeError(f"unknown database command: {command!r}")

    def run(self, commands: queue.Queue, events: queue.Queue) -> None:
        """Handle commands from ``commands`` until a None arrives, posting events."""
        while (command := commands.get()) is not None:
            events.put(self.handle(command))

    @classmethod
    def start(
        cls, path: str | os.PathLike[str] | None = None
    ) -> tuple[queue.Queue, queue.Queue]:
        """Open the database, start a worker thread, and return its command and event queues.

        Put None on the command queue to stop the worker.
        """
        db_path = get_database_storage_path() if path is None else Path(path)
        conn = sqlite3.connect(db_path, check_same_thread=False)
        try:
            create_tables(conn)
        except sqlite3.Error:
            conn.close()
            raise

        commands: queue.Queue = queue.Queue()
        events: queue.Queue = queue.Queue()

        def serve() -> None:
            log.info("Database thread running with connection at %s", db_path)
            try:
                cls(conn).run(commands, events)
            finally:
                conn.close()

        threading.Thread(target=serve, name="drakn-database", daemon=True).start()
        return commands, events