import shutil
import sqlite3
import uuid
import wave
from datetime import datetime, timezone

import pytest

from drakn.hashing import hash_file
from drakn.metadata import MetadataError
from drakn.tracks import Track, TrackRowError, create_tables


def write_wav(path, rate=8000, seconds=1, fill=0):
    with wave.open(str(path), "wb") as handle:
        handle.setnchannels(1)
        handle.setsampwidth(2)
        handle.setframerate(rate)
        handle.writeframes(bytes([fill]) * 2 * rate * seconds)
    return path


@pytest.fixture
def conn(tmp_path):
    connection = sqlite3.connect(tmp_path / "db.sqlite")
    create_tables(connection)
    yield connection
    connection.close()


def row(**overrides):
    base = {
        "id": str(uuid.uuid4()),
        "path": "/music/song.flac",
        "hash": "abc",
        "duration_secs": 3.5,
        "valid": 1,
        "created_at": "2024-01-02 03:04:05.123456 UTC",
        "updated_at": "2024-01-02 03:04:05 UTC",
    }
    base.update(overrides)
    return base


def test_create_tables(conn):
    create_tables(conn)
    names = {
        name for (name,) in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    }

    assert {"tracks", "playlists"} <= names


def test_insert_returns_track(conn, tmp_path):
    path = write_wav(tmp_path / "a.wav")

    track = Track.insert(conn, path)

    assert track.path == path
    assert track.hash == hash_file(path)
    assert track.duration_secs == 1.0
    assert track.valid is True


def test_duplicate_insert_is_skipped(conn, tmp_path):
    path = write_wav(tmp_path / "a.wav")

    assert Track.insert(conn, path) is not None
    assert Track.insert(conn, path) is None
    assert conn.execute("SELECT COUNT(*) FROM tracks").fetchone()[0] == 1


def test_same_content_elsewhere_is_skipped(conn, tmp_path):
    original = write_wav(tmp_path / "a.wav")
    copy = tmp_path / "b.wav"
    shutil.copy(original, copy)

    Track.insert(conn, original)

    assert Track.insert(conn, copy) is None


def test_select_all_round_trip(conn, tmp_path):
    first = Track.insert(conn, write_wav(tmp_path / "a.wav", fill=1))
    second = Track.insert(conn, write_wav(tmp_path / "b.wav", fill=2))

    stored = Track.select_all(conn)

    assert sorted(stored, key=lambda t: str(t.path)) == [first, second]


def test_select_all_empty(conn):
    assert Track.select_all(conn) == []


def test_insert_non_audio(conn, tmp_path):
    path = tmp_path / "readme.mp3"
    path.write_text("not audio at all")

    with pytest.raises(MetadataError):
        Track.insert(conn, path)


def test_insert_missing_file(conn, tmp_path):
    with pytest.raises(FileNotFoundError):
        Track.insert(conn, tmp_path / "absent.wav")


def test_from_row_parses_fields():
    data = row()
    track = Track.from_row(data)

    assert track.id == uuid.UUID(data["id"])
    assert str(track.path) == data["path"]
    assert track.valid is True
    assert track.created_at == datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)
    assert track.updated_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_from_row_accepts_rfc3339_and_nanoseconds():
    track = Track.from_row(
        row(
            created_at="2024-01-02T03:04:05Z",
            updated_at="2024-01-02 03:04:05.123456789 UTC",
        )
    )

    assert track.created_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert track.updated_at == datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "overrides",
    [
        {"id": "not-a-uuid"},
        {"created_at": "2024-01-02 03:04:05"},
        {"updated_at": "yesterday"},
    ],
)
def test_from_row_rejects_bad_values(overrides):
    with pytest.raises(TrackRowError):
        Track.from_row(row(**overrides))


def test_default_tracks_are_distinct():
    first, second = Track(), Track()

    assert first.id != second.id
    assert first.hash is None and first.valid is True