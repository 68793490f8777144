"""Locating audio files on disk and naming them for display."""

from __future__ import annotations

import os
from pathlib import Path

ALLOWED_AUDIO_FORMATS = ("mp3", "wav", "flac")


def _extension(name: str) -> str | None:
    """Return the text after the last dot, or None when the name has no extension."""
    if name == "..":
        return None
    dot = name.rfind(".")
    if dot <= 0:
        return None
    return name[dot + 1 :]


def _is_track(path: Path) -> bool:
    return path.is_file() and _extension(path.name) in ALLOWED_AUDIO_FORMATS


def get_tracks(directory: str | os.PathLike[str]) -> list[Path]:
    """Return every supported audio file found under ``directory``, recursively."""
    root = Path(directory)
    if root.is_file():
        return [root] if _is_track(root) else []

    tracks: list[Path] = []
    for current, dirnames, filenames in os.walk(root):
        dirnames.sort()
        base = Path(current)
        tracks.extend(
            candidate
            for candidate in (base / name for name in sorted(filenames))
            if _is_track(candidate)
        )
    return tracks


def get_track_file_name(path: str | os.PathLike[str]) -> str | None:
    """Return the file name of a track without its extension, or None if it has no name."""
    raw = os.fspath(path)
    name = Path(raw).name
    if not name or name == ".." or raw.rstrip("/\\").endswith(".."):
        return None

    extension = _extension(name)
    if extension is not None:
        if extension and name.endswith(extension):
            name = name[: -len(extension)]
        return name.rstrip(".")
    return name.rsplit(".")[-1]


def select_folders_dialog() -> list[Path] | None:
    """Ask the user to pick a folder; return it in a list, or None if cancelled."""
    import tkinter
    from tkinter import filedialog

    root = tkinter.Tk()
    root.withdraw()
    try:
        selected = filedialog.askdirectory(
            initialdir=os.environ.get("HOME", ""), mustexist=True
        )
    finally:
        root.destroy()

    if not selected:
        return None
    return [Path(selected)]