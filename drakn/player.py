"""Audio playback worker driven by commands on a queue."""

from __future__ import annotations

import enum
import logging
import os
import queue
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import pygame

from drakn.files import get_track_file_name
from drakn.tracks import Track

log = logging.getLogger(__name__)

DEFAULT_TRACK_VOLUME = 0.5
DEVICE_TIMEOUT = 10.0


class PlayerError(RuntimeError):
    """Raised when the player cannot carry out a command."""


class PlayerCommand(enum.Enum):
    """Commands that carry no data."""

    PLAY = "play"
    PAUSE = "pause"
    TOGGLE = "toggle"
    RESUME = "resume"
    CLEAR = "clear"
    SKIP_NEXT = "skip_next"
    SKIP_PREVIOUS = "skip_previous"
    VOLUME = "volume"
    POSITION = "position"


@dataclass(frozen=True)
class CreateTrack:
    """Replace whatever is playing with this track and start it."""

    track: Track


@dataclass(frozen=True)
class SetVolume:
    volume: float


@dataclass(frozen=True)
class SetPosition:
    """Seek the current track to this many seconds."""

    seconds: float


Command = PlayerCommand | CreateTrack | SetVolume | SetPosition


@dataclass(frozen=True)
class TrackChanged:
    track: Track


@dataclass(frozen=True)
class TrackProgress:
    """The player's position in the current track, in seconds."""

    seconds: float


@dataclass(frozen=True)
class TrackPlayingStatus:
    playing: bool


@dataclass(frozen=True)
class CurrentVolume:
    volume: float


PlayerEvent = TrackChanged | TrackProgress | TrackPlayingStatus | CurrentVolume


class Sink(Protocol):
    """A queue of audio sources that plays them one after another."""

    volume: float

    @property
    def empty(self) -> bool: ...

    @property
    def is_paused(self) -> bool: ...

    @property
    def position(self) -> float: ...

    def append(self, path: str | os.PathLike[str]) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def clear(self) -> None: ...

    def skip_one(self) -> None: ...

    def seek(self, seconds: float) -> None: ...


class PygameSink:
    """A sink backed by the pygame mixer's music stream."""

    def __init__(self, timeout: float = DEVICE_TIMEOUT) -> None:
        deadline = time.monotonic() + timeout
        delay = 0.01
        while True:
            try:
                pygame.mixer.init()
                break
            except pygame.error as err:
                log.error("Audio device not available: %s", err)
            if time.monotonic() > deadline:
                raise PlayerError("Timed out waiting for audio device")
            time.sleep(delay)
            delay = min(delay * 2, 0.5)
        log.info("Audio device found!")

        self._music = pygame.mixer.music
        self._queue: list[Path] = []
        self._paused = False
        self._volume = 1.0
        self._offset = 0.0
        self._music.set_volume(self._volume)

    def _start(self, path: Path) -> None:
        try:
            self._music.load(os.fspath(path))
        except pygame.error as err:
            raise PlayerError(f"cannot decode {str(path)!r}: {err}") from err
        self._music.play()
        self._offset = 0.0
        if self._paused:
            self._music.pause()

    def _sync(self) -> None:
        """Drop sources that have finished and start the next one."""
        while self._queue and not self._paused and not self._music.get_busy():
            self._queue.pop(0)
            if not self._queue:
                self._music.unload()
                return
            try:
                self._start(self._queue[0])
                return
            except PlayerError as err:
                log.error("Skipping queued track: %s", err)

    @property
    def empty(self) -> bool:
        self._sync()
        return not self._queue

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = value
        self._music.set_volume(value)

    @property
    def position(self) -> float:
        self._sync()
        if not self._queue:
            return 0.0
        return self._offset + max(self._music.get_pos(), 0) / 1000

    def append(self, path: str | os.PathLike[str]) -> None:
        """Queue a file; it starts at once when nothing else is queued."""
        path = Path(path)
        with open(path, "rb"):
            pass
        self._sync()
        if not self._queue:
            self._start(path)
        self._queue.append(path)

    def play(self) -> None:
        self._paused = False
        if self._queue:
            self._music.unpause()

    def pause(self) -> None:
        self._paused = True
        self._music.pause()

    def clear(self) -> None:
        """Remove every queued source and pause."""
        self._music.stop()
        self._music.unload()
        self._queue.clear()
        self._paused = True
        self._offset = 0.0

    def skip_one(self) -> None:
        if not self._queue:
            return
        self._queue.pop(0)
        self._music.stop()
        if self._queue:
            self._start(self._queue[0])
        else:
            self._music.unload()

    def seek(self, seconds: float) -> None:
        if not self._queue:
            raise PlayerError("no track to seek in")
        try:
            self._music.set_pos(seconds)
        except pygame.error as err:
            raise PlayerError(f"cannot seek to {seconds}: {err}") from err
        self._offset = seconds - max(self._music.get_pos(), 0) / 1000


def _notify_now_playing(track_name: str) -> None:
    log.info("Now playing - %s", track_name)


class Player:
    """Executes player commands against a sink and reports events."""

    def __init__(
        self,
        events: queue.Queue,
        commands: queue.Queue,
        sink: Sink | None = None,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        self.events = events
        self.commands = commands
        self.sink: Sink = PygameSink() if sink is None else sink
        self.notify = _notify_now_playing if notify is None else notify

    def _create_track(self, track: Track) -> None:
        if not self.sink.empty:
            self.sink.clear()

        log.debug("Appended file %s to sink, and playing", track.path)
        self.sink.append(track.path)
        self.sink.volume = DEFAULT_TRACK_VOLUME
        self.sink.play()

        self.events.put(TrackChanged(track))

        name = get_track_file_name(track.path)
        if name is not None:
            self.notify(name)
        else:
            log.warning("Could not get new track file name for now playing notification")

    def handle_command(self, command: Command) -> None:
        """Carry out one command, posting any resulting event."""
        log.debug("Player received command: %r", command)

        match command:
            case CreateTrack(track=track):
                self._create_track(track)
            case PlayerCommand.PLAY:
                self.sink.play()
            case PlayerCommand.TOGGLE:
                was_paused = self.sink.is_paused
                if was_paused:
                    self.sink.play()
                else:
                    self.sink.pause()
                self.events.put(TrackPlayingStatus(was_paused))
            case PlayerCommand.PAUSE:
                self.sink.pause()
            case PlayerCommand.RESUME:
                if self.sink.is_paused:
                    self.sink.play()
                else:
                    log.debug("No track to resume")
            case PlayerCommand.CLEAR:
                self.sink.clear()
            case PlayerCommand.SKIP_NEXT:
                self.sink.skip_one()
            case PlayerCommand.SKIP_PREVIOUS:
                raise PlayerError("skipping to the previous track is not supported")
            case PlayerCommand.VOLUME:
                self.events.put(CurrentVolume(self.sink.volume))
            case SetVolume(volume=volume):
                self.sink.volume = volume
                self.events.put(CurrentVolume(volume))
            case PlayerCommand.POSITION:
                self.events.put(TrackProgress(self.sink.position))
            case SetPosition(seconds=seconds):
                try:
                    self.sink.seek(seconds)
                except PlayerError as err:
                    raise PlayerError(f"Failed to set position: {err}") from err
                self.events.put(TrackProgress(self.sink.position))
            case _:
                raise TypeError(f"unknown player command: {command!r}")

    def run(self) -> None:
        """Handle commands until a None arrives; failures are logged and skipped."""
        while (command := self.commands.get()) is not None:
            try:
                self.handle_command(command)
            except (PlayerError, OSError, ValueError) as err:
                log.error("Processing player command %r failed with error %s", command, err)