"""State and actions of the playback bar: transport buttons, seek and volume."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from drakn.channels import ComponentChannels
from drakn.config import CoreConfig
from drakn.context import Context
from drakn.formatting import human_duration
from drakn.player import (
    CurrentVolume,
    PlayerCommand,
    PlayerEvent,
    SetPosition,
    SetVolume,
    TrackChanged,
    TrackPlayingStatus,
    TrackProgress,
)
from drakn.tracks import Track

log = logging.getLogger(__name__)

PLAYBACK_BAR_HEIGHT = 60.0
VOLUME_RANGE = (0.0, 1.0)
VOLUME_EPSILON = 1.1920929e-07

SKIP_BACKWARD_SYMBOL = "\u23ee"
PLAY_SYMBOL = "\u25b6"
PAUSE_SYMBOL = "\u23f8"
SKIP_FORWARD_SYMBOL = "\u23ed"
EMPTY_PROGRESS_LABEL = "--:--/--:--"


def _now(now: float | None) -> float:
    return time.monotonic() if now is None else now


@dataclass
class PlaybackState:
    """What the bar believes the player is doing.

    Progress is tracked as a base position plus the monotonic time it was taken at,
    so it advances between player reports.
    """

    track: Track | None = None
    playing: bool = False
    volume: float = 0.5
    last_volume_sent: float = 0.5
    progress_base: float | None = None
    progress_timestamp: float | None = None

    def current_progress(self, now: float | None = None) -> float | None:
        """Return the estimated position in seconds, or None if nothing is loaded."""
        if self.progress_base is None:
            return None
        if self.playing and self.progress_timestamp is not None:
            return self.progress_base + (_now(now) - self.progress_timestamp)
        return self.progress_base


class PlaybackBar:
    """Playback controls that send player commands and follow player events."""

    def __init__(
        self, config: CoreConfig, context: Context, channels: ComponentChannels
    ) -> None:
        self.context = context
        self.channels = channels
        volume = config.volume.default
        self.state = PlaybackState(playing=True, volume=volume, last_volume_sent=volume)

    def _send(self, command: object) -> None:
        self.channels.player_commands.put(command)

    def _reset(self) -> None:
        self.state = PlaybackState()

    @property
    def toggle_symbol(self) -> str:
        if self.state.playing and self.state.track is not None:
            return PAUSE_SYMBOL
        return PLAY_SYMBOL

    def handle_player_event(self, event: PlayerEvent, now: float | None = None) -> None:
        """Bring the bar's state in line with an event from the player."""
        log.debug("Playback bar received event: %r", event)
        now = _now(now)
        state = self.state

        match event:
            case TrackChanged(track=track):
                if state.track is None or state.track.hash != track.hash:
                    state.track = track
                    state.playing = True
                    state.progress_base = 0.0
                    state.progress_timestamp = now
            case TrackPlayingStatus(playing=playing):
                if not playing and state.playing:
                    if state.progress_base is not None and state.progress_timestamp is not None:
                        state.progress_base += now - state.progress_timestamp
                        state.progress_timestamp = None
                if playing and not state.playing:
                    state.progress_timestamp = now
                state.playing = playing
            case TrackProgress(seconds=seconds):
                if state.progress_base is not None and state.progress_base < seconds:
                    log.warning(
                        "Track progress desync detected, "
                        "setting progress base to received player position"
                    )
                    state.progress_base = seconds
                    state.progress_timestamp = now
            case CurrentVolume(volume=volume):
                if state.volume != volume:
                    log.warning(
                        "Volume desync detected, UI track state does not equal "
                        "player volume (%s != %s)",
                        state.volume,
                        volume,
                    )
                    state.volume = volume
            case _:
                raise TypeError(f"unknown player event: {event!r}")

    def skip_previous(self) -> None:
        self._send(PlayerCommand.SKIP_PREVIOUS)

    def skip_next(self) -> None:
        self._send(PlayerCommand.SKIP_NEXT)

    def toggle(self) -> bool:
        """Ask the player to toggle playback; only sent when a track is loaded."""
        if self.state.track is None:
            return False
        self._send(PlayerCommand.TOGGLE)
        return True

    def set_volume(self, volume: float) -> bool:
        """Set the volume, sending it to the player when it changed; return whether sent."""
        low, high = VOLUME_RANGE
        self.state.volume = min(max(volume, low), high)
        if abs(self.state.volume - self.state.last_volume_sent) > VOLUME_EPSILON:
            self._send(SetVolume(self.state.volume))
            self.state.last_volume_sent = self.state.volume
            return True
        return False

    def seek(self, seconds: float, now: float | None = None) -> bool:
        """Move to a position in the current track; return whether a seek was sent."""
        track = self.state.track
        if track is None or self.state.current_progress(now) is None:
            return False
        seconds = min(max(seconds, 0.0), track.duration_secs)
        self.state.progress_base = seconds
        self.state.progress_timestamp = _now(now)
        self._send(SetPosition(seconds))
        return True

    def update(self, now: float | None = None) -> bool:
        """Detect the end of the current track; when reached, reset and ask for the next."""
        progress = self.state.current_progress(now)
        track = self.state.track
        if progress is None or track is None:
            return False
        if progress >= track.duration_secs:
            self._reset()
            self.context.select_next_track = True
            return True
        return False

    def progress_label(self, now: float | None = None) -> str:
        """Return ``elapsed/total`` for the current track."""
        progress = self.state.current_progress(now)
        track = self.state.track
        if progress is None or track is None:
            return EMPTY_PROGRESS_LABEL
        total = int(track.duration_secs)
        current = min(int(progress), total)
        has_hours = total // 3600 > 0
        return f"{human_duration(current, has_hours)}/{human_duration(total, has_hours)}"