"""State and actions of the track table: listing, searching and choosing tracks."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass

from drakn.channels import ComponentChannels
from drakn.context import Context
from drakn.database import QueryAllTracks
from drakn.files import get_track_file_name
from drakn.formatting import human_duration
from drakn.player import CreateTrack, PlayerCommand, PlayerEvent, TrackPlayingStatus
from drakn.tracks import Track

log = logging.getLogger(__name__)

TABLE_HEADER_HEIGHT = 25.0
TABLE_ROW_HEIGHT = 20.0
COLUMNS = ("Index", "Track", "Duration")


@dataclass
class PlayingTrack:
    """The track the table started, with its row and whether it is playing."""

    index: int
    track: Track
    playing: bool = True


class TrackTable:
    """The list of known tracks, filtered by a search text, with playback selection."""

    def __init__(self, context: Context, channels: ComponentChannels) -> None:
        self.context = context
        self.channels = channels

        self.tracks: list[Track] = []
        self.filtered_tracks: list[Track] = []
        self.track_ids: set[uuid.UUID] = set()
        self.playing: PlayingTrack | None = None

        self.search_text = ""
        self.search_changed = False
        self.search_focused = False
        self.search_focus_requested = False
        self.search_duration: float | None = None

        self.channels.database_commands.put(QueryAllTracks())

    def _send(self, command: object) -> None:
        self.channels.player_commands.put(command)

    def request_search_focus(self) -> None:
        self.search_focus_requested = True

    def set_tracks(self, tracks) -> None:
        """Replace every track in the table."""
        self.tracks = list(tracks)
        self.track_ids = {track.id for track in self.tracks}

    def add_track(self, track: Track) -> bool:
        """Add a track unless one with the same id is present; return whether it was added."""
        if track.id in self.track_ids:
            return False
        self.track_ids.add(track.id)
        self.tracks.append(track)
        return True

    def remove(self, track_id: uuid.UUID) -> bool:
        """Remove the track with this id; return whether it was present."""
        if track_id not in self.track_ids:
            return False
        self.track_ids.discard(track_id)
        self.tracks = [track for track in self.tracks if track.id != track_id]
        return True

    def handle_player_event(self, event: PlayerEvent) -> None:
        log.debug("Track table received event: %r", event)
        match event:
            case TrackPlayingStatus(playing=playing) if self.playing is not None:
                self.playing.playing = playing
            case _:
                pass

    def toggle_row_play(self, row_index: int, track: Track) -> None:
        """Toggle the track if it is the one playing on this row, otherwise start it."""
        current = self.playing
        if current is not None and current.index == row_index and current.track == track:
            self._send(PlayerCommand.TOGGLE)
            return

        self._send(CreateTrack(track))
        self.playing = PlayingTrack(row_index, track, True)

    def select_new_track(self) -> None:
        """Start the track after the playing one in the filtered list, wrapping around."""
        if self.playing is None:
            return
        self.context.select_next_track = False

        playing_hash = self.playing.track.hash
        index = next(
            (i for i, track in enumerate(self.filtered_tracks) if track.hash == playing_hash),
            None,
        )
        if index is None:
            self._send(PlayerCommand.CLEAR)
            self.playing = None
            return

        new_index = (index + 1) % len(self.filtered_tracks)
        new_track = self.filtered_tracks[new_index]
        self._send(CreateTrack(new_track))
        self.playing = PlayingTrack(new_index, new_track, True)
        log.debug("Selected new track with autoplay: %r", self.playing)

    def set_search_text(self, text: str) -> None:
        """Change the search text; the filter follows on the next refresh."""
        if text != self.search_text:
            self.search_text = text
            self.search_changed = True

    def refresh_filter(self) -> None:
        """Recompute the filtered tracks from the search text.

        A changed search is only applied while the previous one still had results;
        clearing the search always restores every track.
        """
        if not self.search_text:
            self.filtered_tracks = list(self.tracks)
        elif self.search_changed and self.filtered_tracks:
            needle = self.search_text.lower()
            start = time.perf_counter()
            filtered = []
            for track in self.tracks:
                name = get_track_file_name(track.path)
                if name is not None and needle in name.lower():
                    filtered.append(track)
            self.search_duration = time.perf_counter() - start
            log.debug(
                "Filtered into %d tracks in %.6fs", len(filtered), self.search_duration
            )
            self.filtered_tracks = filtered
        self.search_changed = False

    def rows(self) -> list[tuple[int, Track, str, str, bool]]:
        """Return the visible rows as ``(index, track, name, duration, selected)``.

        Advances to the next track first when the shared context asks for one.
        Tracks without a file name are not shown.
        """
        if self.context.select_next_track:
            self.select_new_track()

        playing_hash = self.playing.track.hash if self.playing is not None else None
        rows = []
        for index, track in enumerate(self.filtered_tracks):
            name = get_track_file_name(track.path)
            if name is None:
                continue
            selected = self.playing is not None and track.hash == playing_hash
            rows.append(
                (index, track, name, human_duration(track.duration_secs, False), selected)
            )
        return rows