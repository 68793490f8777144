"""The application: wiring of components, key actions and the console front end."""

from __future__ import annotations

import argparse
import logging
import os
import queue
import sys
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from drakn.channels import Channels
from drakn.config import CoreConfig, load_config
from drakn.context import Context
from drakn.database import Database, InsertTracks, TracksInserted, TracksQueried
from drakn.files import get_tracks
from drakn.logsetup import initialize_logging
from drakn.playback_bar import PlaybackBar
from drakn.player import Player, PlayerCommand, PlayerError, PlayerEvent
from drakn.track_table import TrackTable
from drakn.tree import Tree

log = logging.getLogger(__name__)

APP_TITLE = "Drakn"
DEFAULT_SETTINGS_WINDOW_SIZE = (300.0, 200.0)

_HELP = """\
commands:
  open DIR...     import audio files from folders
  list            show the track table
  search [TEXT]   filter tracks by name (empty clears)
  play N          play or toggle the track on row N
  toggle          pause or resume playback
  next | prev     skip forward or backward
  volume V        set volume between 0 and 1
  seek S          move to S seconds in the current track
  status          show the current track and progress
  settings        open the settings
  debug           show playback debug information
  quit            leave
"""


def centered_position(
    screen_size: tuple[float, float], window_size: tuple[float, float]
) -> tuple[float, float]:
    """Return the top-left corner that centres a window of ``window_size`` on the screen."""
    screen_width, screen_height = screen_size
    width, height = window_size
    return (screen_width / 2 - width / 2, screen_height / 2 - height / 2)


class App:
    """Owns the interface components and routes events and key actions between them."""

    def __init__(self, config: CoreConfig, channels: Channels) -> None:
        self.config = config
        self.channels = channels
        self.context = Context()

        component_channels = channels.for_components()
        self.track_table = TrackTable(self.context, component_channels)
        self.playlist_tree = Tree()
        self.playback_bar = PlaybackBar(config, self.context, component_channels)

    def handle_database_events(self) -> int:
        """Apply every pending database event to the track table; return how many."""
        handled = 0
        while True:
            try:
                event = self.channels.database_events.get_nowait()
            except queue.Empty:
                return handled
            handled += 1
            match event:
                case TracksInserted(tracks=tracks):
                    for track in tracks:
                        self.track_table.add_track(track)
                case TracksQueried(error=error) if error is not None:
                    log.error("Error when querying track table: %s", error)
                case TracksQueried(tracks=tracks):
                    self.track_table.set_tracks(tracks)
                case _:
                    log.error("Unknown database event: %r", event)

    def handle_player_events(self) -> list[PlayerEvent]:
        """Pass every pending player event to the playback bar and track table."""
        events: list[PlayerEvent] = []
        while True:
            try:
                event = self.channels.player_events.get_nowait()
            except queue.Empty:
                return events
            self.playback_bar.handle_player_event(event)
            self.track_table.handle_player_event(event)
            events.append(event)

    def import_folders(self, folders: Iterable[str | os.PathLike[str]]) -> int:
        """Ask the database to store every track found in ``folders``; return how many."""
        tracks: list[Path] = []
        for folder in folders:
            tracks.extend(get_tracks(folder))
        log.debug("Found %d total track(s) in selected folders", len(tracks))
        self.channels.database_commands.put(InsertTracks(tracks))
        return len(tracks)

    def focus_search(self) -> None:
        self.track_table.request_search_focus()

    def toggle_playback(self) -> bool:
        """Toggle playback unless the search box has focus; return whether it was sent."""
        if self.track_table.search_focused:
            return False
        self.channels.player_commands.put(PlayerCommand.TOGGLE)
        return True

    def toggle_debug(self) -> bool:
        """Flip the debug setting and return its new value."""
        self.config.general.debug = not self.config.general.debug
        log.debug("Debug display toggled to %s", self.config.general.debug)
        return self.config.general.debug

    def show_settings(self) -> None:
        self.context.visible_settings = True

    def show_playback_debug(self) -> None:
        self.context.debug_playback = True

    def _tick(self) -> None:
        self.handle_database_events()
        self.handle_player_events()
        self.playback_bar.update()
        self.track_table.refresh_filter()


def _write_rows(app: App, out: TextIO) -> None:
    rows = app.track_table.rows()
    if not rows:
        out.write("no tracks\n")
        return
    for index, _track, name, duration, selected in rows:
        marker = "*" if selected else " "
        out.write(f"{marker} {index:>4}  {name}  {duration}\n")


def _write_status(app: App, out: TextIO) -> None:
    state = app.playback_bar.state
    out.write(f"{app.playback_bar.toggle_symbol} {app.playback_bar.progress_label()}")
    if state.track is not None:
        out.write(f"  {state.track.path}")
    out.write(f"  volume {state.volume:.2f}\n")
    if app.context.debug_playback:
        out.write(
            f"  playing={state.playing} base={state.progress_base} "
            f"estimated={state.current_progress()} "
            f"last_volume_sent={state.last_volume_sent:.2f}\n"
        )


def _play_row(app: App, argument: str, out: TextIO) -> None:
    try:
        wanted = int(argument)
    except ValueError:
        out.write(f"not a row number: {argument!r}\n")
        return
    for index, track, _name, _duration, _selected in app.track_table.rows():
        if index == wanted:
            app.track_table.toggle_row_play(index, track)
            return
    out.write(f"no row {wanted}\n")


def _parse_float(argument: str, out: TextIO) -> float | None:
    try:
        return float(argument)
    except ValueError:
        out.write(f"not a number: {argument!r}\n")
        return None


def _execute(app: App, line: str, out: TextIO) -> bool:
    """Run one console command; return False when the user asked to quit."""
    command, _, argument = line.strip().partition(" ")
    argument = argument.strip()

    match command.lower():
        case "":
            pass
        case "quit" | "exit":
            return False
        case "help":
            out.write(_HELP)
        case "open":
            if not argument:
                out.write("usage: open DIR...\n")
            else:
                count = app.import_folders(argument.split())
                out.write(f"importing {count} track(s)\n")
        case "list":
            _write_rows(app, out)
        case "search":
            app.focus_search()
            app.track_table.set_search_text(argument)
            app.track_table.refresh_filter()
            _write_rows(app, out)
        case "play":
            _play_row(app, argument, out)
        case "toggle":
            if not app.playback_bar.toggle():
                out.write("nothing is loaded\n")
        case "next":
            app.playback_bar.skip_next()
        case "prev":
            app.playback_bar.skip_previous()
        case "volume":
            value = _parse_float(argument, out)
            if value is not None:
                app.playback_bar.set_volume(value)
        case "seek":
            value = _parse_float(argument, out)
            if value is not None and not app.playback_bar.seek(value):
                out.write("nothing is playing\n")
        case "status":
            _write_status(app, out)
        case "settings":
            app.show_settings()
            out.write(
                f"config: debug={app.config.general.debug} "
                f"vsync={app.config.general.vsync} "
                f"volume={app.config.volume.default}\n"
            )
        case "debug":
            app.show_playback_debug()
            _write_status(app, out)
        case _:
            out.write(f"unknown command: {command!r} (try help)\n")
    return True


def _run_console(app: App, lines: Iterable[str], out: TextIO) -> None:
    out.write(f"{APP_TITLE} - type help for commands\n")
    for line in lines:
        app._tick()
        if not _execute(app, line, out):
            break
        app._tick()
        out.flush()


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="drakn", description="Play a local music library.")
    parser.add_argument("--config", type=Path, help="configuration file to read")
    parser.add_argument("--database", type=Path, help="database file to use")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Start the database and player workers and run the console interface."""
    args = _parse_args(argv)
    initialize_logging()
    config = load_config(args.config)

    database_commands, database_events = Database.start(args.database)
    player_commands: queue.Queue = queue.Queue()
    player_events: queue.Queue = queue.Queue()
    startup: queue.Queue = queue.Queue(maxsize=1)

    def run_player() -> None:
        log.info("Spawned player thread")
        try:
            player = Player(player_events, player_commands)
        except PlayerError as err:
            startup.put(err)
            return
        startup.put(None)
        player.run()

    threading.Thread(target=run_player, name="drakn-player", daemon=True).start()

    error = startup.get()
    if error is not None:
        log.error("Failed to initialize player: %s", error)
        database_commands.put(None)
        return 1

    channels = Channels(database_commands, database_events, player_commands, player_events)
    app = App(config, channels)
    try:
        _run_console(app, sys.stdin, sys.stdout)
    finally:
        database_commands.put(None)
        player_commands.put(None)
    return 0