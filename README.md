# drakn

A small console music player that keeps a library of your local audio files.

- Point it at one or more folders; every `mp3`, `wav` and `flac` file beneath
  them is hashed (BLAKE3) and stored in a SQLite database, so the same file is
  never added twice.
- Search the library by file name.
- Play, pause, seek and change volume. When a track ends, playback moves on to
  the next track in the (filtered) list, wrapping round at the end.

Playback uses the `pygame` mixer.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running

```
drakn
```

Options:

- `--config PATH` – read this configuration file instead of the default one.
- `--database PATH` – use this SQLite file instead of the default one.

On start the database worker and the player worker are launched. The player
waits up to ten seconds for an audio device; if none appears, `drakn` logs the
error and exits with status 1.

Commands are read from standard input, one per line:

```
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
```

`list` marks the playing track with `*`. `play N` on the row that is already
playing toggles it instead of restarting it. A new search is only applied
while the previous one still had results; `search` with no text always shows
every track again. Each new track starts at volume 0.5.

## Configuration

Settings are read from `config.toml` in the configuration directory:

- Linux and macOS: `$HOME/.config/drakn/config.toml`
- Windows: `%APPDATA%\drakn\config.toml`

A missing, unreadable or malformed file is not an error; the defaults are used
and a warning is logged. A section that is absent takes its defaults; a
section that is present must hold all of its fields.

```toml
[general]
debug = false
vsync = false

[volume]
default = 0.5
```

## Where the library lives

The track database is `$HOME/.local/share/drakn/db.sqlite` on Linux and
macOS. The directory is created on first start. On Windows there is no
default location; pass `--database`.

## Logging

Logging is at debug level by default. The `DRAKN_LOG` environment variable
takes comma-separated directives: a bare level (`trace`, `debug`, `info`,
`warn`, `warning`, `error`, `off`) sets the overall level, and `name=level`
sets the level of one logger, for example `DRAKN_LOG=info,drakn.player=debug`.
Directives that cannot be understood are ignored.

## Using it as a library

The pieces can be used on their own:

```python
from pathlib import Path

from drakn.files import get_tracks, get_track_file_name
from drakn.formatting import human_duration
from drakn.hashing import hash_file
from drakn.metadata import extract_track_duration, extract_track_metadata

for path in get_tracks(Path("~/Music").expanduser()):
    seconds = extract_track_duration(extract_track_metadata(path))
    print(get_track_file_name(path), human_duration(seconds or 0), hash_file(path))

print(human_duration(3725, False))  # 01:02:05
```

Other modules:

- `drakn.config` – `CoreConfig`, `get_config_path`, `load_config`.
- `drakn.tracks` – the `Track` model with `insert` and `select_all`, and
  `create_tables`.
- `drakn.database` – `Database`, which handles `InsertTracks` and
  `QueryAllTracks` commands on a background thread and answers with
  `TracksInserted` and `TracksQueried` events.
- `drakn.player` – `Player` and `PygameSink`, driven by `PlayerCommand`,
  `CreateTrack`, `SetVolume` and `SetPosition`.
- `drakn.playback_bar`, `drakn.track_table`, `drakn.tree` – the state of the
  interface components, usable without any display.

## What it does not do

- There is no graphical window; the interface is the console described above.
  `drakn.files.select_folders_dialog` can open a folder picker, but the
  console does not use it.
- "Now playing" is written to the log, not shown as a desktop notification.
- Skipping to the previous track (`prev`) is not supported; the player logs
  an error.
- The playlist tree (`drakn.tree.Tree`) lives only in memory and is not
  reachable from the console.