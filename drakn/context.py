"""Shared UI state passed between components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ShuffleType(Enum):
    """How the next track is chosen once the current one ends."""

    AUTO_PLAY = "auto_play"
    """Play the following track in the table, looping back to the first."""
    PSEUDO_RANDOM = "pseudo_random"
    """Pick a random track not yet played this session."""
    TRUE_RANDOM = "true_random"
    """Pick any random track; repeats are allowed."""


@dataclass
class Context:
    """Mutable state shared by every component; pass the same instance around."""

    select_previous_track: bool = False
    select_next_track: bool = False
    shuffle: ShuffleType = field(default=ShuffleType.AUTO_PLAY)
    visible_settings: bool = False
    debug_playback: bool = False