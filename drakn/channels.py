"""Queues connecting the interface with the database and player workers."""

from __future__ import annotations

import queue
from dataclasses import dataclass


@dataclass(frozen=True)
class ComponentChannels:
    """The command queues that interface components send to."""

    database_commands: queue.Queue
    player_commands: queue.Queue


@dataclass(frozen=True)
class Channels:
    """Command and event queues for the database and the player."""

    database_commands: queue.Queue
    database_events: queue.Queue
    player_commands: queue.Queue
    player_events: queue.Queue

    @classmethod
    def create(cls) -> Channels:
        """Return channels backed by four new unbounded queues."""
        return cls(queue.Queue(), queue.Queue(), queue.Queue(), queue.Queue())

    def for_components(self) -> ComponentChannels:
        """Return the command side shared with interface components."""
        return ComponentChannels(
            database_commands=self.database_commands,
            player_commands=self.player_commands,
        )