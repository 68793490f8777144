"""The playlist tree shown beside the track table."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field


class Action(enum.Enum):
    """What a node asks of its parent after being drawn."""

    KEEP = "keep"
    DELETE = "delete"


@dataclass
class Tree:
    """A node whose children are themselves trees."""

    children: list[Tree] = field(default_factory=list)

    def add_child(self) -> Tree:
        """Append an empty child and return it."""
        child = Tree()
        self.children.append(child)
        return child

    def remove_child(self, index: int) -> Tree:
        """Remove and return the child at ``index``."""
        return self.children.pop(index)

    def labels(self, name: str = "root", depth: int = 0) -> Iterator[tuple[int, str]]:
        """Yield ``(depth, label)`` for this node and every descendant, parents first.

        Children are labelled by their position among their siblings.
        """
        yield depth, name
        for i, child in enumerate(self.children):
            yield from child.labels(f"child #{i}", depth + 1)