"""Node and Link dataclasses: the network topology drawn over the scene."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class NodeKind(StrEnum):
    """Cosmetic device category of a node."""

    HACKER = "hacker"
    SERVER = "server"
    DESKTOP = "desktop"
    ROUTER = "router"
    LAPTOP = "laptop"
    PHONE = "phone"
    IOT = "iot"
    CLOUD = "cloud"


@dataclass(eq=False)
class Node:
    """A device in the network.

    Identity matters: packets hold references to nodes, so relayout moves
    nodes in place instead of replacing them.
    """

    id: str
    x: float
    y: float
    kind: NodeKind
    highlight: float = 0.0  # "hacked" glow, 0.0 to 1.0, decays over time

    def mark_hacked(self) -> None:
        """Light the node up at full intensity."""
        self.highlight = 1.0

    def decay(self, dt: float, rate: float) -> None:
        """Fade the highlight toward zero at `rate` per second."""
        self.highlight = min(1.0, max(0.0, self.highlight - rate * dt))

    def move_to(self, x: float, y: float) -> None:
        self.x = x
        self.y = y


@dataclass(frozen=True)
class Link:
    """A directional connection between two nodes.

    Static links form the topology; ephemeral links are created to carry a
    single packet and vanish with it.
    """

    source: Node
    dest: Node

    def point_at(self, t: float) -> tuple[float, float]:
        """Linear interpolation from source (t=0) to dest (t=1)."""
        return (
            self.source.x + (self.dest.x - self.source.x) * t,
            self.source.y + (self.dest.y - self.source.y) * t,
        )
