"""Scene model: RainColumn, CodeChunk, Node, Link, Packet."""

from hackscene.model.chunk import ChunkState, CodeChunk
from hackscene.model.node import Link, Node, NodeKind
from hackscene.model.packet import Packet
from hackscene.model.rain import RainColumn

__all__ = [
    "ChunkState",
    "CodeChunk",
    "Link",
    "Node",
    "NodeKind",
    "Packet",
    "RainColumn",
]
