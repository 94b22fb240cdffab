"""Scene subsystems: rain, code chunks, node network, hack orchestration."""

from hackscene.systems.code_chunks import SNIPPETS, CodeChunkSystem
from hackscene.systems.hacks import HackEvent, HackOrchestrator, HackState
from hackscene.systems.network import NodeNetwork
from hackscene.systems.rain import MatrixRain

__all__ = [
    "SNIPPETS",
    "CodeChunkSystem",
    "HackEvent",
    "HackOrchestrator",
    "HackState",
    "MatrixRain",
    "NodeNetwork",
]
