"""Drawing surface protocol, recording adapter and image assets."""

from hackscene.surface.assets import AssetStatus, ImageAsset, StartupGate
from hackscene.surface.canvas import (
    BlendMode,
    DrawCommand,
    RecordingSurface,
    Surface,
    scoped,
)

__all__ = [
    "AssetStatus",
    "BlendMode",
    "DrawCommand",
    "ImageAsset",
    "RecordingSurface",
    "StartupGate",
    "Surface",
    "scoped",
]
