"""Image assets and the startup gate that waits for them.

An asset settles exactly once, either loaded or failed. The scene treats both
outcomes as "ready": a failed background falls back to a solid fill and a
failed skull simply isn't drawn.
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from collections.abc import Callable, Sequence
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

AssetListener = Callable[["ImageAsset"], None]


class AssetStatus(Enum):
    """Load state of an image asset."""

    PENDING = "pending"
    LOADED = "loaded"
    FAILED = "failed"


class ImageAsset:
    """A bitmap read from disk once and referenced by name when drawn."""

    def __init__(self, name: str, path: Path | str) -> None:
        self.name = name
        self.path = Path(path)
        self.status = AssetStatus.PENDING
        self.data: bytes | None = None
        self._listeners: list[AssetListener] = []

    def __repr__(self) -> str:
        return f"ImageAsset(name={self.name!r}, status={self.status.value})"

    @property
    def complete(self) -> bool:
        """True when the bitmap is available for drawing."""
        return self.status is AssetStatus.LOADED

    @property
    def settled(self) -> bool:
        return self.status is not AssetStatus.PENDING

    @property
    def media_type(self) -> str:
        guessed, _ = mimetypes.guess_type(self.path.name)
        return guessed or "application/octet-stream"

    def add_listener(self, listener: AssetListener) -> None:
        """Call `listener` when the asset settles (immediately if it already has)."""
        if self.settled:
            listener(self)
        else:
            self._listeners.append(listener)

    def load(self) -> None:
        """Read the file synchronously and settle."""
        if self.settled:
            return
        try:
            data = self.path.read_bytes()
        except OSError as e:
            self._fail(e)
        else:
            self._succeed(data)

    async def load_async(self) -> None:
        """Read the file in a worker thread, settling back on the event loop."""
        if self.settled:
            return
        try:
            data = await asyncio.to_thread(self.path.read_bytes)
        except OSError as e:
            self._fail(e)
        else:
            self._succeed(data)

    def _succeed(self, data: bytes) -> None:
        self.data = data
        self.status = AssetStatus.LOADED
        logger.info("Loaded image %s (%d bytes)", self.name, len(data))
        self._notify()

    def _fail(self, error: OSError) -> None:
        self.status = AssetStatus.FAILED
        logger.warning("Image %s unavailable at %s: %s", self.name, self.path, error)
        self._notify()

    def _notify(self) -> None:
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener(self)


class StartupGate:
    """Fire a callback once every given asset has settled.

    Missing assets (None) are skipped; with nothing to wait for the callback
    fires as soon as the gate is armed.
    """

    def __init__(
        self,
        assets: Sequence[ImageAsset | None],
        on_ready: Callable[[], None],
    ) -> None:
        self._assets = [a for a in assets if a is not None]
        self._on_ready = on_ready
        self._remaining = 0
        self._fired = False
        self._armed = False

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def fired(self) -> bool:
        return self._fired

    def arm(self) -> None:
        """Start waiting. Calling it again is a no-op."""
        if self._armed:
            return
        self._armed = True
        self._remaining = len(self._assets)
        if self._remaining == 0:
            self._fire()
            return
        for asset in self._assets:
            asset.add_listener(self._on_settled)

    def _on_settled(self, asset: ImageAsset) -> None:
        self._remaining -= 1
        logger.debug(
            "Asset %s settled (%s), %d left", asset.name, asset.status.value, self._remaining
        )
        if self._remaining == 0:
            self._fire()

    def _fire(self) -> None:
        if self._fired:
            return
        self._fired = True
        self._on_ready()
