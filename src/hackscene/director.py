"""Scene aggregate and the frame-driven Director.

Per frame the Director:
1. Computes dt in seconds from consecutive timestamps (0 on the first frame)
2. Updates rain, code chunks, network, hacks (in that order)
3. Draws overlay, background, rain, code chunks, network (in that order)
4. Notifies frame listeners and requests the next frame

The translucent overlay plus additive rain is what leaves glyph trails, so the
draw order is part of the look.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from hackscene.surface.assets import StartupGate
from hackscene.surface.canvas import BlendMode, scoped
from hackscene.systems.code_chunks import CodeChunkSystem
from hackscene.systems.hacks import HackOrchestrator
from hackscene.systems.network import NodeNetwork
from hackscene.systems.rain import MatrixRain

if TYPE_CHECKING:
    from hackscene.randomness import RandomSource
    from hackscene.surface.assets import ImageAsset
    from hackscene.surface.canvas import Surface

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]

OVERLAY_COLOR = "rgba(0,0,0,0.85)"
FALLBACK_BACKGROUND = "#000"
LOG_EVERY_FRAMES = 600


class FrameScheduler(Protocol):
    """Calls back once before the next repaint with a timestamp in ms."""

    def request_frame(self, callback: FrameCallback) -> None: ...

    def cancel(self) -> None: ...


class ManualFrameScheduler:
    """Scheduler driven by hand at a fixed step, for tests and headless runs."""

    def __init__(self, step_ms: float = 1000.0 / 60.0, start_ms: float = 0.0) -> None:
        self.step_ms = step_ms
        self.now = start_ms
        self._pending: FrameCallback | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def request_frame(self, callback: FrameCallback) -> None:
        self._pending = callback

    def cancel(self) -> None:
        self._pending = None

    def tick(self) -> bool:
        """Run the pending callback, if any. Returns whether one ran."""
        callback, self._pending = self._pending, None
        if callback is None:
            return False
        callback(self.now)
        self.now += self.step_ms
        return True

    def run_for(self, seconds: float) -> int:
        """Tick until `seconds` of timestamps have elapsed. Returns frames run."""
        frames = round(seconds * 1000.0 / self.step_ms)
        ran = 0
        for _ in range(frames):
            if not self.tick():
                break
            ran += 1
        return ran


class AsyncioFrameScheduler:
    """Scheduler on the running asyncio loop at a target frame rate."""

    def __init__(self, fps: float = 60.0) -> None:
        self.interval = 1.0 / fps
        self._handle: asyncio.TimerHandle | None = None

    def request_frame(self, callback: FrameCallback) -> None:
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.interval, self._fire, callback)

    def _fire(self, callback: FrameCallback) -> None:
        self._handle = None
        callback(time.perf_counter() * 1000.0)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


@dataclass
class Scene:
    """Everything the Director animates, owned in one place."""

    surface: Surface
    rain: MatrixRain
    chunks: CodeChunkSystem
    network: NodeNetwork
    hacks: HackOrchestrator
    background: ImageAsset | None = None
    skull: ImageAsset | None = None

    @classmethod
    def create(
        cls,
        surface: Surface,
        rng: RandomSource,
        background: ImageAsset | None = None,
        skull: ImageAsset | None = None,
    ) -> Scene:
        """Build all four subsystems sized to the surface, sharing one random source."""
        network = NodeNetwork(surface.width, surface.height, rng)
        return cls(
            surface=surface,
            rain=MatrixRain(surface.width, surface.height, rng),
            chunks=CodeChunkSystem(rng),
            network=network,
            hacks=HackOrchestrator(network, rng),
            background=background,
            skull=skull,
        )


class Director:
    """Runs the update/draw cycle for a Scene on a FrameScheduler."""

    def __init__(self, scene: Scene, scheduler: FrameScheduler) -> None:
        self.scene = scene
        self.scheduler = scheduler
        self.frame_count = 0
        self.elapsed = 0.0  # simulated seconds
        self.running = False
        self._last_timestamp: float | None = None
        self._listeners: list[Callable[[Director], None]] = []
        self._gate = StartupGate([scene.background, scene.skull], self._begin)

    def add_frame_listener(self, listener: Callable[[Director], None]) -> None:
        """Call `listener` after every drawn frame."""
        self._listeners.append(listener)

    def start(self) -> None:
        """Wait for the scene's images to settle, then start the loop."""
        self._gate.arm()

    def stop(self) -> None:
        self.running = False
        self.scheduler.cancel()
        logger.info("Director stopped after %d frames", self.frame_count)

    def _begin(self) -> None:
        self.running = True
        logger.info(
            "Starting scene at %dx%d", self.scene.surface.width, self.scene.surface.height
        )
        self.scheduler.request_frame(self._on_frame)

    def _on_frame(self, timestamp: float) -> None:
        if not self.running:
            return
        if self._last_timestamp is None:
            self._last_timestamp = timestamp
        dt = (timestamp - self._last_timestamp) / 1000.0
        self._last_timestamp = timestamp

        self.update(dt)
        self.draw()
        self.frame_count += 1

        for listener in self._listeners:
            listener(self)

        if self.frame_count % LOG_EVERY_FRAMES == 0:
            logger.debug(
                "Frame %d: chunks=%d, packets=%d, hacks=%d",
                self.frame_count,
                len(self.scene.chunks.chunks),
                len(self.scene.network.packets),
                len(self.scene.hacks.events),
            )

        if self.running:
            self.scheduler.request_frame(self._on_frame)

    def update(self, dt: float) -> None:
        """Advance rain, code chunks, network, and hacks by dt seconds, in that order."""
        scene = self.scene
        width, height = scene.surface.width, scene.surface.height
        scene.rain.update(dt, width, height)
        scene.chunks.update(dt, width, height)
        scene.network.update(dt, width, height)
        scene.hacks.update(dt)
        self.elapsed += dt

    def draw(self) -> None:
        """Paint one frame onto the scene surface.

        Order: translucent overlay, background image (or black), additive
        rain, code chunks, network.
        """
        scene = self.scene
        surface = scene.surface
        width, height = surface.width, surface.height

        surface.fill_rect(0, 0, width, height, OVERLAY_COLOR)
        self._draw_background()

        with scoped(surface, blend=BlendMode.LIGHTER):
            scene.rain.draw(surface, height)

        scene.chunks.draw(surface)
        scene.network.draw(surface, scene.skull)

    def _draw_background(self) -> None:
        surface = self.scene.surface
        background = self.scene.background
        if background is not None and background.complete:
            surface.draw_image(background, 0, 0, surface.width, surface.height)
        else:
            surface.fill_rect(0, 0, surface.width, surface.height, FALLBACK_BACKGROUND)

    def resize(self, width: int, height: int) -> None:
        """Host resize notification: reset rain and relayout the network.

        Safe to call repeatedly with the same size.
        """
        scene = self.scene
        scene.surface.resize(width, height)
        scene.rain.reset(width, height)
        scene.network.setup_layout(width, height)
        logger.info("Surface resized to %dx%d", width, height)
