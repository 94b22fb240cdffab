"""Code chunk system: snippets of fake exploit code that drift and fade."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hackscene.model.chunk import ChunkState, CodeChunk
from hackscene.randomness import coin, pick
from hackscene.surface.canvas import scoped

if TYPE_CHECKING:
    from hackscene.randomness import RandomSource
    from hackscene.surface.canvas import Surface

logger = logging.getLogger(__name__)

SNIPPETS: tuple[tuple[str, ...], ...] = (
    (
        "for (let i = 0; i < nodes.length; i++) {",
        "  sendPacket(hacker, nodes[i]);",
        "}",
    ),
    (
        "def exploit(target):",
        "    payload = build_payload(target)",
        "    send(payload)",
        "    return get_shell()",
    ),
    (
        '<div class="node hacked">',
        "  <span>&#9760; root access</span>",
        "</div>",
    ),
    (
        "0x48 0x45 0x4C 0x4C 0x4F",
        "0x52 0x4F 0x4F 0x54",
    ),
)

SPAWN_INTERVAL = (5.0, 10.0)  # seconds between spawns
SPEED_RANGE = (20.0, 60.0)  # px/s
HOLD_RANGE = (2.0, 5.0)  # seconds at full opacity
FADE_IN_RATE = 0.5  # alpha per second
FADE_OUT_RATE = 0.3
MAX_ALPHA = 0.8
SPAWN_OFFSET = 300.0  # px outside the surface where chunks start
VERTICAL_MARGIN = 50.0
LINE_HEIGHT = 16
FONT_PX = 14
TEXT_COLOR = "#00ff99"


class CodeChunkSystem:
    """Spawns chunks on a random timer and runs their fade lifecycle."""

    def __init__(self, rng: RandomSource, snippets: tuple[tuple[str, ...], ...] = SNIPPETS) -> None:
        self.rng = rng
        self.snippets = snippets
        self.chunks: list[CodeChunk] = []
        self.timer = 0.0  # countdown to next spawn; first update spawns

    def spawn(self, width: int, height: int) -> CodeChunk:
        """Create one chunk just outside the surface edge it drifts in from."""
        direction = coin(self.rng)
        chunk = CodeChunk(
            x=-SPAWN_OFFSET if direction == 1 else width + SPAWN_OFFSET,
            y=VERTICAL_MARGIN + self.rng.uniform(0.0, max(height - 2 * VERTICAL_MARGIN, 0.0)),
            direction=direction,
            speed=self.rng.uniform(*SPEED_RANGE),
            lines=pick(self.rng, self.snippets),
        )
        self.chunks.append(chunk)
        logger.debug("Spawned code chunk at y=%.0f moving %+d", chunk.y, direction)
        return chunk

    def update(self, dt: float, width: int, height: int) -> None:
        """Spawn on timer expiry, step each chunk's lifecycle, then cull.

        Args:
            dt: Seconds since the previous frame
            width: Surface width, for spawning and the off-screen test
            height: Surface height, for spawning

        Side effects:
            - Resets self.timer to a fresh 5-10s interval when it runs out
            - Mutates chunk position, alpha, state and hold_time
            - Drops chunks that are invisible and well off-screen
        """
        self.timer -= dt
        if self.timer <= 0:
            self.timer = self.rng.uniform(*SPAWN_INTERVAL)
            self.spawn(width, height)

        for chunk in self.chunks:
            self._step(chunk, dt)
        self.chunks = [c for c in self.chunks if not c.is_dead(width)]

    def _step(self, chunk: CodeChunk, dt: float) -> None:
        chunk.x += chunk.direction * chunk.speed * dt

        if chunk.state == ChunkState.FADE_IN:
            chunk.alpha += FADE_IN_RATE * dt
            if chunk.alpha >= MAX_ALPHA:
                chunk.alpha = MAX_ALPHA
                chunk.state = ChunkState.HOLD
                chunk.hold_time = self.rng.uniform(*HOLD_RANGE)
        elif chunk.state == ChunkState.HOLD:
            chunk.hold_time -= dt
            if chunk.hold_time <= 0:
                chunk.state = ChunkState.FADE_OUT
        elif chunk.state == ChunkState.FADE_OUT:
            chunk.alpha -= FADE_OUT_RATE * dt

    def draw(self, surface: Surface) -> None:
        """Draw each visible chunk's lines at its own alpha."""
        for chunk in self.chunks:
            if chunk.alpha <= 0:
                continue
            with scoped(surface, alpha=chunk.alpha):
                for i, line in enumerate(chunk.lines):
                    surface.fill_text(
                        line, chunk.x, chunk.y + i * LINE_HEIGHT, TEXT_COLOR, FONT_PX
                    )
