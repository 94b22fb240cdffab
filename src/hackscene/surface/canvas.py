"""Immediate-mode drawing surface.

Scene code draws through the Surface protocol. RecordingSurface implements it
by appending DrawCommand records, which the server streams to a browser canvas
and tests inspect directly.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from hackscene.surface.assets import ImageAsset


class BlendMode(StrEnum):
    """Compositing modes, named after their canvas equivalents."""

    NORMAL = "source-over"
    LIGHTER = "lighter"  # additive


class Surface(Protocol):
    """A 2D raster target with canvas-like primitives and save/restore state."""

    width: int
    height: int

    def resize(self, width: int, height: int) -> None: ...

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None: ...

    def fill_circle(self, x: float, y: float, radius: float, color: str) -> None: ...

    def stroke_line(
        self, x1: float, y1: float, x2: float, y2: float, color: str, line_width: float
    ) -> None: ...

    def fill_text(self, text: str, x: float, y: float, color: str, font_px: int) -> None: ...

    def draw_image(self, image: ImageAsset, x: float, y: float, w: float, h: float) -> None: ...

    def save(self) -> None: ...

    def restore(self) -> None: ...

    def set_alpha(self, alpha: float) -> None: ...

    def set_blend(self, mode: BlendMode) -> None: ...


@contextmanager
def scoped(
    surface: Surface,
    *,
    alpha: float | None = None,
    blend: BlendMode | None = None,
) -> Iterator[Surface]:
    """Save surface state, optionally change alpha/blend, restore on exit."""
    surface.save()
    try:
        if alpha is not None:
            surface.set_alpha(alpha)
        if blend is not None:
            surface.set_blend(blend)
        yield surface
    finally:
        surface.restore()


@dataclass
class DrawCommand:
    """One recorded drawing call: an operation name and its arguments."""

    op: str
    args: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.op, "args": self.args}


@dataclass
class _DrawState:
    alpha: float = 1.0
    blend: BlendMode = BlendMode.NORMAL


class RecordingSurface:
    """Surface that records every call for later replay.

    Mirrors canvas semantics for state: save() pushes alpha and blend mode,
    restore() pops them. Unbalanced restore() calls are ignored, as a canvas
    does.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.commands: list[DrawCommand] = []
        self._state = _DrawState()
        self._stack: list[_DrawState] = []

    @property
    def alpha(self) -> float:
        return self._state.alpha

    @property
    def blend(self) -> BlendMode:
        return self._state.blend

    @property
    def depth(self) -> int:
        """Number of unmatched save() calls."""
        return len(self._stack)

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def _record(self, op: str, **args: Any) -> None:
        self.commands.append(DrawCommand(op=op, args=args))

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None:
        self._record("fill_rect", x=x, y=y, w=w, h=h, color=color)

    def fill_circle(self, x: float, y: float, radius: float, color: str) -> None:
        self._record("fill_circle", x=x, y=y, r=radius, color=color)

    def stroke_line(
        self, x1: float, y1: float, x2: float, y2: float, color: str, line_width: float
    ) -> None:
        self._record("stroke_line", x1=x1, y1=y1, x2=x2, y2=y2, color=color, width=line_width)

    def fill_text(self, text: str, x: float, y: float, color: str, font_px: int) -> None:
        self._record("fill_text", text=text, x=x, y=y, color=color, size=font_px)

    def draw_image(self, image: ImageAsset, x: float, y: float, w: float, h: float) -> None:
        self._record("draw_image", name=image.name, x=x, y=y, w=w, h=h)

    def save(self) -> None:
        self._stack.append(_DrawState(self._state.alpha, self._state.blend))
        self._record("save")

    def restore(self) -> None:
        if not self._stack:
            return
        self._state = self._stack.pop()
        self._record("restore")

    def set_alpha(self, alpha: float) -> None:
        self._state.alpha = min(1.0, max(0.0, alpha))
        self._record("set_alpha", alpha=self._state.alpha)

    def set_blend(self, mode: BlendMode) -> None:
        self._state.blend = mode
        self._record("set_blend", mode=mode.value)

    def flush(self) -> list[DrawCommand]:
        """Return the recorded commands and start a fresh list."""
        commands, self.commands = self.commands, []
        return commands

    def ops(self) -> list[str]:
        """Operation names recorded so far, in order."""
        return [c.op for c in self.commands]
