"""FastAPI server: runs the scene and streams recorded frames to browsers.

Provides:
- GET /: canvas page that replays frames
- WebSocket /ws/frames: recorded draw commands, pushed after every frame
- WebSocket /ws/control: resize and trigger_hack commands
- REST API for resize notifications and scene inspection/tuning
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, HTTPException, Response, WebSocket, WebSocketDisconnect, status
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field

from hackscene import __version__
from hackscene.config import SceneConfig, get_scene_config
from hackscene.director import AsyncioFrameScheduler, Director, Scene
from hackscene.randomness import StdlibRandom
from hackscene.surface.assets import ImageAsset
from hackscene.surface.canvas import RecordingSurface

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"

EMPTY_FRAME: dict[str, Any] = {"frame": -1, "width": 0, "height": 0, "commands": []}


# WebSocket connections management


class ConnectionManager:
    """Track WebSocket clients and push frames to the streaming ones."""

    def __init__(self) -> None:
        self.frame_connections: list[WebSocket] = []
        self.control_connections: list[WebSocket] = []

    async def connect_frames(self, websocket: WebSocket, first_frame: dict[str, Any]) -> None:
        """Accept a frames client and send it `first_frame` before it joins broadcasts."""
        await websocket.accept()
        await websocket.send_json(first_frame)
        self.frame_connections.append(websocket)
        logger.info("Frame client connected, total: %d", len(self.frame_connections))

    async def connect_control(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.control_connections.append(websocket)
        logger.info("Control client connected, total: %d", len(self.control_connections))

    def disconnect_frames(self, websocket: WebSocket) -> None:
        if websocket in self.frame_connections:
            self.frame_connections.remove(websocket)
            logger.info("Frame client disconnected, remaining: %d", len(self.frame_connections))

    def disconnect_control(self, websocket: WebSocket) -> None:
        if websocket in self.control_connections:
            self.control_connections.remove(websocket)
            logger.info(
                "Control client disconnected, remaining: %d", len(self.control_connections)
            )

    async def broadcast_frame(self, frame: dict[str, Any]) -> None:
        """Send a frame to every frames client, dropping the ones that fail."""
        disconnected = []
        for connection in list(self.frame_connections):
            try:
                await connection.send_json(frame)
            except Exception as e:
                logger.warning("Dropping frame client after send failure: %s", e)
                disconnected.append(connection)

        for connection in disconnected:
            self.disconnect_frames(connection)


class SceneState:
    """The live scene, its WebSocket clients and the latest recorded frame.

    Everything runs on the event loop thread: frame callbacks, REST handlers
    and WebSocket handlers interleave without locks.
    """

    def __init__(self, config: SceneConfig | None = None) -> None:
        self.config = config or get_scene_config()
        self.surface = RecordingSurface(self.config.width, self.config.height)
        self.assets = {
            "background": ImageAsset("background", self.config.background_image),
            "skull": ImageAsset("skull", self.config.skull_image),
        }
        self.scene = Scene.create(
            self.surface,
            StdlibRandom(self.config.seed),
            background=self.assets["background"],
            skull=self.assets["skull"],
        )
        self.director = Director(self.scene, AsyncioFrameScheduler(self.config.fps))
        self.director.add_frame_listener(self._capture_frame)
        self.connections = ConnectionManager()
        self.latest_frame: dict[str, Any] | None = None
        self.dropped_frames = 0
        self._broadcast: asyncio.Task[None] | None = None

    def _capture_frame(self, director: Director) -> None:
        self.latest_frame = {
            "frame": director.frame_count,
            "width": self.surface.width,
            "height": self.surface.height,
            "commands": [c.to_dict() for c in self.surface.flush()],
        }
        if self.connections.frame_connections:
            self._push_frame(self.latest_frame)

    def _push_frame(self, frame: dict[str, Any]) -> None:
        # A slow client must not queue up sends; skip frames until it catches up
        if self._broadcast is not None and not self._broadcast.done():
            self.dropped_frames += 1
            return
        loop = asyncio.get_running_loop()
        self._broadcast = loop.create_task(self.connections.broadcast_frame(frame))

    async def start(self) -> None:
        """Arm the director, then load images; the first frame follows the last load."""
        self.director.start()
        await asyncio.gather(*(asset.load_async() for asset in self.assets.values()))

    def stop(self) -> None:
        if self.director.running:
            self.director.stop()
        if self._broadcast is not None:
            self._broadcast.cancel()

    def resize(self, width: int, height: int) -> None:
        self.director.resize(width, height)


_scene_state: SceneState | None = None


def get_scene_state() -> SceneState:
    """Get or create the global scene state."""
    global _scene_state
    if _scene_state is None:
        _scene_state = SceneState()
    return _scene_state


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager: start/stop the frame loop."""
    state = get_scene_state()
    await state.start()
    yield
    state.stop()


app = FastAPI(
    title="HackScene",
    description="Animated hacker network screensaver",
    version=__version__,
    lifespan=lifespan,
)


# Pydantic models for REST requests/responses


class ResizeRequest(BaseModel):
    """Host surface size notification."""

    width: int = Field(gt=0, le=16384, description="Surface width in pixels")
    height: int = Field(gt=0, le=16384, description="Surface height in pixels")


class TuningRequest(BaseModel):
    """Live tuning of subsystem parameters; omitted fields are left alone."""

    rain_spacing: int | None = Field(default=None, ge=4, le=128, description="Px between columns")
    hack_cooldown_min: float | None = Field(default=None, gt=0, description="Min hack cooldown")
    hack_cooldown_max: float | None = Field(default=None, gt=0, description="Max hack cooldown")


class ControlCommandResponse(BaseModel):
    """Response for control commands."""

    success: bool = Field(description="Whether command succeeded")
    message: str = Field(description="Status message")


class NodeResponse(BaseModel):
    id: str
    kind: str
    x: float
    y: float
    highlight: float


class ChunkResponse(BaseModel):
    state: str
    alpha: float
    x: float
    y: float
    lines: list[str]


class HackEventResponse(BaseModel):
    state: str
    target: str
    timer: float


class SceneResponse(BaseModel):
    """Snapshot of the four subsystems for debugging."""

    width: int = Field(description="Surface width")
    height: int = Field(description="Surface height")
    running: bool = Field(description="Whether the frame loop is running")
    frame: int = Field(description="Frames drawn so far")
    elapsed: float = Field(description="Simulated seconds")
    rain_columns: int = Field(description="Number of rain columns")
    rain_spacing: int = Field(description="Px between rain columns")
    chunks: list[ChunkResponse] = Field(description="Active code chunks")
    nodes: list[NodeResponse] = Field(description="Network nodes")
    packets: int = Field(description="Packets in flight")
    hack_events: list[HackEventResponse] = Field(description="Active hack events")
    hacks_completed: int = Field(description="Hack events that reached done")
    hack_cooldown: float = Field(description="Seconds until the next hack event")
    hack_cooldown_range: tuple[float, float] = Field(description="Cooldown draw range")
    frame_clients: int = Field(description="Connected /ws/frames clients")
    control_clients: int = Field(description="Connected /ws/control clients")
    dropped_frames: int = Field(description="Frames skipped while a broadcast was in flight")


def _scene_snapshot(state: SceneState) -> SceneResponse:
    scene = state.scene
    return SceneResponse(
        width=state.surface.width,
        height=state.surface.height,
        running=state.director.running,
        frame=state.director.frame_count,
        elapsed=state.director.elapsed,
        rain_columns=len(scene.rain.columns),
        rain_spacing=scene.rain.spacing,
        chunks=[
            ChunkResponse(state=c.state.value, alpha=c.alpha, x=c.x, y=c.y, lines=list(c.lines))
            for c in scene.chunks.chunks
        ],
        nodes=[
            NodeResponse(id=n.id, kind=n.kind.value, x=n.x, y=n.y, highlight=n.highlight)
            for n in scene.network.nodes.values()
        ],
        packets=len(scene.network.packets),
        hack_events=[
            HackEventResponse(state=e.state.value, target=e.target.id, timer=e.timer)
            for e in scene.hacks.events
        ],
        hacks_completed=scene.hacks.completed,
        hack_cooldown=scene.hacks.cooldown,
        hack_cooldown_range=scene.hacks.cooldown_range,
        frame_clients=len(state.connections.frame_connections),
        control_clients=len(state.connections.control_connections),
        dropped_frames=state.dropped_frames,
    )


# Pages and assets


@app.get("/", include_in_schema=False)
async def index() -> FileResponse:
    """Serve the canvas replay page."""
    return FileResponse(STATIC_DIR / "index.html", media_type="text/html")


@app.get("/assets/{name}", tags=["assets"])
async def get_asset(name: str) -> Response:
    """Serve a loaded image asset by name."""
    asset = get_scene_state().assets.get(name)
    if asset is None or not asset.complete or asset.data is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Asset '{name}' not available",
        )
    return Response(content=asset.data, media_type=asset.media_type)


# REST endpoints


@app.get("/api/scene", response_model=SceneResponse, tags=["scene"])
async def get_scene() -> SceneResponse:
    """Get a snapshot of rain, code chunks, network and hacks."""
    return _scene_snapshot(get_scene_state())


@app.post("/api/resize", response_model=ControlCommandResponse, tags=["scene"])
async def resize_surface(request: ResizeRequest) -> ControlCommandResponse:
    """Host resize notification: resets rain and relays out the network."""
    get_scene_state().resize(request.width, request.height)
    return ControlCommandResponse(
        success=True, message=f"Surface resized to {request.width}x{request.height}"
    )


@app.post("/api/hacks/trigger", response_model=ControlCommandResponse, tags=["scene"])
async def trigger_hack() -> ControlCommandResponse:
    """Stage a hack event on the next frame."""
    get_scene_state().scene.hacks.trigger()
    return ControlCommandResponse(success=True, message="Hack event scheduled")


@app.patch("/api/tuning", response_model=SceneResponse, tags=["scene"])
async def tune_scene(request: TuningRequest) -> SceneResponse:
    """Adjust rain spacing and the hack cooldown range while running."""
    state = get_scene_state()
    hacks = state.scene.hacks

    low, high = hacks.cooldown_range
    if request.hack_cooldown_min is not None:
        low = request.hack_cooldown_min
    if request.hack_cooldown_max is not None:
        high = request.hack_cooldown_max
    if low >= high:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cooldown range must be increasing, got [{low}, {high})",
        )
    hacks.cooldown_range = (low, high)

    if request.rain_spacing is not None:
        rain = state.scene.rain
        rain.spacing = request.rain_spacing
        rain.reset(state.surface.width, state.surface.height)

    logger.info("Scene tuned: %s", request.model_dump(exclude_none=True))
    return _scene_snapshot(state)


# WebSocket endpoints


@app.websocket("/ws/frames")
async def websocket_frames(websocket: WebSocket) -> None:
    """Stream each newly drawn frame's commands.

    A new client gets the latest frame right away, or an empty frame marker
    if the scene has not drawn anything yet. After that every frame is pushed
    by the frame loop. Messages from the client are ignored.
    """
    state = get_scene_state()
    manager = state.connections

    try:
        await manager.connect_frames(websocket, state.latest_frame or EMPTY_FRAME)
        while True:
            await websocket.receive_text()

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("Frame streaming error: %s", str(e))
    finally:
        manager.disconnect_frames(websocket)


@app.websocket("/ws/control")
async def websocket_control(websocket: WebSocket) -> None:
    """Receive commands from the page.

    Accepts:
    - {"type": "resize", "width": 1280, "height": 720}
    - {"type": "trigger_hack"}
    """
    state = get_scene_state()
    manager = state.connections
    await manager.connect_control(websocket)

    try:
        while True:
            data = await websocket.receive_json()
            cmd_type = str(data.get("type", "")).lower()

            if cmd_type == "resize":
                try:
                    size = ResizeRequest(width=data.get("width"), height=data.get("height"))
                except ValueError:
                    response = {"success": False, "message": "Invalid surface size"}
                else:
                    state.resize(size.width, size.height)
                    message = f"Resized to {size.width}x{size.height}"
                    response = {"success": True, "message": message}
            elif cmd_type == "trigger_hack":
                state.scene.hacks.trigger()
                response = {"success": True, "message": "Hack event scheduled"}
            else:
                response = {"success": False, "message": f"Unknown command: {cmd_type}"}

            await websocket.send_json(response)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("Control WebSocket error: %s", str(e))
    finally:
        manager.disconnect_control(websocket)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
