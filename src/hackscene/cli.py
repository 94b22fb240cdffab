"""Command-line interface for HackScene.

Scene options are handed to the server as HACKSCENE_* environment variables,
so they also reach the worker process uvicorn starts under --reload.
"""

import argparse
import os
import sys

import uvicorn

from hackscene import __version__
from hackscene.config import get_scene_config
from hackscene.logging_config import configure_logging

# argparse dest -> environment variable read by SceneConfig
SCENE_OPTIONS = {
    "width": "HACKSCENE_WIDTH",
    "height": "HACKSCENE_HEIGHT",
    "fps": "HACKSCENE_FPS",
    "background": "HACKSCENE_BACKGROUND_IMAGE",
    "skull": "HACKSCENE_SKULL_IMAGE",
    "seed": "HACKSCENE_SEED",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hackscene",
        description=(
            "Serve the HackScene screensaver: matrix rain, drifting code and a "
            "network under attack, drawn in the browser from frames streamed "
            "over a WebSocket."
        ),
        epilog="Scene options override the matching HACKSCENE_* environment variables.",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    scene = parser.add_argument_group("scene")
    scene.add_argument("--width", type=int, help="Initial surface width in pixels")
    scene.add_argument("--height", type=int, help="Initial surface height in pixels")
    scene.add_argument("--fps", type=float, help="Target frame rate of the server loop")
    scene.add_argument("--background", metavar="PATH", help="Background image file")
    scene.add_argument("--skull", metavar="PATH", help="Skull image drawn over hacked nodes")
    scene.add_argument("--seed", type=int, help="Seed the random source for a repeatable scene")
    return parser


def apply_scene_options(parsed: argparse.Namespace) -> dict[str, str]:
    """Export the scene options that were given. Returns the variables set."""
    exported = {
        env: str(getattr(parsed, dest))
        for dest, env in SCENE_OPTIONS.items()
        if getattr(parsed, dest) is not None
    }
    os.environ.update(exported)
    if exported:
        get_scene_config.cache_clear()
    return exported


def main(args: list[str] | None = None) -> int:
    """Serve the screensaver.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success).
    """
    parsed = build_parser().parse_args(args)

    configure_logging()
    apply_scene_options(parsed)
    print(f"Open http://{parsed.host}:{parsed.port}/ to watch the scene")
    print("Press Ctrl+C to stop")

    uvicorn.run(
        "hackscene.server.app:app",
        host=parsed.host,
        port=parsed.port,
        reload=parsed.reload,
        log_config=None,
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
