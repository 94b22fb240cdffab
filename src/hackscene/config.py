"""Scene configuration loaded from the environment.

Settings come from HACKSCENE_* environment variables and an optional .env
file, validated by pydantic.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class SceneConfig(BaseSettings):
    """Runtime settings for the screensaver.

    Environment Variables:
        HACKSCENE_WIDTH: Initial surface width in pixels (default: 1024)
        HACKSCENE_HEIGHT: Initial surface height in pixels (default: 768)
        HACKSCENE_FPS: Target frames per second for the server loop (default: 60)
        HACKSCENE_BACKGROUND_IMAGE: Path of the background bitmap
        HACKSCENE_SKULL_IMAGE: Path of the skull overlay bitmap
        HACKSCENE_SEED: Optional seed for the random source

    Example:
        >>> config = SceneConfig(width=800, height=600)
        >>> config.fps
        60.0
    """

    model_config = SettingsConfigDict(
        env_prefix="HACKSCENE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    width: int = Field(default=1024, gt=0, le=16384, description="Surface width in pixels")
    height: int = Field(default=768, gt=0, le=16384, description="Surface height in pixels")
    fps: float = Field(default=60.0, ge=1.0, le=240.0, description="Target frame rate")

    background_image: Path = Field(
        default=Path("assets/background.png"),
        description="Background bitmap, stretched to the surface",
    )
    skull_image: Path = Field(
        default=Path("assets/skull.png"),
        description="Skull bitmap drawn over hacked nodes",
    )

    seed: int | None = Field(default=None, description="Seed for the random source")


@lru_cache
def get_scene_config() -> SceneConfig:
    """Return the cached scene configuration.

    Call get_scene_config.cache_clear() to pick up environment changes.
    """
    config = SceneConfig()
    logger.info(
        "Loaded scene configuration: %dx%d @ %.0f fps", config.width, config.height, config.fps
    )
    return config
