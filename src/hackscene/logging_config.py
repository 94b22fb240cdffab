"""Logging setup for HackScene.

Environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL. Default: INFO
- LOG_FORMAT: 'text' or 'json'. Default: text

Call configure_logging() once from the entry point; library modules only ever
use logging.getLogger(__name__).
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any, ClassVar

NAMESPACE = "hackscene"

# Attributes every LogRecord carries; anything else came in through `extra=`.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _with_source(record: logging.LogRecord) -> bool:
    return record.levelno == logging.DEBUG or record.levelno >= logging.ERROR


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if _with_source(record):
            payload["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Human readable lines: TIMESTAMP LEVEL [logger] message (file:line)."""

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%H:%M:%S.%f")[:-3]

        level = f"{record.levelname:8s}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelname, '')}{level}{self.RESET}"

        name = record.name.removeprefix(f"{NAMESPACE}.")
        line = f"{timestamp} {level} [{name}] {record.getMessage()}"

        if _with_source(record):
            line += f" ({record.filename}:{record.lineno})"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def get_log_level() -> int:
    """Read LOG_LEVEL from the environment, falling back to INFO."""
    return _LEVELS.get(os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)


def get_log_format() -> str:
    """Read LOG_FORMAT from the environment ('text' or 'json')."""
    value = os.environ.get("LOG_FORMAT", "text").lower()
    return value if value in ("text", "json") else "text"


def configure_logging(
    level: int | None = None,
    format_type: str | None = None,
    use_colors: bool = True,
) -> None:
    """Install a single stderr handler on the hackscene logger.

    Args:
        level: Log level; read from LOG_LEVEL when None.
        format_type: 'text' or 'json'; read from LOG_FORMAT when None.
        use_colors: Colorize text output (only when stderr is a TTY).
    """
    level = get_log_level() if level is None else level
    format_type = get_log_format() if format_type is None else format_type

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        JSONFormatter() if format_type == "json" else TextFormatter(use_colors=use_colors)
    )

    package_logger = logging.getLogger(NAMESPACE)
    package_logger.setLevel(level)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.propagate = False

    # uvicorn's access log shares our handler so requests and frames interleave
    access = logging.getLogger("uvicorn.access")
    access.handlers.clear()
    access.addHandler(handler)
    access.setLevel(level)
    access.propagate = False

    package_logger.debug(
        "Logging configured: level=%s, format=%s", logging.getLevelName(level), format_type
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the hackscene namespace."""
    if name != NAMESPACE and not name.startswith(f"{NAMESPACE}."):
        name = f"{NAMESPACE}.{name}"
    return logging.getLogger(name)
