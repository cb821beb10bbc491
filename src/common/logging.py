"""
Structured logging setup for the user management server using structlog.

- Always writes to stderr: stdout belongs to the stdio transport
- LOG_FORMAT=json renders one JSON object per line
- LOG_FORMAT=text renders "[timestamp] [LEVEL] event {context}"
"""

import json
import logging
import sys
import time
from typing import Any, Optional

import structlog

from common.config import Config

# Global config reference for the renderer
_config: Optional[Config] = None

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def resolve_level(level: str) -> int:
    """Map a configured level name onto a stdlib logging level."""
    try:
        return LOG_LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"Unknown log level '{level}'") from None


def text_renderer(_, __, event_dict) -> str:
    """Render "[timestamp] [LEVEL] event" followed by the remaining context as JSON."""
    timestamp = event_dict.pop("timestamp", "")
    level = str(event_dict.pop("level", "info")).upper()
    event = event_dict.pop("event", "unknown_event")
    event_dict.pop("logger", None)

    line = f"[{timestamp}] [{level}] {event}"
    if event_dict:
        line = f"{line} {json.dumps(event_dict, default=str)}"
    return line


def setup_logging(config: Config) -> None:
    """
    Setup structured logging using structlog.

    Args:
        config: Application configuration
    """
    global _config
    _config = config

    renderer = (
        structlog.processors.JSONRenderer(default=str)
        if config.log_format == "json"
        else text_renderer
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logging.basicConfig(
        level=resolve_level(config.log_level),
        handlers=[handler],
        format="%(message)s",
        force=True,
    )

    # Keep server framework chatter out of the protocol logs
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)


def set_log_level(level: str) -> None:
    """Change the root log level at runtime."""
    logging.getLogger().setLevel(resolve_level(level))


class TimedLogger:
    """Context manager for timing operations and logging elapsed time using structlog."""

    def __init__(self, logger: structlog.BoundLogger, event: str, **context: Any):
        """
        Initialize timed logger.

        Args:
            logger: structlog logger instance
            event: Event name for the log entry
            **context: Additional context to include in logs
        """
        self.logger = logger
        self.event = event
        self.context = context
        self.start_time: Optional[float] = None
        self.elapsed_ms: Optional[float] = None

    def __enter__(self) -> "TimedLogger":
        """Start timing."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Log elapsed time, at error level when the block raised."""
        if self.start_time is None:
            return
        self.elapsed_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
        if exc_type is not None:
            self.logger.error(
                event=f"{self.event}_failed",
                elapsed_ms=self.elapsed_ms,
                error=str(exc_val),
                error_type=exc_type.__name__,
                **self.context,
            )
        else:
            self.logger.info(event=self.event, elapsed_ms=self.elapsed_ms, **self.context)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a configured structlog logger."""
    return structlog.get_logger(name)
