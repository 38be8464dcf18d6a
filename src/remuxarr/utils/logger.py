"""Structured logging for remuxarr.

structlog renders the event dict and hands it to stdlib logging, which owns
the handlers. Tool output can be long, so every handler writes to stderr or a
file and stdout stays free for CLI results.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

from remuxarr.config import LoggingConfig

_SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def _renderer(config: LoggingConfig):
    if config.format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _handlers(config: LoggingConfig, level: int) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if config.output:
        log_path = Path(config.output)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path, mode="a", encoding="utf-8"))
        except OSError as e:
            # Logging is not configured yet
            print(f"Warning: Could not open log file {log_path}: {e}", file=sys.stderr)

    for handler in handlers:
        handler.setLevel(level)
    return handlers


def setup_logging(config: LoggingConfig) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        config: Logging configuration
    """
    level = logging.getLevelName(config.level.upper())

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, _renderer(config)],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=_handlers(config, level),
        force=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, usually called as ``get_logger(__name__)``."""
    return structlog.get_logger(name)
