"""Logging setup for the Voyager decoder.

Usage:
    from voyager.logging import configure_logging, get_logger

    configure_logging(level='DEBUG')
    logger = get_logger('voyager.batch')
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from . import config

_ROOT_LOGGER = 'voyager'


class ConsoleFormatter(logging.Formatter):
    """``[time] LEVEL [module] message`` with optional colour on a TTY."""

    LEVEL_COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')
        level = record.levelname
        if self.use_color:
            level_str = f"{self.LEVEL_COLORS.get(level, '')}{level:8}{self.RESET}"
        else:
            level_str = f"{level:8}"
        name = record.name.replace('voyager.', '')
        line = f"[{ts}] {level_str} [{name}] {record.getMessage()}"
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def configure_logging(level: Optional[str] = None, use_color: bool = True) -> logging.Logger:
    """Attach a console handler to the ``voyager`` logger.

    Args:
        level: Level name. Defaults to DEBUG when VOYAGER_DEBUG is set,
            otherwise VOYAGER_LOG_LEVEL.
        use_color: Colourize level names (ignored when not a TTY).

    Calling it again replaces the handler instead of adding another.
    """
    if level is None:
        level = 'DEBUG' if config.DEBUG else config.LOG_LEVEL

    root = logging.getLogger(_ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root.handlers):
        if getattr(handler, '_voyager_console', False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ConsoleFormatter(use_color=use_color))
    handler._voyager_console = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``voyager`` namespace."""
    if not name.startswith(_ROOT_LOGGER):
        name = f'{_ROOT_LOGGER}.{name}'
    return logging.getLogger(name)
