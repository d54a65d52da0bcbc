"""
logger.py

Responsibility: Configures Python's standard logging for the process: one
stdout handler, a timestamped line format, and the level chosen from
LOG_LEVEL / --debug.
Does NOT: emit application log messages itself; modules log through
logging.getLogger(__name__).
"""

from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are only interesting when debugging
_NOISY_LOGGERS = ("httpx", "httpcore", "apscheduler")


def resolve_level(debug: bool, env_level: str | None = None) -> int:
    """
    Returns the root log level.

    An explicit LOG_LEVEL (e.g. "WARNING") wins over the debug flag.

    Args:
        debug: True when --debug / DEBUG was given.
        env_level: The LOG_LEVEL value, if any.

    Returns:
        A logging level integer.
    """
    if env_level:
        level = logging.getLevelName(env_level.strip().upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if debug else logging.INFO


def configure_logging(debug: bool = False) -> None:
    """
    Installs the stdout handler and sets levels.

    Safe to call more than once; earlier handlers are replaced.

    Args:
        debug: Enables DEBUG output, including cache hits and misses.
    """
    level = resolve_level(debug, os.environ.get("LOG_LEVEL"))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
