"""Logging utilities."""

import logging
import sys
from typing import Optional, TextIO

DEFAULT_FORMAT = "driftcheck: %(levelname)s - %(message)s"
DEBUG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"

# Chatty third-party loggers kept at WARNING unless debugging
NOISY_LOGGERS = ("asyncio", "aiohttp", "claude_agent_sdk")


def setup_logging(
    debug: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Setup logging for driftcheck.

    Records go to stderr by default: stdout carries command output, and git
    only relays a hook's stderr to the pushing user. Without debug only
    warnings and errors are shown, in a short prefix format.

    Args:
        debug: Log everything, with timestamps and logger names
        stream: Destination stream (default: stderr)

    Returns:
        The package logger
    """
    level = logging.DEBUG if debug else logging.WARNING
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(DEBUG_FORMAT if debug else DEFAULT_FORMAT))

    logger = logging.getLogger("driftcheck")
    logger.handlers = [handler]
    logger.setLevel(level)
    logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)

    return logger


def get_logger(name: str = "driftcheck") -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
