"""Logging setup for the issync command line."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "issync"


def setup_logging(level: str | int = "WARNING", console: Optional[Console] = None) -> logging.Logger:
    """Route the ``issync`` logger hierarchy through a Rich handler.

    Calling it again replaces the previous handler, so the level can be
    changed per command.

    Args:
        level: Level name or number.
        console: Rich Console to log to (stderr by default).

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
