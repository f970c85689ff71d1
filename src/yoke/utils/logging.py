"""Logging setup for the yoke package."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from ..config.settings import YokeSettings

LOGGER_NAME = "yoke"


def configure_logging(settings: YokeSettings, console: Optional[Console] = None) -> logging.Logger:
    """Route the package loggers to a Rich handler on stderr.

    Safe to call more than once; the handler is replaced and the level is
    taken from the current settings.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=settings.debug,
        rich_tracebacks=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(settings.effective_log_level)
    return logger
