"""
Logging setup for the dispatcher.

Every module asks for its logger with get_logger(__name__); nothing is wired
until configure() runs once from cli.main(). Records go to stderr through a
rich handler so they never mix with what scripts print on stdout.

Levels
- DEBUG: resolution steps, binding results, launches and their exit codes.
- WARNING and above: reserved; normal operation logs nothing at these levels,
  so the default “warning” keeps the console clean.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_ROOT = "subcommander"


def get_logger(name):
    """
    Return the logger for a module (children of the package logger).
    """
    if not name.startswith(_ROOT):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)


def configure(level="warning", *, colorful=False):
    """
    Attach a single rich handler to the package logger.

    Parameters
    - level: str | int
      One of LEVELS' keys, or a numeric logging level.
    - colorful: bool (keyword-only)
      Let rich style the records; off means plain text (no markup, no colour).

    Calling configure() again replaces the previous handler instead of stacking.
    """
    if isinstance(level, str):
        try:
            level = LEVELS[level.lower()]
        except KeyError:
            raise ValueError(f"unknown log level {level!r}") from None

    logger = logging.getLogger(_ROOT)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True, no_color=not colorful, highlight=colorful),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


__all__ = (
    "LEVELS",
    "get_logger",
    "configure",
)
