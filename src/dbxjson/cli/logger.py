"""Logging helpers for the dbxjson CLI."""

from __future__ import annotations

import logging
import os
import sys

import colorlog

LOG_FORMAT = "[%(asctime)s] <%(name)s> %(levelname)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

LOG_COLORS = {
    "DEBUG": "bold_cyan",
    "INFO": "bold_green",
    "WARNING": "bold_yellow",
    "ERROR": "bold_red",
    "CRITICAL": "bold_red,bg_white",
}

# Libraries whose DEBUG output drowns ours (one line per lock, per connection).
NOISY_LOGGERS = ("filelock", "urllib3")


def _use_color() -> bool:
    if os.getenv("NO_COLOR") is not None:
        return False
    return sys.stderr.isatty()


def _make_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    if _use_color():
        handler.setFormatter(
            colorlog.ColoredFormatter(
                fmt="%(log_color)s[%(asctime)s] <%(name)s> %(levelname)s:%(reset)s %(message)s",
                log_colors=LOG_COLORS,
                datefmt=LOG_DATEFMT,
            )
        )
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    return handler


def configure_logging(verbose: bool) -> None:
    """Log to stderr at INFO, or DEBUG when verbose, coloring when on a TTY."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, handlers=[_make_handler()], force=True)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if verbose else logging.WARNING)
