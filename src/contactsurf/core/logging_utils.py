"""Logging utilities for colorized terminal output.

This module provides a ColoredFormatter and setup function for consistent
logging with visual emphasis on warnings and errors in terminal output.
"""

from __future__ import annotations

import logging
import sys


class ColoredFormatter(logging.Formatter):
    """Formatter that adds ANSI color codes for WARNING and ERROR levels.

    Colors are only applied when output is to an interactive terminal (TTY).
    When redirecting to a file or pipe, plain text is used.

    Attributes
    ----------
    COLORS : dict
        Mapping of log levels to ANSI color codes.
    RESET : str
        ANSI code to reset text formatting.
    """

    COLORS = {
        logging.WARNING: "\033[93m",  # Yellow
        logging.ERROR: "\033[91m",  # Red
        logging.CRITICAL: "\033[91m",  # Red
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with color if appropriate."""
        message = super().format(record)
        color = self.COLORS.get(record.levelno)
        if color and sys.stderr.isatty():
            return f"{color}{message}{self.RESET}"
        return message


def setup_logging(quiet: bool = False, debug: bool = False) -> None:
    """Configure the root logger with colored output.

    Parameters
    ----------
    quiet : bool, optional
        Show only WARNING and above.
    debug : bool, optional
        Show DEBUG and above. Takes precedence over ``quiet``.

    Examples
    --------
    >>> from contactsurf.core.logging_utils import setup_logging
    >>> setup_logging()  # INFO and above
    >>> setup_logging(debug=True)  # per-pair diagnostics
    """
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s %(name)s: %(message)s"
    elif quiet:
        level = logging.WARNING
        fmt = "%(message)s"
    else:
        level = logging.INFO
        fmt = "%(message)s"

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColoredFormatter(fmt))

    logging.root.handlers = []
    logging.root.addHandler(handler)
    logging.root.setLevel(level)

    if not debug:
        suppress_mdanalysis_info()


def suppress_mdanalysis_info() -> None:
    """Suppress verbose MDAnalysis INFO-level log messages.

    MDAnalysis emits many INFO messages during Universe creation
    ("Setting segids from chainIDs...", "attribute masses has been guessed
    successfully") that clutter terminal output.
    """
    logging.getLogger("MDAnalysis").setLevel(logging.WARNING)
