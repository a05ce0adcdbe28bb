"""Package logging.

Modules log through ``get_logger(__name__)`` and never attach handlers
themselves; the CLI calls ``setup_logger`` once per command. Console
output goes to stderr so descriptors and reports printed on stdout stay
pipeable.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

PACKAGE_LOGGER = 'bodymorph'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


class ColoredFormatter(logging.Formatter):
    """Colorize the level name with ANSI codes."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        if color is None:
            return super().format(record)

        # The record is shared with the file handler
        levelname = record.levelname
        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _console_handler(stream: TextIO, log_level: str) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(getattr(logging, log_level.upper()))
    if getattr(stream, 'isatty', lambda: False)():
        handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def setup_logger(
    name: str = PACKAGE_LOGGER,
    verbose: bool = True,
    log_file: Optional[Path] = None,
    log_level: str = "INFO"
) -> logging.Logger:
    """
    Attach handlers to the package logger.

    Args:
        name: Logger name
        verbose: Attach a console handler on stderr at ``log_level``
        log_file: Also write everything at DEBUG to this file
        log_level: "DEBUG", "INFO", "WARNING" or "ERROR"

    Returns:
        The configured logger

    Example:
        >>> logger = setup_logger(log_level='DEBUG', log_file=Path("convert.log"))
        >>> logger.info("Validating 12 presets")
        INFO: Validating 12 presets

    Notes:
        Calling this again replaces the handlers, so each CLI invocation
        starts clean. Module loggers (bodymorph.core.tri, ...) propagate here.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(fh)

    if verbose:
        logger.addHandler(_console_handler(sys.stderr, log_level))

    return logger


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """Logger for ``name``, usually the calling module's ``__name__``."""
    return logging.getLogger(name)
