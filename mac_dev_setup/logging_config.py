"""
Centralized logging configuration for mac-dev-setup.

Console output mimics a provisioning script: every record is rendered as
an ``==> message`` status line, coloured by level when stdout is a TTY.
An optional log file receives everything at DEBUG with timestamps.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "mac_dev_setup"

# Global logger instance
_logger: Optional[logging.Logger] = None


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    propagate: bool = False,
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
        verbose: Enable verbose (DEBUG) output
        quiet: Suppress console output (file only)
        propagate: Allow log propagation (useful for testing)

    Returns:
        Configured logger instance
    """
    global _logger

    if verbose:
        effective_level = "DEBUG"
    elif quiet:
        effective_level = "WARNING"
    else:
        effective_level = level.upper()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, effective_level))
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    if not quiet:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, effective_level))
        console_handler.setFormatter(
            StatusLineFormatter(use_colors=sys.stdout.isatty())
        )
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(file_handler)

    logger.propagate = propagate

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """
    Get the configured logger instance.

    If logging hasn't been set up, initializes with defaults.
    """
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger


class StatusLineFormatter(logging.Formatter):
    """
    Render records as ``==> message`` status lines.

    Warnings and errors carry their level name so they stand out in a
    long install log.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[1;31m', # Bold Red
    }
    RESET = '\033[0m'
    ARROW = "==>"

    def __init__(self, use_colors: bool = True):
        super().__init__("%(message)s")
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        levelname = record.levelname

        prefix = self.ARROW
        if record.levelno >= logging.WARNING:
            prefix = f"{self.ARROW} {levelname.capitalize()}:"
        elif record.levelno == logging.DEBUG:
            prefix = "   "

        if self.use_colors:
            color = self.COLORS.get(levelname, '')
            prefix = f"{color}{prefix}{self.RESET}"

        return f"{prefix} {message}"
