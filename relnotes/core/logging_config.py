"""
Deterministic logging configuration for relnotes.

Provides consistent, reproducible logging behavior with strict formatting.
"""

import logging
import sys
from typing import Final

# Constants for deterministic logging
LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL: Final[int] = logging.WARNING
ROOT_LOGGER_NAME: Final[str] = "relnotes"


def setup_logging(level: int = DEFAULT_LEVEL) -> logging.Logger:
    """
    Configure deterministic logging for relnotes.

    Logs go to stderr; stdout is reserved for command output.

    Args:
        level: The logging level to use (default: WARNING).

    Returns:
        The package root logger instance.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    # Clear any existing handlers so repeated calls do not duplicate output
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    root_logger.propagate = False
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: The name of the module requesting the logger.

    Returns:
        A logger instance with the specified name under the 'relnotes' namespace.
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
