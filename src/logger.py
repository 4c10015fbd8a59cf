"""Logging setup for modulize.

Every module logs through a child of the ``modulize`` logger so that a single
call to :func:`setup_logger` from the CLI controls verbosity for the whole run.
Verbosity only changes diagnostics, never the converted output.

Examples:
    >>> from logger import setup_logger
    >>> log = setup_logger("modulize", level="DEBUG")
    >>> log.debug("Symbols are x, y")
"""

from __future__ import annotations

import logging
import logging.handlers
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

ROOT_LOGGER_NAME = "modulize"

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SIMPLE_FORMAT = "%(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _check_level(level: str) -> int:
    if level.upper() not in VALID_LOG_LEVELS:
        msg = f"Invalid log level: {level}. Must be one of {VALID_LOG_LEVELS}"
        raise ValueError(msg)
    return getattr(logging, level.upper())


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "WARNING",
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure and return a logger with a console handler.

    Calling this more than once updates the level but never stacks handlers.

    Args:
        name: Logger name, normally ``"modulize"``.
        level: One of :data:`VALID_LOG_LEVELS`.
        log_file: Optional path; adds a rotating file handler at DEBUG level.

    Raises:
        ValueError: If level is not a valid log level.
    """
    numeric_level = _check_level(level)

    log = logging.getLogger(name)
    log.setLevel(numeric_level)

    has_file_handler = any(
        isinstance(h, logging.handlers.RotatingFileHandler) for h in log.handlers
    )
    console_handlers = [
        h
        for h in log.handlers
        if isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.handlers.RotatingFileHandler)
    ]

    if console_handlers:
        for handler in console_handlers:
            handler.setLevel(numeric_level)
    else:
        add_console_handler(log, level)

    if log_file is not None and not has_file_handler:
        add_file_handler(log, log_file)

    return log


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``modulize`` hierarchy.

    Module names are nested below the root logger, so ``get_logger("merge.combine")``
    yields ``modulize.merge.combine`` and propagates to whatever
    :func:`setup_logger` configured.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def set_log_level(log: logging.Logger, level: str) -> None:
    """Change the level of a logger and its handlers."""
    numeric_level = _check_level(level)
    log.setLevel(numeric_level)
    for handler in log.handlers:
        if not isinstance(handler, logging.handlers.RotatingFileHandler):
            handler.setLevel(numeric_level)


def add_file_handler(log: logging.Logger, log_file: Path, level: str = "DEBUG") -> None:
    """Attach a rotating file handler (10MB, 5 backups) using the detailed format."""
    numeric_level = _check_level(level)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))
    log.addHandler(file_handler)


def add_console_handler(log: logging.Logger, level: str = "WARNING") -> None:
    """Attach a stderr handler using the simple format."""
    numeric_level = _check_level(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
    log.addHandler(console_handler)


def level_for(*, verbose: bool, debug: bool) -> str:
    """Map the verbose/debug switches onto a log level name."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    return "WARNING"


__all__ = [
    "DATE_FORMAT",
    "DETAILED_FORMAT",
    "ROOT_LOGGER_NAME",
    "SIMPLE_FORMAT",
    "VALID_LOG_LEVELS",
    "add_console_handler",
    "add_file_handler",
    "get_logger",
    "level_for",
    "set_log_level",
    "setup_logger",
]
