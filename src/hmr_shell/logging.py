"""Logging configuration for hmr-shell.

Console logging goes to stderr at a configurable level. An optional log file
captures everything (including tracebacks of failed commands and reloads);
by default it is written to ~/.hmr_shell/logs/<name>.log
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

# Directory for log files
LOGS_DIR = Path.home() / ".hmr_shell" / "logs"

# Root logger for the package
LOGGER_NAME = "hmr_shell"

# Module-level state
_console_handler: Optional[logging.Handler] = None
_file_handler: Optional[logging.FileHandler] = None
_file_log_path: Optional[Path] = None


def get_log_path(name: str) -> Path:
    """Default log file for a name, e.g. ~/.hmr_shell/logs/shell.log"""
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    return LOGS_DIR / f"{name}.log"


def configure_logging(level: int | str = logging.WARNING) -> None:
    """Send package logs to stderr at the given level.

    Calling again replaces the previous console handler.
    """
    global _console_handler

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    pkg_logger = logging.getLogger(LOGGER_NAME)
    if _console_handler is not None:
        pkg_logger.removeHandler(_console_handler)

    _console_handler = logging.StreamHandler(sys.stderr)
    _console_handler.setLevel(level)
    _console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    pkg_logger.addHandler(_console_handler)
    pkg_logger.setLevel(min(level, _file_handler.level) if _file_handler else level)


def configure_file_logging(
    path: Optional[Path] = None,
    level: int = logging.DEBUG,
) -> Path:
    """Configure file logging for the shell.

    Args:
        path: Log file path (default ~/.hmr_shell/logs/shell.log)
        level: Logging level for file output (default DEBUG)

    Returns:
        Path to the log file
    """
    global _file_handler, _file_log_path

    log_path = Path(path) if path else get_log_path("shell")
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Remove existing file handler if any
    close_file_logging()

    _file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    _file_handler.setLevel(level)

    # Format with timestamp and full context
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    _file_handler.setFormatter(formatter)

    pkg_logger = logging.getLogger(LOGGER_NAME)
    pkg_logger.addHandler(_file_handler)
    pkg_logger.setLevel(min(pkg_logger.level or logging.DEBUG, level))

    _file_log_path = log_path
    pkg_logger.info("=== Shell started ===")
    return log_path


def close_file_logging() -> None:
    """Flush and close the log file, if one is open."""
    global _file_handler, _file_log_path

    if _file_handler is not None:
        pkg_logger = logging.getLogger(LOGGER_NAME)
        pkg_logger.info("=== Shell stopped ===")

        pkg_logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None
        _file_log_path = None


def get_current_log_path() -> Optional[Path]:
    """Get the current log file path, or None if file logging is off."""
    return _file_log_path


def log_exception(error: Exception, context: str = "", include_traceback: bool = True) -> str:
    """Log an exception on the package logger and return a one-line summary.

    The log record carries the traceback (unless include_traceback is
    False); the returned string is what the user should see, e.g.
    "Failed to load module 'x': boom".
    """
    summary = f"{context}: {error}" if context else f"{type(error).__name__}: {error}"
    logging.getLogger(LOGGER_NAME).error(
        summary,
        exc_info=(type(error), error, error.__traceback__) if include_traceback else None,
    )
    return summary
