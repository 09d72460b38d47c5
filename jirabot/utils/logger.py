"""
Logger Utility
==============

Context-aware terminal logging for the bot.

Every module creates its own named logger so a line in the output can be
traced back to the component that wrote it:

    [2024-01-31T10:30:00] [INFO] [Dispatcher] .create from Jane Doe

Levels are filtered by the LOG_LEVEL environment variable (DEBUG, INFO,
WARNING, ERROR). ERROR lines go to stderr, everything else to stdout.

Usage:
    from jirabot.utils.logger import Logger

    logger = Logger("JiraClient")
    logger.info("Fetched projects", {"count": 12})

    try:
        ...
    except Exception as e:
        logger.error("Lookup failed", e)
"""

import json
import os
import sys
from datetime import datetime
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Log levels, ordered by severity."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


class Colors:
    """ANSI escape codes for colored terminal output."""
    RESET = "\033[0m"
    DEBUG = "\033[36m"    # Cyan
    INFO = "\033[32m"     # Green
    WARNING = "\033[33m"  # Yellow
    ERROR = "\033[31m"    # Red
    DIM = "\033[2m"


_LEVELS = {
    "DEBUG": LogLevel.DEBUG,
    "INFO": LogLevel.INFO,
    "WARNING": LogLevel.WARNING,
    "WARN": LogLevel.WARNING,
    "ERROR": LogLevel.ERROR,
}


def _get_log_level_from_env() -> LogLevel:
    """Read LOG_LEVEL, defaulting to INFO for unknown values."""
    return _LEVELS.get(os.getenv("LOG_LEVEL", "INFO").upper(), LogLevel.INFO)


class Logger:
    """
    A named logger with colored output and optional structured data.

    Example:
        logger = Logger("Commands")
        logger.debug("Parsed create", {"project": "ABC", "summary": "Fix bug"})
    """

    def __init__(self, context: str = ""):
        self.context = context
        self._min_level = _get_log_level_from_env()

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self._min_level

    def _format_message(self, level: str, message: str, color: str) -> str:
        timestamp = datetime.now().isoformat(timespec="seconds")
        context_str = f"[{self.context}] " if self.context else ""

        return (
            f"{Colors.DIM}[{timestamp}]{Colors.RESET} "
            f"{color}[{level}]{Colors.RESET} "
            f"{context_str}{message}"
        )

    def _log(
        self,
        level: LogLevel,
        level_name: str,
        color: str,
        message: str,
        data: dict[str, Any] | None = None
    ) -> None:
        if not self.is_enabled_for(level):
            return

        stream = sys.stderr if level >= LogLevel.ERROR else sys.stdout
        print(self._format_message(level_name, message, color), file=stream)

        if data:
            data_str = json.dumps(data, indent=2, default=str)
            print(f"{Colors.DIM}{data_str}{Colors.RESET}", file=stream)

    def debug(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Detailed diagnostics, only shown with LOG_LEVEL=DEBUG."""
        self._log(LogLevel.DEBUG, "DEBUG", Colors.DEBUG, message, data)

    def info(self, message: str, data: dict[str, Any] | None = None) -> None:
        """General operational information."""
        self._log(LogLevel.INFO, "INFO", Colors.INFO, message, data)

    def warning(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Something failed but the bot carried on (e.g. a best-effort call)."""
        self._log(LogLevel.WARNING, "WARN", Colors.WARNING, message, data)

    def error(self, message: str, error: Exception | None = None) -> None:
        """
        Log an error, optionally with the exception that caused it.

        Args:
            message: What was being attempted
            error: The exception, whose type and text are included
        """
        data = None
        if error:
            data = {
                "error_type": type(error).__name__,
                "error_message": str(error),
            }
        self._log(LogLevel.ERROR, "ERROR", Colors.ERROR, message, data)
