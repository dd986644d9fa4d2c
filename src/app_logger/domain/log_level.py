from __future__ import annotations

"""
Log Severity Scale.

Defines the totally ordered set of severities used for global filtering,
remote sink thresholds and the flush/upload triggers.
"""

import logging
from enum import Enum
from functools import total_ordering
from typing import Any, Dict


@total_ordering
class LogLevel(Enum):
    """Ordered log severity. The value is the name used in serialized entries."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    @property
    def priority(self) -> int:
        """Numeric rank used for every comparison."""
        return _PRIORITIES[self]

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.priority < other.priority

    def to_logging_level(self) -> int:
        """Map onto the matching standard library level constant."""
        return _STDLIB_LEVELS[self]

    @classmethod
    def parse(cls, value: Any) -> LogLevel:
        """
        Resolve a level from a LogLevel, a name or a priority number.

        Args:
            value: Level instance, case-insensitive name (WARN and CRITICAL
                are accepted as aliases) or integer priority.

        Returns:
            LogLevel: The matching level.

        Raises:
            ValueError: If the value does not name a known level.
        """
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid log level: {value!r}")
        if isinstance(value, int):
            for level in cls:
                if level.priority == value:
                    return level
            raise ValueError(f"Invalid log level priority: {value}")
        if isinstance(value, str):
            key = value.strip().upper()
            if key in _ALIASES:
                return _ALIASES[key]
        raise ValueError(f"Invalid log level: {value!r}")


_PRIORITIES: Dict[LogLevel, int] = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARNING: 2,
    LogLevel.ERROR: 3,
    LogLevel.FATAL: 4,
}

_STDLIB_LEVELS: Dict[LogLevel, int] = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.CRITICAL,
}

_ALIASES: Dict[str, LogLevel] = {
    "DEBUG": LogLevel.DEBUG,
    "INFO": LogLevel.INFO,
    "WARNING": LogLevel.WARNING,
    "WARN": LogLevel.WARNING,
    "ERROR": LogLevel.ERROR,
    "FATAL": LogLevel.FATAL,
    "CRITICAL": LogLevel.FATAL,
}
