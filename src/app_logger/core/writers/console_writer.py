from __future__ import annotations

"""
Console Sink.

Pretty-prints log entries to a terminal stream through a private,
non-propagating stdlib logger, so host logging configuration never
duplicates or swallows console output.
"""

import itertools
import logging
from typing import Any, Dict, Optional, TextIO

from app_logger.domain.log_entry import LogEntry
from app_logger.domain.log_level import LogLevel
from app_logger.infra.logging import ERROR_ATTR, STACK_TRACE_ATTR, create_console_handler

logger = logging.getLogger(__name__)

_CONSOLE_LOGGER_NAME = "app_logger.sink.console"
_instance_ids = itertools.count(1)


class ConsoleWriter:
    """
    Synchronous console sink.

    Errors and fatals carry their error value and stack trace as record
    attributes; the ConsoleFormatter renders them as separate blocks.
    """

    def __init__(
            self,
            enabled: bool = True,
            stream: Optional[TextIO] = None,
            use_colors: Optional[bool] = None,
    ) -> None:
        self.enabled = enabled
        self._handler: Optional[logging.Handler] = create_console_handler(stream, use_colors)

        # One logger per writer keeps independent instances from sharing handlers
        self._logger = logging.getLogger(f"{_CONSOLE_LOGGER_NAME}.{next(_instance_ids)}")
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        self._logger.addHandler(self._handler)

    def write(self, entry: LogEntry) -> None:
        """Print an entry. No-op when disabled or disposed; never raises."""
        if not self.enabled or self._handler is None:
            return

        try:
            message = entry.message
            if entry.context:
                message += f"\nContext: {dict(entry.context)}"

            extra: Dict[str, Any] = {}
            if entry.level >= LogLevel.ERROR:
                extra[ERROR_ATTR] = entry.error
                extra[STACK_TRACE_ATTR] = entry.stack_trace

            self._logger.log(entry.level.to_logging_level(), message, extra=extra)
        except Exception as e:
            logger.warning(f"Console sink failed to render entry: {e}")

    def dispose(self) -> None:
        """Detach and close the underlying stream handler."""
        if self._handler is None:
            return
        self._logger.removeHandler(self._handler)
        self._handler.close()
        self._handler = None
