from __future__ import annotations

"""
Logging Handlers and Formatters.

Provides the handler factories used by the diagnostics logger and the
console sink, the formatter that renders console entries (with error and
stack trace blocks attached rather than folded into the message) and the
tagging helpers that let the package recognize its own handlers.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Optional, TextIO

# Internal attribute used to tag and identify our own handlers
_HANDLER_TAG_ATTR: str = "_app_logger_handler"

# LogRecord attributes carrying structured error data for the console sink
ERROR_ATTR = "entry_error"
STACK_TRACE_ATTR = "entry_stack_trace"

_RESET = "\033[0m"
_LEVEL_COLORS: Dict[int, str] = {
    logging.DEBUG: "\033[90m",
    logging.INFO: "\033[36m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;35m",
}


# ==============================================================================
# CONSOLE FORMATTER
# ==============================================================================

class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console format for log entries.

    Renders "time | LEVEL | message" and, when the record carries them,
    separate "Error:" and "StackTrace:" blocks below the message.
    """

    def __init__(self, use_colors: bool = False) -> None:
        super().__init__(fmt="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(message)s", datefmt="%H:%M:%S")
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)

        blocks: List[str] = [text]
        error = getattr(record, ERROR_ATTR, None)
        if error is not None:
            blocks.append(f"Error: {error}")

        stack_trace = getattr(record, STACK_TRACE_ATTR, None)
        if stack_trace:
            blocks.append("StackTrace:")
            blocks.append(str(stack_trace).rstrip("\n"))

        rendered = "\n".join(blocks)
        if self.use_colors:
            color = _LEVEL_COLORS.get(record.levelno, "")
            if color:
                rendered = f"{color}{rendered}{_RESET}"
        return rendered


# ==============================================================================
# HANDLER FACTORIES
# ==============================================================================

def create_console_handler(stream: Optional[TextIO] = None, use_colors: Optional[bool] = None) -> logging.Handler:
    """
    Build the stream handler used by the console sink.

    Args:
        stream: Target text stream (defaults to stderr).
        use_colors: Force ANSI colors on or off; auto-detected from the TTY if None.

    Returns:
        logging.Handler: Tagged handler with a ConsoleFormatter.
    """
    target = stream if stream is not None else sys.stderr
    if use_colors is None:
        use_colors = _is_tty(target)

    handler = logging.StreamHandler(target)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(ConsoleFormatter(use_colors=use_colors))
    _tag_handler(handler)
    return handler


def _create_rotating_file_handler(
        log_file: str,
        level_int: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
) -> Optional[RotatingFileHandler]:
    """
    Initialize a RotatingFileHandler for diagnostics with robust error handling.

    Returns:
        Optional[RotatingFileHandler]: Configured handler or None if I/O fails.
    """
    try:
        _ensure_parent_dir(log_file)
        fh = RotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
        fh.setLevel(level_int)
        fh.setFormatter(formatter)
        _tag_handler(fh)
        return fh
    except OSError as e:
        sys.stderr.write(f"WARNING: Diagnostics persistence failure at '{log_file}': {e}\n")
        return None


# ==============================================================================
# INTERNAL LOGGING UTILITIES
# ==============================================================================

def _tag_handler(handler: logging.Handler) -> None:
    """Mark a handler as managed by this package."""
    setattr(handler, _HANDLER_TAG_ATTR, True)


def _is_our_handler(handler: logging.Handler) -> bool:
    """Verify if a handler was created by this package."""
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)


def _is_tty(stream: Any) -> bool:
    try:
        return bool(stream.isatty())
    except (AttributeError, ValueError):
        return False
