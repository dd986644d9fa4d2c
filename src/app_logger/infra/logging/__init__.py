from __future__ import annotations

from .config import PACKAGE_LOGGER_NAME, LoggingConfig
from .core import (
    _CONFIGURED_FLAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    configure_logging,
    get_logger,
    reset_logging,
)
from .handlers import (
    _HANDLER_TAG_ATTR,
    ERROR_ATTR,
    STACK_TRACE_ATTR,
    ConsoleFormatter,
    create_console_handler,
)

__all__ = [
    "LoggingConfig",
    "PACKAGE_LOGGER_NAME",
    "configure_logging",
    "reset_logging",
    "get_logger",
    "ConsoleFormatter",
    "create_console_handler",
    "ERROR_ATTR",
    "STACK_TRACE_ATTR",
]
