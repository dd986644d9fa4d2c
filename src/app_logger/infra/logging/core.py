from __future__ import annotations

"""
Diagnostics Logging Orchestrator.

Maintains the idempotent lifecycle of the package's own diagnostic
output. Handlers sit behind a QueueHandler/QueueListener pair so writing
diagnostics never blocks the thread that is logging an application event.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from app_logger.infra.logging.config import _LEVEL_MAP, PACKAGE_LOGGER_NAME, LoggingConfig
from app_logger.infra.logging.handlers import (
    _create_rotating_file_handler,
    _is_our_handler,
    _tag_handler,
)

# Internal state flags for idempotency and lifecycle tracking
_CONFIGURED_FLAG_ATTR: str = "_app_logger_configured"
_QUEUE_LISTENER_ATTR: str = "_app_logger_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Attach diagnostics handlers to the package logger, once.

    Repeated calls are no-ops unless `force` is set, in which case the
    previous handlers and listener are released first.

    Args:
        cfg: Diagnostics configuration.
        force: Re-initialize even if already configured.

    Returns:
        logging.Logger: The package logger.
    """
    pkg_logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    if getattr(pkg_logger, _CONFIGURED_FLAG_ATTR, False) and not force:
        return pkg_logger

    level_int = _parse_level(cfg.level)
    pkg_logger.setLevel(level_int)

    _remove_our_handlers(pkg_logger)
    _stop_existing_listener(pkg_logger)

    handlers_list: List[logging.Handler] = []

    if cfg.console:
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(level_int)
        sh.setFormatter(logging.Formatter(cfg.console_fmt))
        _tag_handler(sh)
        handlers_list.append(sh)

    if cfg.log_file:
        fh = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if fh:
            handlers_list.append(fh)

    if not handlers_list:
        return pkg_logger

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)

    listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
    listener.start()

    pkg_logger.addHandler(queue_handler)
    # Keep package diagnostics out of the host's root handlers once we own them
    pkg_logger.propagate = False

    setattr(pkg_logger, _QUEUE_LISTENER_ATTR, listener)
    setattr(pkg_logger, _CONFIGURED_FLAG_ATTR, True)

    atexit.register(_safe_stop_listener, listener)

    return pkg_logger


def reset_logging() -> None:
    """Detach every handler installed by configure_logging and stop its listener."""
    pkg_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    _remove_our_handlers(pkg_logger)
    _stop_existing_listener(pkg_logger)
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)
    setattr(pkg_logger, _CONFIGURED_FLAG_ATTR, False)


def get_logger(name: str) -> logging.Logger:
    """Acquire a named logger (usually __name__)."""
    return logging.getLogger(name)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    """Convert a string-based logging level to its numeric constant."""
    if not level:
        return logging.WARNING
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.WARNING)


def _remove_our_handlers(target: logging.Logger) -> None:
    for h in list(target.handlers):
        if _is_our_handler(h):
            target.removeHandler(h)
            h.close()


def _stop_existing_listener(target: logging.Logger) -> None:
    listener = getattr(target, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        for h in listener.handlers:
            h.close()
        setattr(target, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """Stop a QueueListener, tolerating a listener that was already stopped."""
    if not listener:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
