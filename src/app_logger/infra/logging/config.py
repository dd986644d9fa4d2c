from __future__ import annotations

"""
Diagnostics Logging Configuration Models.

Defines the settings for the library's own diagnostic output (warnings
about failed writes, uploads and configuration problems), which is kept
separate from the log entries produced by the host application.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

# Mapping of string identifiers to native logging constants
_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Logger hierarchy owned by this package
PACKAGE_LOGGER_NAME = "app_logger"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings for the diagnostics logger.

    Attributes:
        level: Minimum severity level to capture.
        console: Flag to enable stderr stream output.
        log_file: Optional path of a rotating diagnostics file.
        max_bytes: Maximum size per diagnostics segment before rotation.
        backup_count: Number of historical diagnostics segments to preserve.
        console_fmt: Structural format for terminal output.
        file_fmt: Structural format for file entries.
        datefmt: Chronological format for timestamp generation.
    """
    level: str = "WARNING"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(name)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
