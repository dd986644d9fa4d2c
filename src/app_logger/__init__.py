from __future__ import annotations

"""
Application-embedded structured logging.

Captures leveled log events, fans them out to console, rotating local file
and remote batch sinks, and uploads accumulated log files to a collector.
"""

from app_logger.core.services.logger_service import LoggerService
from app_logger.core.services.uploader import LogUploader
from app_logger.domain.config import (
    LoggerConfig,
    LogUploadConfig,
    config_from_dict,
    load_logger_config,
)
from app_logger.domain.constants import APP_VERSION
from app_logger.domain.log_entry import LogEntry
from app_logger.domain.log_level import LogLevel
from app_logger.domain.upload_models import LogUploadResult

__version__ = APP_VERSION

__all__ = [
    "LoggerService",
    "LoggerConfig",
    "LogUploadConfig",
    "LogUploadResult",
    "LogUploader",
    "LogEntry",
    "LogLevel",
    "config_from_dict",
    "load_logger_config",
    "__version__",
]
