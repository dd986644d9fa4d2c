from __future__ import annotations

from app_logger.core.writers.console_writer import ConsoleWriter
from app_logger.core.writers.file_writer import FileWriter
from app_logger.core.writers.remote_writer import RemoteWriter

__all__ = ["ConsoleWriter", "FileWriter", "RemoteWriter"]
