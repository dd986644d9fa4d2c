from __future__ import annotations

"""
Logger Service Facade.

Single entry point for application code. Holds the ambient context
(user, session, screen), filters by minimum level, fans each entry out to
the console, file and remote sinks in that order, and exposes the local
file maintenance and upload operations. An explicit instance replaces the
global singleton; hosts that want one shared logger keep a module-level
instance themselves.
"""

import logging
import threading
import traceback
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, TextIO

from app_logger.core.services.upload_worker import AutoUploadScheduler, UploadWorker
from app_logger.core.services.uploader import LogUploader
from app_logger.core.writers import ConsoleWriter, FileWriter, RemoteWriter
from app_logger.domain.config import LoggerConfig
from app_logger.domain.log_entry import LogEntry
from app_logger.domain.log_level import LogLevel
from app_logger.domain.upload_models import (
    LogUploadResult,
    create_not_configured_result,
    create_success_result,
)

logger = logging.getLogger(__name__)

_CONTEXT_USER_ID = "userId"
_CONTEXT_SESSION_ID = "sessionId"
_CONTEXT_SCREEN = "screen"


class LoggerService:
    """
    Structured logging pipeline.

    Call `initialize()` once before logging; calls made earlier are
    dropped with a warning. `dispose()` stops the background upload
    threads and flushes the remote sink.
    """

    def __init__(self, console_stream: Optional[TextIO] = None) -> None:
        self._console_stream = console_stream
        self._lock = threading.Lock()

        self.config: Optional[LoggerConfig] = None
        self._console: Optional[ConsoleWriter] = None
        self._file: Optional[FileWriter] = None
        self._remote: Optional[RemoteWriter] = None
        self._uploader: Optional[LogUploader] = None
        self._worker: Optional[UploadWorker] = None
        self._scheduler: Optional[AutoUploadScheduler] = None

        self._user_id: Optional[str] = None
        self._session_id: Optional[str] = None
        self._screen: Optional[str] = None

        self._initialized = False

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def initialize(self, config: Optional[LoggerConfig] = None) -> None:
        """
        Build the sinks and the optional uploader from `config`.

        A second call is a no-op; the first configuration stays in effect.

        Args:
            config: Pipeline settings. Defaults to LoggerConfig().
        """
        with self._lock:
            if self._initialized:
                logger.debug("LoggerService.initialize called twice; keeping existing configuration")
                return

            cfg = config or LoggerConfig()
            self.config = cfg

            self._console = ConsoleWriter(
                enabled=cfg.enable_console_logging,
                stream=self._console_stream,
            )
            self._file = FileWriter(
                log_file_name_prefix=cfg.log_file_name_prefix,
                enabled=cfg.enable_file_logging,
                max_file_size_bytes=cfg.max_file_size_bytes,
                max_log_files=cfg.max_log_files,
                log_dir=cfg.log_dir,
            )
            self._remote = RemoteWriter(
                enabled=cfg.enable_remote_logging,
                endpoint=cfg.remote_endpoint,
                headers=cfg.remote_headers,
                min_level=cfg.remote_min_level,
                buffer_size=cfg.remote_buffer_size,
            )

            self._file.initialize()

            upload_cfg = cfg.upload_config
            if upload_cfg is not None:
                self._uploader = LogUploader(upload_cfg)
                if upload_cfg.auto_upload_enabled:
                    self._worker = UploadWorker(self._uploader, self._file.get_log_files)
                    self._worker.start()
                    self._scheduler = AutoUploadScheduler(
                        self._uploader, self._worker, upload_cfg.upload_interval
                    )
                    self._scheduler.start()

            self._initialized = True
            logger.debug(f"LoggerService initialized (log dir: {self._file.log_dir})")

    def dispose(self) -> None:
        """Stop background uploads, flush the remote sink and release handlers."""
        with self._lock:
            if not self._initialized:
                return
            self._initialized = False

        if self._scheduler is not None:
            self._scheduler.stop()
            self._scheduler = None
        if self._worker is not None:
            self._worker.stop()
            self._worker = None
        if self._console is not None:
            self._console.dispose()
        if self._remote is not None:
            self._remote.dispose()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # -------------------------------------------------------------------------
    # CONTEXT
    # -------------------------------------------------------------------------

    @property
    def user_id(self) -> str:
        return self._user_id or ""

    @user_id.setter
    def user_id(self, value: Optional[str]) -> None:
        self._user_id = value

    @property
    def session_id(self) -> str:
        return self._session_id or ""

    @session_id.setter
    def session_id(self, value: Optional[str]) -> None:
        self._session_id = value

    @property
    def screen(self) -> str:
        return self._screen or ""

    @screen.setter
    def screen(self, value: Optional[str]) -> None:
        self._screen = value

    def _build_context(self, extra: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        context: Dict[str, Any] = {}
        if self._user_id:
            context[_CONTEXT_USER_ID] = self._user_id
        if self._session_id:
            context[_CONTEXT_SESSION_ID] = self._session_id
        if self._screen:
            context[_CONTEXT_SCREEN] = self._screen
        if extra:
            context.update(extra)
        return context

    # -------------------------------------------------------------------------
    # LOGGING API
    # -------------------------------------------------------------------------

    def log(
            self,
            level: LogLevel,
            message: str,
            *,
            error: Any = None,
            stack_trace: Optional[str] = None,
            context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Build one entry and hand it to every sink.

        Args:
            level: Severity of the event.
            message: Human-readable text.
            error: Optional error value; exceptions contribute their traceback
                when no explicit stack trace is given.
            stack_trace: Optional pre-formatted stack trace.
            context: Per-call fields merged over the ambient context.
        """
        if not self._initialized:
            logger.warning("LoggerService not initialized. Call initialize() first.")
            return

        cfg = self.config or LoggerConfig()
        if level < cfg.min_level:
            return

        if stack_trace is None and isinstance(error, BaseException) and error.__traceback__ is not None:
            stack_trace = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ).rstrip("\n")

        entry = LogEntry.create(
            level,
            message,
            context=self._build_context(context) or None,
            error=error,
            stack_trace=stack_trace,
        )

        if self._console is not None:
            self._console.write(entry)
        if self._file is not None:
            self._file.write(entry)
        if self._remote is not None:
            self._remote.write(entry)

        upload_cfg = cfg.upload_config
        if (upload_cfg is not None and upload_cfg.upload_on_error
                and level >= LogLevel.ERROR and self._worker is not None):
            self._worker.submit("error")

    def debug(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self.log(LogLevel.DEBUG, message, context=context)

    def info(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self.log(LogLevel.INFO, message, context=context)

    def warning(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self.log(LogLevel.WARNING, message, context=context)

    def error(
            self,
            message: str,
            error: Any = None,
            stack_trace: Optional[str] = None,
            context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.log(LogLevel.ERROR, message, error=error, stack_trace=stack_trace, context=context)

    def fatal(
            self,
            message: str,
            error: Any = None,
            stack_trace: Optional[str] = None,
            context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.log(LogLevel.FATAL, message, error=error, stack_trace=stack_trace, context=context)

    # -------------------------------------------------------------------------
    # LOCAL FILES
    # -------------------------------------------------------------------------

    def clear_logs(self) -> None:
        if self._file is not None:
            self._file.clear_logs()

    def read_logs(self) -> List[LogEntry]:
        if self._file is None:
            return []
        return self._file.read_logs()

    def get_log_files(self) -> List[str]:
        if self._file is None:
            return []
        return self._file.get_log_files()

    def get_current_log_file(self) -> Optional[str]:
        if self._file is None:
            return None
        return self._file.get_current_log_file()

    def flush_remote(self) -> bool:
        """Force a remote flush; True if a batch was accepted by the collector."""
        if self._remote is None:
            return False
        return self._remote.flush()

    # -------------------------------------------------------------------------
    # UPLOADS
    # -------------------------------------------------------------------------

    @property
    def is_uploading(self) -> bool:
        return self._uploader is not None and self._uploader.is_uploading

    @property
    def last_upload_time(self) -> Optional[datetime]:
        if self._uploader is None:
            return None
        return self._uploader.last_upload_time

    def upload_log_file(self, path: str) -> LogUploadResult:
        if self._uploader is None:
            return create_not_configured_result(1)
        return self._uploader.upload_log_file(path)

    def upload_log_files(self, paths: Sequence[str]) -> LogUploadResult:
        files = list(paths)
        if self._uploader is None:
            return create_not_configured_result(len(files))
        if not files:
            return create_success_result("No log files to upload", files_uploaded=0, total_files=0)
        return self._uploader.upload_log_files(files)

    def upload_logs_as_json(self, paths: Sequence[str]) -> LogUploadResult:
        files = list(paths)
        if self._uploader is None:
            return create_not_configured_result(len(files))
        if not files:
            return create_success_result("No log files to upload", files_uploaded=0, total_files=0)
        return self._uploader.upload_as_json(files)

    def upload_all_log_files(self, as_json: bool = False) -> LogUploadResult:
        """Upload every local log file, newest first."""
        if self._uploader is None:
            return create_not_configured_result(0)
        files = self.get_log_files()
        if as_json:
            return self.upload_logs_as_json(files)
        return self.upload_log_files(files)
