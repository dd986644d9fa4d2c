from __future__ import annotations

"""
Rotating File Sink.

Appends entries as JSON lines to one file per calendar day under a
dedicated log directory. When the current file grows past the size
threshold the writer rolls over to a new same-day segment, and the
directory is pruned so that at most `max_log_files` files remain. Every
I/O failure is reduced to a diagnostic warning: a broken disk must never
crash the host application.
"""

import logging
import os
import re
import threading
from datetime import datetime
from typing import Callable, List, Optional

from app_logger.domain import constants as const
from app_logger.domain.log_entry import LogEntry
from app_logger.infra.fs import list_log_files, resolve_log_dir, safe_mkdir

logger = logging.getLogger(__name__)


class FileWriter:
    """
    Append-only JSON-lines sink with size rollover and count-based pruning.

    File names follow `<prefix><YYYY-MM-DD>.log` for the first segment of a
    day and `<prefix><YYYY-MM-DD>.<n>.log` for later ones.
    """

    def __init__(
            self,
            log_file_name_prefix: str = const.DEFAULT_LOG_FILE_PREFIX,
            enabled: bool = True,
            max_file_size_bytes: int = const.DEFAULT_MAX_FILE_SIZE_BYTES,
            max_log_files: int = const.DEFAULT_MAX_LOG_FILES,
            log_dir: Optional[str] = None,
            skip_malformed: bool = True,
            now_func: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.enabled = enabled
        self.log_file_name_prefix = log_file_name_prefix
        self.max_file_size_bytes = max_file_size_bytes
        self.max_log_files = max(1, max_log_files)
        self.skip_malformed = skip_malformed

        self._log_dir_setting = log_dir
        self._log_dir: Optional[str] = None
        self._log_file: Optional[str] = None
        self._current_date: Optional[str] = None
        self._now = now_func or datetime.now
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def initialize(self) -> None:
        """
        Resolve the log directory and today's file, then prune old files.

        Failures are logged and leave the writer inactive.
        """
        if not self.enabled:
            return

        with self._lock:
            log_dir = resolve_log_dir(self._log_dir_setting)
            ok, err = safe_mkdir(log_dir)
            if not ok:
                logger.warning(f"Failed to initialize file logger: cannot create {log_dir}: {err}")
                self._log_file = None
                return

            try:
                self._log_dir = log_dir
                self._open_day(self._today())
            except OSError as e:
                logger.warning(f"Failed to initialize file logger: {e}")
                self._log_file = None

    @property
    def log_dir(self) -> Optional[str]:
        """Resolved log directory, or None before a successful initialize."""
        return self._log_dir

    def get_current_log_file(self) -> Optional[str]:
        """Path of the file receiving writes, if any."""
        return self._log_file

    # -------------------------------------------------------------------------
    # WRITE PATH
    # -------------------------------------------------------------------------

    def write(self, entry: LogEntry) -> None:
        """Append one JSON line; roll over when the file exceeds the size limit."""
        if not self.enabled or self._log_file is None:
            return

        with self._lock:
            try:
                today = self._today()
                if today != self._current_date:
                    self._open_day(today)

                with open(self._log_file, "a", encoding="utf-8") as f:
                    f.write(entry.to_json_line())

                if os.path.getsize(self._log_file) > self.max_file_size_bytes:
                    self._roll_over()
            except OSError as e:
                logger.warning(f"Failed to write log to file: {e}")

    # -------------------------------------------------------------------------
    # READ / MAINTENANCE
    # -------------------------------------------------------------------------

    def read_logs(self) -> List[LogEntry]:
        """
        Parse the current file back into entries.

        Malformed lines are skipped and counted when `skip_malformed` is set;
        otherwise the first malformed line aborts the read and nothing is
        returned. I/O errors yield an empty list.
        """
        path = self._log_file
        if path is None or not os.path.exists(path):
            return []

        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                lines = f.read().splitlines()
        except OSError as e:
            logger.warning(f"Failed to read logs: {e}")
            return []

        entries: List[LogEntry] = []
        malformed = 0
        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                entries.append(LogEntry.from_json_line(line))
            except ValueError as e:
                if not self.skip_malformed:
                    logger.warning(f"Aborting log read at malformed line {number} of {path}: {e}")
                    return []
                malformed += 1

        if malformed:
            logger.warning(f"Skipped {malformed} malformed line(s) while reading {path}")
        return entries

    def clear_logs(self) -> None:
        """Delete every log file in the directory and start a fresh current file."""
        with self._lock:
            if self._log_dir is None:
                return
            try:
                for path in list_log_files(self._log_dir):
                    os.remove(path)
            except OSError as e:
                logger.warning(f"Failed to clear logs: {e}")
                return

            self._log_file = None
            self._current_date = None
            self.initialize()

    def get_log_files(self) -> List[str]:
        """All log files in the directory, newest first."""
        log_dir = self._log_dir or resolve_log_dir(self._log_dir_setting)
        try:
            return list_log_files(log_dir)
        except OSError as e:
            logger.warning(f"Failed to get log files: {e}")
            return []

    # -------------------------------------------------------------------------
    # ROTATION
    # -------------------------------------------------------------------------

    def _today(self) -> str:
        return self._now().strftime(const.LOG_DATE_FORMAT)

    def _segment_path(self, day: str, index: int) -> str:
        suffix = const.LOG_FILE_EXTENSION if index == 0 else f".{index}{const.LOG_FILE_EXTENSION}"
        return os.path.join(self._log_dir or "", f"{self.log_file_name_prefix}{day}{suffix}")

    def _segment_indexes(self, day: str) -> List[int]:
        """Indexes of the existing segments for a day."""
        pattern = re.compile(
            re.escape(f"{self.log_file_name_prefix}{day}")
            + r"(?:\.(\d+))?"
            + re.escape(const.LOG_FILE_EXTENSION)
            + r"$"
        )
        indexes: List[int] = []
        for name in os.listdir(self._log_dir or "."):
            match = pattern.match(name)
            if match:
                indexes.append(int(match.group(1) or 0))
        return indexes

    def _open_day(self, day: str) -> None:
        """Point the writer at the newest segment of `day`, rolling over if it is full."""
        self._current_date = day
        index = max(self._segment_indexes(day), default=0)
        path = self._segment_path(day, index)
        if os.path.exists(path) and os.path.getsize(path) > self.max_file_size_bytes:
            path = self._segment_path(day, index + 1)
        self._activate(path)

    def _roll_over(self) -> None:
        """Start the next same-day segment after the size threshold was crossed."""
        day = self._current_date or self._today()
        index = max(self._segment_indexes(day), default=0)
        logger.debug(f"Log file exceeded {self.max_file_size_bytes} bytes; rolling over to segment {index + 1}")
        self._activate(self._segment_path(day, index + 1))

    def _activate(self, path: str) -> None:
        with open(path, "a", encoding="utf-8"):
            pass
        self._log_file = path
        self._prune()

    def _prune(self) -> None:
        """Keep the current file plus the newest others, up to max_log_files in total."""
        if self._log_dir is None:
            return

        others = [p for p in list_log_files(self._log_dir) if p != self._log_file]
        for path in others[self.max_log_files - 1:]:
            try:
                os.remove(path)
                logger.debug(f"Pruned old log file {path}")
            except OSError as e:
                logger.warning(f"Failed to rotate logs: {e}")
