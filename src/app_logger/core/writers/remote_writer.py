from __future__ import annotations

"""
Remote Batch Sink.

Buffers entries at or above a severity threshold and ships them to an
HTTP endpoint in one JSON envelope once the buffer is full or a fatal
entry arrives. A failed flush keeps the buffer for the next attempt; the
sink itself never retries.
"""

import logging
import threading
from datetime import datetime
from typing import List, Mapping, Optional

import requests

from app_logger.domain import constants as const
from app_logger.domain.log_entry import LogEntry
from app_logger.domain.log_level import LogLevel
from app_logger.infra.network import is_success_status, post_json

logger = logging.getLogger(__name__)


class RemoteWriter:
    """Buffered HTTP sink with level filtering and flush-on-fatal."""

    def __init__(
            self,
            enabled: bool = False,
            endpoint: Optional[str] = None,
            headers: Optional[Mapping[str, str]] = None,
            min_level: LogLevel = LogLevel.ERROR,
            buffer_size: int = const.DEFAULT_REMOTE_BUFFER_SIZE,
            timeout: float = const.REMOTE_FLUSH_TIMEOUT,
    ) -> None:
        self.enabled = enabled
        self.endpoint = endpoint
        self.headers = dict(headers) if headers else None
        self.min_level = min_level
        self.buffer_size = max(1, buffer_size)
        self.timeout = timeout

        self._buffer: List[LogEntry] = []
        # Guards the buffer list; held only for short list operations
        self._buffer_lock = threading.Lock()
        # Serializes flushes so a snapshot is never sent twice
        self._flush_lock = threading.Lock()

    @property
    def pending_count(self) -> int:
        """Number of buffered entries awaiting a successful flush."""
        with self._buffer_lock:
            return len(self._buffer)

    def write(self, entry: LogEntry) -> None:
        """Buffer an entry and flush when the buffer is full or the entry is fatal."""
        if not self.enabled or not self.endpoint or entry.level < self.min_level:
            return

        with self._buffer_lock:
            self._buffer.append(entry)
            should_flush = len(self._buffer) >= self.buffer_size or entry.level == LogLevel.FATAL

        if should_flush:
            self.flush()

    def flush(self) -> bool:
        """
        Send every buffered entry in one POST.

        On HTTP 200/201 the sent entries are dropped from the buffer. Any
        other status or a transport failure keeps them and logs a warning.

        Returns:
            bool: True if the collector accepted the batch.
        """
        if not self.endpoint:
            return False

        with self._flush_lock:
            with self._buffer_lock:
                batch = list(self._buffer)
            if not batch:
                return False

            payload = {
                "logs": [e.to_json() for e in batch],
                "timestamp": datetime.now().astimezone().isoformat(),
            }

            try:
                response = post_json(self.endpoint, payload, headers=self.headers, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                logger.warning(f"Failed to send logs to remote server: {e}")
                return False

            if not is_success_status(response.status_code):
                logger.warning(f"Failed to send logs to remote server: {response.status_code}")
                return False

            with self._buffer_lock:
                # Entries appended during the request stay queued
                del self._buffer[:len(batch)]
            return True

    def dispose(self) -> None:
        """Perform one final flush."""
        self.flush()
