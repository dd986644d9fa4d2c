from __future__ import annotations

"""
Background Upload Workers.

Decouples upload triggers from the logging call site. Error-level events
and the periodic timer submit requests to a bounded queue drained by one
daemon thread; when the queue is full the request is dropped and the
drop is logged, so overlap and backpressure stay explicit.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, List, Optional

from app_logger.core.services.uploader import LogUploader
from app_logger.domain.upload_models import LogUploadResult

logger = logging.getLogger(__name__)

_STOP = None


@dataclass(frozen=True)
class UploadRequest:
    """A queued upload trigger."""
    reason: str
    as_json: bool = False


class UploadWorker:
    """Single consumer thread running uploads requested through a bounded queue."""

    def __init__(
            self,
            uploader: LogUploader,
            list_files: Callable[[], List[str]],
            queue_size: int = 1,
            on_result: Optional[Callable[[UploadRequest, LogUploadResult], None]] = None,
    ) -> None:
        self._uploader = uploader
        self._list_files = list_files
        self._on_result = on_result
        self._queue: queue.Queue[Optional[UploadRequest]] = queue.Queue(maxsize=max(1, queue_size))
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._thread = threading.Thread(target=self._run, name="app-logger-upload", daemon=True)
        self._thread.start()

    def submit(self, reason: str, as_json: bool = False) -> bool:
        """
        Enqueue an upload without blocking.

        Returns:
            bool: False if the worker is stopped or the queue is full.
        """
        if not self.is_running:
            logger.debug(f"Upload request '{reason}' ignored: worker not running")
            return False
        try:
            self._queue.put_nowait(UploadRequest(reason=reason, as_json=as_json))
            return True
        except queue.Full:
            logger.debug(f"Upload request '{reason}' dropped: an upload is already pending")
            return False

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the worker to finish and wait for it."""
        thread = self._thread
        if thread is None:
            return
        # The sentinel must get through even when the queue is full
        while True:
            try:
                self._queue.put(_STOP, timeout=0.1)
                break
            except queue.Full:
                if not thread.is_alive():
                    break
        thread.join(timeout=timeout)
        self._thread = None

    def _run(self) -> None:
        while True:
            request = self._queue.get()
            if request is _STOP:
                return
            self._process(request)

    def _process(self, request: UploadRequest) -> None:
        try:
            files = self._list_files()
            if not files:
                logger.debug(f"Upload '{request.reason}' skipped: no log files")
                return

            if request.as_json:
                result = self._uploader.upload_as_json(files)
            else:
                result = self._uploader.upload_log_files(files)

            log_fn = logger.info if result.success else logger.warning
            log_fn(f"Upload '{request.reason}': {result.message} ({result.files_uploaded}/{result.total_files})")

            if self._on_result:
                self._on_result(request, result)
        except Exception as e:
            logger.error(f"Upload worker failed while handling '{request.reason}': {e}", exc_info=True)


class AutoUploadScheduler:
    """
    Self-rescheduling upload timer.

    Every `interval` it asks the uploader whether an upload is due and, if
    so, submits one to the worker. Runs until stopped; a collector that is
    permanently down is simply retried every interval.
    """

    def __init__(self, uploader: LogUploader, worker: UploadWorker, interval: timedelta) -> None:
        self._uploader = uploader
        self._worker = worker
        self._interval_s = max(interval.total_seconds(), 0.001)
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="app-logger-upload-timer", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval_s):
            if self._uploader.should_upload_now():
                self._worker.submit("scheduled")
