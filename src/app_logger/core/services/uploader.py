from __future__ import annotations

"""
Log Upload Service.

Transfers log files already written by the file sink to a remote
collector, either as one multipart request per file (with per-file retry
and linear backoff) or as a single aggregated JSON document. Every
operation returns a LogUploadResult; nothing is raised to the caller. A
non-blocking busy gate rejects overlapping batch uploads instead of
queueing them.
"""

import json
import logging
import os
import threading
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from app_logger.domain import constants as const
from app_logger.domain.config import LogUploadConfig
from app_logger.domain.upload_models import (
    LogUploadResult,
    create_busy_result,
    create_failure_result,
    create_success_result,
)
from app_logger.infra.network import is_success_status, post_json, post_multipart

logger = logging.getLogger(__name__)

# Characters of a malformed line echoed in diagnostics
_LINE_PREVIEW_CHARS = 100


class LogUploader:
    """
    Stateful uploader for accumulated log files.

    Holds the busy gate and the time of the last successful upload, which
    drives the periodic upload schedule.
    """

    def __init__(
            self,
            config: LogUploadConfig,
            sleep_func: Optional[Callable[[float], None]] = None,
            now_func: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config
        self._sleep = sleep_func or time.sleep
        self._now = now_func or (lambda: datetime.now().astimezone())
        self._busy = threading.Lock()
        self._last_upload_time: Optional[datetime] = None

    @property
    def is_uploading(self) -> bool:
        """Whether a batch upload currently holds the busy gate."""
        return self._busy.locked()

    @property
    def last_upload_time(self) -> Optional[datetime]:
        """Completion time of the last successful batch upload."""
        return self._last_upload_time

    def should_upload_now(self) -> bool:
        """True if nothing was uploaded yet or the configured interval has elapsed."""
        if self._last_upload_time is None:
            return True
        return self._now() - self._last_upload_time >= self.config.upload_interval

    # -------------------------------------------------------------------------
    # MULTIPART UPLOADS
    # -------------------------------------------------------------------------

    def upload_log_file(self, path: str) -> LogUploadResult:
        """
        Upload one file as multipart/form-data.

        Sends the file under `logFile` with the `fileName`, `uploadTime` and
        `fileSize` metadata fields.

        Args:
            path: Location of the log file.

        Returns:
            LogUploadResult: Outcome for this single file.
        """
        if not os.path.isfile(path):
            return create_failure_result("Log file does not exist", total_files=1)

        file_name = os.path.basename(path)
        try:
            fields = {
                "fileName": file_name,
                "uploadTime": self._now().isoformat(),
                "fileSize": str(os.path.getsize(path)),
            }
            response = post_multipart(
                self.config.endpoint,
                "logFile",
                path,
                fields,
                headers=self.config.headers,
                timeout=const.UPLOAD_TIMEOUT,
            )
        except (requests.exceptions.RequestException, OSError) as e:
            logger.warning(f"Upload error for {file_name}: {e}")
            return create_failure_result(f"Upload error: {e}", total_files=1)

        if is_success_status(response.status_code):
            return create_success_result("Log file uploaded successfully", files_uploaded=1, total_files=1)

        return create_failure_result(
            f"Upload failed with status: {response.status_code}, body: {response.text}",
            total_files=1,
        )

    def upload_log_files(self, paths: Sequence[str]) -> LogUploadResult:
        """
        Upload files one by one, retrying each up to `max_retries` times.

        Between attempts the uploader sleeps `attempt * 2` seconds. A file
        counts as failed only once all attempts are exhausted.

        Args:
            paths: Files to upload, in order.

        Returns:
            LogUploadResult: Aggregated outcome; successful if at least one
            file was uploaded, or if there was nothing to upload.
        """
        files = list(paths)
        if not files:
            return create_success_result("No log files to upload", files_uploaded=0, total_files=0)
        if not self._busy.acquire(blocking=False):
            return create_busy_result(len(files))

        try:
            uploaded = 0
            failures: List[str] = []

            for path in files:
                if self._upload_with_retry(path, failures):
                    uploaded += 1

            if uploaded > 0:
                self._last_upload_time = self._now()

            if failures:
                message = f"{len(failures)} file(s) failed: {', '.join(failures)}"
                logger.warning(f"Log upload finished with failures: {message}")
            else:
                message = "All files uploaded successfully"

            return LogUploadResult(
                success=uploaded > 0,
                message=message,
                files_uploaded=uploaded,
                total_files=len(files),
                failures=tuple(failures),
            )
        finally:
            self._busy.release()

    def _upload_with_retry(self, path: str, failures: List[str]) -> bool:
        max_retries = max(1, self.config.max_retries)
        result: Optional[LogUploadResult] = None

        for attempt in range(1, max_retries + 1):
            result = self.upload_log_file(path)
            if result.success:
                return True
            if attempt < max_retries:
                delay = attempt * const.RETRY_BACKOFF_STEP
                logger.debug(f"Retrying {os.path.basename(path)} in {delay}s (attempt {attempt} failed)")
                self._sleep(delay)

        failures.append(f"{os.path.basename(path)}: {result.message if result else 'not attempted'}")
        return False

    # -------------------------------------------------------------------------
    # AGGREGATED JSON UPLOAD
    # -------------------------------------------------------------------------

    def upload_as_json(self, paths: Sequence[str]) -> LogUploadResult:
        """
        Merge every parsable record of the given files into one JSON POST.

        Malformed lines are counted and skipped; unreadable files are skipped.
        When no record survives, the result is successful only if there were
        no parse errors either.

        Args:
            paths: Files to aggregate.

        Returns:
            LogUploadResult: Outcome of the single aggregated request.
        """
        files = list(paths)
        total = len(files)
        if not self._busy.acquire(blocking=False):
            return create_busy_result(total)

        try:
            records: List[Dict[str, Any]] = []
            parse_errors = 0
            for path in files:
                parse_errors += self._collect_records(path, records)

            if not records:
                if parse_errors > 0:
                    return create_failure_result(
                        f"No valid logs found. {parse_errors} parsing errors occurred.", total
                    )
                return create_success_result("No logs to upload", files_uploaded=0, total_files=total)

            logger.debug(f"Parsed {len(records)} logs ({parse_errors} errors) for JSON upload")

            payload = {
                "logs": records,
                "uploadTime": self._now().isoformat(),
                "fileCount": total,
                "logCount": len(records),
            }
            try:
                response = post_json(
                    self.config.endpoint,
                    payload,
                    headers=self.config.headers,
                    timeout=const.UPLOAD_TIMEOUT,
                )
            except requests.exceptions.RequestException as e:
                logger.warning(f"JSON log upload error: {e}")
                return create_failure_result(f"Upload error: {e}", total)

            if not is_success_status(response.status_code):
                return create_failure_result(
                    f"Upload failed with status: {response.status_code}, body: {response.text}", total
                )

            self._last_upload_time = self._now()
            suffix = f" ({parse_errors} parse errors)" if parse_errors else ""
            return create_success_result(
                f"Successfully uploaded {len(records)} logs from {total} files{suffix}",
                files_uploaded=total,
                total_files=total,
            )
        finally:
            self._busy.release()

    def _collect_records(self, path: str, records: List[Dict[str, Any]]) -> int:
        """Append the JSON objects of one file to `records`; return its parse error count."""
        if not os.path.isfile(path):
            logger.warning(f"File does not exist: {path}")
            return 0

        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                content = f.read()
        except OSError as e:
            logger.warning(f"Error reading file {path}: {e}")
            return 0

        errors = 0
        for line in content.split("\n"):
            stripped = line.strip()
            if not stripped:
                continue
            try:
                record = json.loads(stripped)
            except ValueError as e:
                errors += 1
                logger.debug(f"Error parsing log line (error #{errors}): {e}: {stripped[:_LINE_PREVIEW_CHARS]}")
                continue
            if isinstance(record, dict):
                records.append(record)
            else:
                errors += 1
        return errors
