from __future__ import annotations

"""
Unit tests for the LogUploader service.

Verifies:
1. Single-file multipart uploads and their failure messages.
2. Per-file retry with linear backoff.
3. The non-blocking busy gate.
4. Aggregated JSON upload with malformed line accounting.
5. Upload scheduling based on the last successful upload.
"""

import json
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List
from unittest.mock import MagicMock, call, patch

import pytest
import requests

from app_logger.core.services.uploader import LogUploader
from app_logger.domain.config import LogUploadConfig
from app_logger.domain.log_level import LogLevel

ENDPOINT = "https://collector.example.com/upload"
NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sleep_mock() -> MagicMock:
    return MagicMock()


def _uploader(sleep_mock: MagicMock, **cfg_kwargs) -> LogUploader:
    cfg = LogUploadConfig(endpoint=ENDPOINT, **cfg_kwargs)
    return LogUploader(cfg, sleep_func=sleep_mock, now_func=lambda: NOW)


def _log_file(tmp_path: Path, name: str, lines: List[str]) -> str:
    path = tmp_path / name
    path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    return str(path)


def _json_lines(make_entry, count: int, prefix: str = "m") -> List[str]:
    return [make_entry(LogLevel.INFO, f"{prefix}{i}").to_json_line().rstrip("\n") for i in range(count)]

# -----------------------------------------------------------------------------
# SINGLE FILE
# -----------------------------------------------------------------------------

def test_upload_log_file_sends_multipart_fields(tmp_path: Path, sleep_mock, ok_response) -> None:
    """TC-01: Verify the file field and metadata fields of a multipart upload."""
    path = _log_file(tmp_path, "app_log_2024-03-15.log", ["{}"])
    uploader = _uploader(sleep_mock, headers={"Authorization": "Bearer t"})

    with patch("requests.post", return_value=ok_response) as mock_post:
        result = uploader.upload_log_file(path)

        args, kwargs = mock_post.call_args
        assert args[0] == ENDPOINT
        assert kwargs["data"] == {
            "fileName": "app_log_2024-03-15.log",
            "uploadTime": NOW.isoformat(),
            "fileSize": "3",
        }
        name, _, content_type = kwargs["files"]["logFile"]
        assert name == "app_log_2024-03-15.log"
        assert content_type == "application/octet-stream"
        assert kwargs["headers"]["Authorization"] == "Bearer t"
        assert "Content-Type" not in kwargs["headers"]
        assert kwargs["timeout"] == 30

    assert result.success is True
    assert result.message == "Log file uploaded successfully"
    assert (result.files_uploaded, result.total_files) == (1, 1)


def test_upload_log_file_missing_file(tmp_path: Path, sleep_mock) -> None:
    """TC-02: Verify a missing file fails without a request."""
    with patch("requests.post") as mock_post:
        result = _uploader(sleep_mock).upload_log_file(str(tmp_path / "nope.log"))
        mock_post.assert_not_called()

    assert result.success is False
    assert result.message == "Log file does not exist"


def test_upload_log_file_reports_status_and_body(tmp_path: Path, sleep_mock, error_response) -> None:
    """TC-03: Verify non-2xx responses are described in the result."""
    path = _log_file(tmp_path, "a.log", ["{}"])
    with patch("requests.post", return_value=error_response):
        result = _uploader(sleep_mock).upload_log_file(path)

    assert result.success is False
    assert result.message == "Upload failed with status: 500, body: boom"


def test_upload_log_file_transport_error(tmp_path: Path, sleep_mock) -> None:
    """TC-04: Verify network exceptions become failed results."""
    path = _log_file(tmp_path, "a.log", ["{}"])
    with patch("requests.post", side_effect=requests.exceptions.Timeout("slow")):
        result = _uploader(sleep_mock).upload_log_file(path)

    assert result.success is False
    assert result.message.startswith("Upload error: ")

# -----------------------------------------------------------------------------
# BATCH WITH RETRY
# -----------------------------------------------------------------------------

def test_upload_log_files_retries_with_linear_backoff(tmp_path: Path, sleep_mock, error_response) -> None:
    """TC-05: Verify three attempts separated by 2s and 4s before giving up."""
    path = _log_file(tmp_path, "a.log", ["{}"])
    uploader = _uploader(sleep_mock, max_retries=3)

    with patch("requests.post", return_value=error_response) as mock_post:
        result = uploader.upload_log_files([path])

        assert mock_post.call_count == 3

    assert sleep_mock.call_args_list == [call(2), call(4)]
    assert result.success is False
    assert result.files_uploaded == 0
    assert result.failures == ("a.log: Upload failed with status: 500, body: boom",)
    assert uploader.last_upload_time is None


def test_upload_log_files_recovers_on_retry(tmp_path: Path, sleep_mock, ok_response, error_response) -> None:
    """TC-06: Verify a file that succeeds on the second attempt counts as uploaded."""
    path = _log_file(tmp_path, "a.log", ["{}"])
    uploader = _uploader(sleep_mock, max_retries=3)

    with patch("requests.post", side_effect=[error_response, ok_response]):
        result = uploader.upload_log_files([path])

    assert sleep_mock.call_args_list == [call(2)]
    assert result.success is True
    assert result.message == "All files uploaded successfully"
    assert uploader.last_upload_time == NOW


def test_upload_log_files_partial_success(tmp_path: Path, sleep_mock, ok_response) -> None:
    """TC-07: Verify one missing file among two still yields success."""
    good = _log_file(tmp_path, "good.log", ["{}"])
    missing = str(tmp_path / "missing.log")
    uploader = _uploader(sleep_mock, max_retries=2)

    with patch("requests.post", return_value=ok_response):
        result = uploader.upload_log_files([good, missing])

    assert result.success is True
    assert (result.files_uploaded, result.total_files) == (1, 2)
    assert result.message == "1 file(s) failed: missing.log: Log file does not exist"


def test_upload_log_files_with_no_files(sleep_mock) -> None:
    """TC-13: Verify an empty batch is a successful no-op without requests."""
    uploader = _uploader(sleep_mock)

    with patch("requests.post") as mock_post:
        result = uploader.upload_log_files([])

    mock_post.assert_not_called()
    assert result.success is True
    assert result.message == "No log files to upload"
    assert (result.files_uploaded, result.total_files) == (0, 0)
    assert uploader.last_upload_time is None


def test_concurrent_batch_is_rejected_immediately(tmp_path: Path, sleep_mock, ok_response) -> None:
    """TC-08: Verify a second upload during an in-flight one returns busy."""
    path = _log_file(tmp_path, "a.log", ["{}"])
    uploader = _uploader(sleep_mock)

    entered = threading.Event()
    release = threading.Event()

    def slow_post(*args, **kwargs):
        entered.set()
        release.wait(5)
        return ok_response

    with patch("requests.post", side_effect=slow_post) as mock_post:
        results = []
        t = threading.Thread(target=lambda: results.append(uploader.upload_log_files([path])))
        t.start()
        assert entered.wait(5)

        assert uploader.is_uploading is True
        busy = uploader.upload_log_files([path])
        busy_json = uploader.upload_as_json([path])
        assert mock_post.call_count == 1

        release.set()
        t.join(5)

    assert busy.success is False
    assert busy.message == "Upload already in progress"
    assert busy_json.message == "Upload already in progress"
    assert results[0].success is True
    assert uploader.is_uploading is False

# -----------------------------------------------------------------------------
# AGGREGATED JSON
# -----------------------------------------------------------------------------

def test_upload_as_json_aggregates_and_counts_parse_errors(
        tmp_path: Path, sleep_mock, make_entry, ok_response
) -> None:
    """TC-09: Verify 3 + 2 valid records are merged and one bad line is counted."""
    first = _log_file(tmp_path, "a.log", _json_lines(make_entry, 3, "a") + ["{not json"])
    second = _log_file(tmp_path, "b.log", _json_lines(make_entry, 2, "b"))
    uploader = _uploader(sleep_mock)

    with patch("requests.post", return_value=ok_response) as mock_post:
        result = uploader.upload_as_json([first, second])

        payload = mock_post.call_args.kwargs["json"]
        assert payload["logCount"] == 5
        assert payload["fileCount"] == 2
        assert payload["uploadTime"] == NOW.isoformat()
        assert [r["message"] for r in payload["logs"]] == ["a0", "a1", "a2", "b0", "b1"]

    assert result.success is True
    assert result.message == "Successfully uploaded 5 logs from 2 files (1 parse errors)"
    assert uploader.last_upload_time == NOW


def test_upload_as_json_without_records(tmp_path: Path, sleep_mock) -> None:
    """TC-10: Verify empty input succeeds while all-garbage input fails."""
    empty = _log_file(tmp_path, "empty.log", [])
    garbage = _log_file(tmp_path, "garbage.log", ["nope", "[1]"])
    uploader = _uploader(sleep_mock)

    with patch("requests.post") as mock_post:
        ok = uploader.upload_as_json([empty])
        bad = uploader.upload_as_json([garbage])
        mock_post.assert_not_called()

    assert ok.success is True
    assert ok.message == "No logs to upload"
    assert bad.success is False
    assert bad.message == "No valid logs found. 2 parsing errors occurred."


def test_upload_as_json_http_failure(tmp_path: Path, sleep_mock, error_response) -> None:
    """TC-11: Verify a rejected aggregated upload fails and leaves the clock alone."""
    path = _log_file(tmp_path, "a.log", [json.dumps({"message": "x"})])
    uploader = _uploader(sleep_mock)

    with patch("requests.post", return_value=error_response):
        result = uploader.upload_as_json([path])

    assert result.success is False
    assert uploader.last_upload_time is None

# -----------------------------------------------------------------------------
# SCHEDULING
# -----------------------------------------------------------------------------

def test_should_upload_now_follows_interval(tmp_path: Path, sleep_mock, ok_response) -> None:
    """TC-12: Verify uploads are due initially and again once the interval elapsed."""
    clock = {"now": NOW}
    cfg = LogUploadConfig(endpoint=ENDPOINT, upload_interval=timedelta(hours=1))
    uploader = LogUploader(cfg, sleep_func=sleep_mock, now_func=lambda: clock["now"])
    assert uploader.should_upload_now() is True

    path = _log_file(tmp_path, "a.log", ["{}"])
    with patch("requests.post", return_value=ok_response):
        uploader.upload_log_files([path])

    clock["now"] = NOW + timedelta(minutes=59)
    assert uploader.should_upload_now() is False
    clock["now"] = NOW + timedelta(hours=1)
    assert uploader.should_upload_now() is True
