from __future__ import annotations

"""
Upload Outcome Models.

Value objects returned by every upload operation. Uploads never raise to
their caller; success, failure and contention are all reported through a
LogUploadResult.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple


@dataclass(frozen=True)
class LogUploadResult:
    """
    Outcome of a single-file or batch upload.

    Attributes:
        success: Whether the operation counts as a positive outcome.
        message: Diagnostic text for display.
        files_uploaded: Number of files accepted by the collector.
        total_files: Number of files the operation was asked to handle.
        failures: Per-file failure descriptions ("name: reason").
    """
    success: bool
    message: str
    files_uploaded: int
    total_files: int
    failures: Tuple[str, ...] = ()


def create_success_result(message: str, files_uploaded: int, total_files: int) -> LogUploadResult:
    """Build a positive outcome."""
    return LogUploadResult(
        success=True,
        message=message,
        files_uploaded=files_uploaded,
        total_files=total_files,
    )


def create_failure_result(
        message: str,
        total_files: int,
        files_uploaded: int = 0,
        failures: Sequence[str] = (),
) -> LogUploadResult:
    """Build a negative outcome, optionally carrying per-file failure details."""
    return LogUploadResult(
        success=False,
        message=message,
        files_uploaded=files_uploaded,
        total_files=total_files,
        failures=tuple(failures),
    )


def create_busy_result(total_files: int) -> LogUploadResult:
    """Outcome returned when another upload already holds the busy gate."""
    return create_failure_result("Upload already in progress", total_files)


def create_not_configured_result(total_files: int) -> LogUploadResult:
    """Outcome returned by the service when no uploader was configured."""
    return create_failure_result("Log uploader not configured", total_files)
