from __future__ import annotations

"""
Domain Constants.

Centralizes the defaults shared by the sinks, the uploader and the
configuration loader: rotation thresholds, buffer sizes, network
timeouts and file naming.
"""

APP_VERSION = "0.1.0"
USER_AGENT = f"app-logger/{APP_VERSION}"

# -----------------------------------------------------------------------------
# FILE SINK
# -----------------------------------------------------------------------------
DEFAULT_LOG_FILE_PREFIX = "app_log_"
LOG_FILE_EXTENSION = ".log"
LOG_DATE_FORMAT = "%Y-%m-%d"
DEFAULT_MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024  # 10 MiB
DEFAULT_MAX_LOG_FILES = 5

# -----------------------------------------------------------------------------
# REMOTE SINK
# -----------------------------------------------------------------------------
DEFAULT_REMOTE_BUFFER_SIZE = 10
REMOTE_FLUSH_TIMEOUT = 10  # seconds

# -----------------------------------------------------------------------------
# UPLOADER
# -----------------------------------------------------------------------------
UPLOAD_TIMEOUT = 30  # seconds
DEFAULT_MAX_RETRIES = 3
RETRY_BACKOFF_STEP = 2  # seconds, multiplied by the attempt number
DEFAULT_UPLOAD_INTERVAL_SECONDS = 24 * 60 * 60
SUCCESS_STATUS_CODES = (200, 201)
