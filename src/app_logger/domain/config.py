from __future__ import annotations

"""
Logger Configuration Domain.

Immutable configuration snapshots for the logging service and the log
uploader, plus loading from plain dictionaries or JSON files. Loading
merges user values over defaults and reports every correction as a
warning; strict mode raises instead.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from datetime import timedelta
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from app_logger.domain import constants as const
from app_logger.domain.log_level import LogLevel

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# CONFIGURATION MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LogUploadConfig:
    """
    Settings for bulk upload of local log files.

    Attributes:
        endpoint: Collector URL receiving multipart or JSON uploads.
        headers: Extra HTTP headers sent with every upload.
        upload_on_error: Trigger an upload whenever an ERROR or FATAL is logged.
        upload_daily: Enable scheduled uploads. Either trigger starts the
            periodic upload timer.
        upload_interval: Minimum time between two scheduled uploads.
        max_retries: Attempts per file before it is reported as failed.
    """
    endpoint: str
    headers: Optional[Mapping[str, str]] = None
    upload_on_error: bool = False
    upload_daily: bool = False
    upload_interval: timedelta = timedelta(seconds=const.DEFAULT_UPLOAD_INTERVAL_SECONDS)
    max_retries: int = const.DEFAULT_MAX_RETRIES

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _freeze_headers(self.headers))

    @property
    def auto_upload_enabled(self) -> bool:
        """Whether any automatic trigger is configured."""
        return self.upload_daily or self.upload_on_error


@dataclass(frozen=True)
class LoggerConfig:
    """
    Immutable snapshot used once by LoggerService.initialize.

    Attributes:
        enable_console_logging: Toggle for the console sink.
        enable_file_logging: Toggle for the rotating file sink.
        enable_remote_logging: Toggle for the remote batch sink.
        min_level: Entries below this level are dropped before any sink.
        remote_endpoint: URL of the remote batch sink.
        remote_headers: Extra HTTP headers for the remote batch sink.
        remote_min_level: Lowest level buffered by the remote sink.
        remote_buffer_size: Buffered entries that trigger a remote flush.
        upload_config: Optional uploader settings; uploads are disabled if None.
        log_file_name_prefix: Prefix of the daily log file names.
        log_dir: Directory for log files (defaults to the user data dir).
        max_file_size_bytes: Size that triggers a same-day rollover.
        max_log_files: Maximum number of log files kept on disk.
    """
    enable_console_logging: bool = True
    enable_file_logging: bool = True
    enable_remote_logging: bool = False
    min_level: LogLevel = LogLevel.DEBUG
    remote_endpoint: Optional[str] = None
    remote_headers: Optional[Mapping[str, str]] = None
    remote_min_level: LogLevel = LogLevel.ERROR
    remote_buffer_size: int = const.DEFAULT_REMOTE_BUFFER_SIZE
    upload_config: Optional[LogUploadConfig] = None
    log_file_name_prefix: str = const.DEFAULT_LOG_FILE_PREFIX
    log_dir: Optional[str] = None
    max_file_size_bytes: int = const.DEFAULT_MAX_FILE_SIZE_BYTES
    max_log_files: int = const.DEFAULT_MAX_LOG_FILES

    def __post_init__(self) -> None:
        object.__setattr__(self, "remote_headers", _freeze_headers(self.remote_headers))


# -----------------------------------------------------------------------------
# LOADING API
# -----------------------------------------------------------------------------

def config_from_dict(
        data: Any,
        *,
        strict: bool = False,
) -> Tuple[LoggerConfig, List[str]]:
    """
    Build a LoggerConfig from a plain dictionary.

    Keys mirror the LoggerConfig field names. Level fields take level names,
    and the nested "upload" object maps onto LogUploadConfig (its interval is
    given as "upload_interval_seconds").

    Args:
        data: Raw configuration, typically decoded from JSON.
        strict: Raise on invalid values instead of falling back to defaults.

    Returns:
        Tuple[LoggerConfig, List[str]]: (configuration, warnings).

    Raises:
        TypeError: In strict mode, when a value has the wrong type.
        ValueError: In strict mode, when a value is out of range.
    """
    warnings: List[str] = []
    defaults = LoggerConfig()

    if not isinstance(data, Mapping):
        msg = f"Invalid config: expected an object, got {type(data).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(msg + " Using defaults.")
        return defaults, warnings

    known = {f.name for f in fields(LoggerConfig)} | {"upload"}
    for key in data:
        if key not in known:
            warnings.append(f"Unknown config key '{key}' ignored.")

    values: Dict[str, Any] = {}

    for name in ("enable_console_logging", "enable_file_logging", "enable_remote_logging"):
        values[name] = _as_bool(data.get(name), getattr(defaults, name), name, warnings, strict)

    values["min_level"] = _as_level(data.get("min_level"), defaults.min_level, "min_level", warnings, strict)
    values["remote_min_level"] = _as_level(
        data.get("remote_min_level"), defaults.remote_min_level, "remote_min_level", warnings, strict
    )
    values["remote_endpoint"] = _as_optional_str(data.get("remote_endpoint"), "remote_endpoint", warnings, strict)
    values["remote_headers"] = _as_headers(data.get("remote_headers"), "remote_headers", warnings, strict)
    values["remote_buffer_size"] = _as_positive_int(
        data.get("remote_buffer_size"), defaults.remote_buffer_size, "remote_buffer_size", warnings, strict
    )
    values["log_file_name_prefix"] = _as_str(
        data.get("log_file_name_prefix"), defaults.log_file_name_prefix, "log_file_name_prefix", warnings, strict
    )
    values["log_dir"] = _as_optional_str(data.get("log_dir"), "log_dir", warnings, strict)
    values["max_file_size_bytes"] = _as_positive_int(
        data.get("max_file_size_bytes"), defaults.max_file_size_bytes, "max_file_size_bytes", warnings, strict
    )
    values["max_log_files"] = _as_positive_int(
        data.get("max_log_files"), defaults.max_log_files, "max_log_files", warnings, strict
    )

    upload_raw = data.get("upload", data.get("upload_config"))
    values["upload_config"] = _as_upload_config(upload_raw, warnings, strict)

    if values["enable_remote_logging"] and not values["remote_endpoint"]:
        warnings.append("Remote logging enabled without 'remote_endpoint'; remote sink will stay idle.")

    for w in warnings:
        logger.warning(f"Config: {w}")

    return LoggerConfig(**values), warnings


def load_logger_config(
        path: Optional[str],
        *,
        strict: bool = False,
) -> Tuple[LoggerConfig, List[str]]:
    """
    Load a LoggerConfig from a JSON file.

    A missing path yields the defaults; a corrupt file yields the defaults
    plus a warning (or raises in strict mode).

    Args:
        path: Location of the JSON configuration file.
        strict: Propagate read, decode and validation errors.

    Returns:
        Tuple[LoggerConfig, List[str]]: (configuration, warnings).
    """
    if not path or not os.path.exists(path):
        logger.debug(f"Config file not found ({path}). Using defaults.")
        return LoggerConfig(), []

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        if strict:
            raise
        msg = f"Failed to load config '{path}': {e}. Using defaults."
        logger.error(msg)
        return LoggerConfig(), [msg]

    return config_from_dict(data, strict=strict)


# -----------------------------------------------------------------------------
# PRIVATE NORMALIZERS
# -----------------------------------------------------------------------------

def _freeze_headers(headers: Optional[Mapping[str, str]]) -> Optional[Mapping[str, str]]:
    """Read-only copy of a header mapping, detached from the caller's dict."""
    if headers is None:
        return None
    return MappingProxyType(dict(headers))


def _reject(msg: str, exc_type: type, warnings: List[str], strict: bool) -> None:
    if strict:
        raise exc_type(msg)
    warnings.append(msg + " Using default.")


def _as_bool(value: Any, default: bool, name: str, warnings: List[str], strict: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    _reject(f"'{name}' must be a boolean, got {type(value).__name__}.", TypeError, warnings, strict)
    return default


def _as_str(value: Any, default: str, name: str, warnings: List[str], strict: bool) -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    _reject(f"'{name}' must be a string, got {type(value).__name__}.", TypeError, warnings, strict)
    return default


def _as_optional_str(value: Any, name: str, warnings: List[str], strict: bool) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    _reject(f"'{name}' must be a string, got {type(value).__name__}.", TypeError, warnings, strict)
    return None


def _as_positive_int(value: Any, default: int, name: str, warnings: List[str], strict: bool) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        _reject(f"'{name}' must be an integer, got {type(value).__name__}.", TypeError, warnings, strict)
        return default
    if value < 1:
        _reject(f"'{name}' must be >= 1, got {value}.", ValueError, warnings, strict)
        return default
    return value


def _as_level(value: Any, default: LogLevel, name: str, warnings: List[str], strict: bool) -> LogLevel:
    if value is None:
        return default
    try:
        return LogLevel.parse(value)
    except ValueError as e:
        _reject(f"'{name}': {e}.", ValueError, warnings, strict)
        return default


def _as_headers(value: Any, name: str, warnings: List[str], strict: bool) -> Optional[Dict[str, str]]:
    if value is None:
        return None
    if isinstance(value, Mapping) and all(isinstance(k, str) for k in value):
        return {k: str(v) for k, v in value.items()}
    _reject(f"'{name}' must be an object of strings.", TypeError, warnings, strict)
    return None


def _as_upload_config(value: Any, warnings: List[str], strict: bool) -> Optional[LogUploadConfig]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        _reject(f"'upload' must be an object, got {type(value).__name__}.", TypeError, warnings, strict)
        return None

    endpoint = _as_optional_str(value.get("endpoint"), "upload.endpoint", warnings, strict)
    if not endpoint:
        msg = "'upload.endpoint' is required; uploads disabled."
        if strict:
            raise ValueError(msg)
        warnings.append(msg)
        return None

    defaults = LogUploadConfig(endpoint=endpoint)
    interval_s = _as_positive_int(
        value.get("upload_interval_seconds"),
        int(defaults.upload_interval.total_seconds()),
        "upload.upload_interval_seconds",
        warnings,
        strict,
    )

    return LogUploadConfig(
        endpoint=endpoint,
        headers=_as_headers(value.get("headers"), "upload.headers", warnings, strict),
        upload_on_error=_as_bool(value.get("upload_on_error"), defaults.upload_on_error,
                                 "upload.upload_on_error", warnings, strict),
        upload_daily=_as_bool(value.get("upload_daily"), defaults.upload_daily,
                              "upload.upload_daily", warnings, strict),
        upload_interval=timedelta(seconds=interval_s),
        max_retries=_as_positive_int(value.get("max_retries"), defaults.max_retries,
                                     "upload.max_retries", warnings, strict),
    )
