from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Resolves the per-user log directory and provides the small set of
filesystem primitives the sinks and the uploader rely on: listing log
files newest-first, safe directory creation and tail reading.
"""

import os
from typing import List, Optional, Tuple

from app_logger.domain.constants import LOG_FILE_EXTENSION

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "AppLogger"
UNIX_APP_DIR_NAME = ".app_logger"
LOGS_SUBDIR = "logs"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Standards:
    - Windows: %LOCALAPPDATA%/AppLogger
    - Linux/Mac: ~/.app_logger

    Returns:
        str: Absolute path to the application data directory (not created).
    """
    path = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    return os.path.abspath(path)


def get_default_log_dir() -> str:
    """Return the directory that holds the daily log files by default."""
    return os.path.join(get_user_data_dir(), LOGS_SUBDIR)


def resolve_log_dir(log_dir: Optional[str]) -> str:
    """
    Normalize a configured log directory, falling back to the default one.

    Handles environment variables and user home shortcuts.
    """
    p = (log_dir or "").strip()
    if not p:
        return get_default_log_dir()
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))


def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)

# -----------------------------------------------------------------------------
# LOG FILE DISCOVERY
# -----------------------------------------------------------------------------

def list_log_files(log_dir: str) -> List[str]:
    """
    List every log file in a directory, newest first.

    Ordering uses the last modification time, with the file name as a
    tie-breaker so the result is stable.

    Args:
        log_dir: Directory to scan.

    Returns:
        List[str]: Absolute paths; empty if the directory does not exist.

    Raises:
        OSError: If the directory exists but cannot be read.
    """
    if not os.path.isdir(log_dir):
        return []

    entries: List[Tuple[float, str]] = []
    with os.scandir(log_dir) as it:
        for item in it:
            if item.is_file() and item.name.endswith(LOG_FILE_EXTENSION):
                entries.append((item.stat().st_mtime, item.name))

    entries.sort(reverse=True)
    return [os.path.join(os.path.abspath(log_dir), name) for _, name in entries]


def tail_lines(path: str, n_lines: int = 100) -> List[str]:
    """
    Read the last lines of a text file.

    Uses errors='replace' so partially corrupted files never abort the read.

    Raises:
        OSError: If the file cannot be opened.
    """
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        lines = f.read().splitlines()
    if n_lines <= 0:
        return []
    return lines[-n_lines:]
