from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for entries, clocks and mocked HTTP responses.
3. Isolation of the package diagnostics logger between tests.
"""

import os
import sys
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from unittest.mock import MagicMock

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from app_logger.domain.log_entry import LogEntry  # noqa: E402
from app_logger.domain.log_level import LogLevel  # noqa: E402
from app_logger.infra.logging import reset_logging  # noqa: E402

FIXED_TIME = datetime(2024, 3, 15, 10, 30, 45, 123000, tzinfo=timezone.utc)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _isolate_diagnostics_logging() -> Any:
    """Undo any configure_logging call so caplog keeps seeing package records."""
    yield
    reset_logging()


@pytest.fixture
def make_entry() -> Callable[..., LogEntry]:
    """
    Factory for entries stamped with a fixed instant.

    Returns:
        Callable[..., LogEntry]: Builder accepting level, message and optional fields.
    """
    def _make(
            level: LogLevel = LogLevel.INFO,
            message: str = "message",
            context: Optional[Dict[str, Any]] = None,
            error: Any = None,
            stack_trace: Optional[str] = None,
    ) -> LogEntry:
        return LogEntry(
            timestamp=FIXED_TIME,
            level=level,
            message=message,
            context=context,
            error=error,
            stack_trace=stack_trace,
        )

    return _make


@pytest.fixture
def ok_response() -> MagicMock:
    """A successful HTTP response mock."""
    response = MagicMock()
    response.status_code = 200
    response.text = "ok"
    return response


@pytest.fixture
def error_response() -> MagicMock:
    """A failing HTTP response mock."""
    response = MagicMock()
    response.status_code = 500
    response.text = "boom"
    return response
