from __future__ import annotations

"""
Unit tests for the LogEntry model.

Verifies:
1. JSON representation with optional fields omitted.
2. Parsing back from JSON lines, including malformed input.
3. Human-readable formatting.
4. Immutability of the context snapshot.
"""

import json
from dataclasses import FrozenInstanceError

import pytest

from app_logger.domain.log_entry import LogEntry
from app_logger.domain.log_level import LogLevel


def test_to_json_omits_absent_optional_fields(make_entry) -> None:
    """TC-01: Verify only timestamp, level and message are emitted by default."""
    data = make_entry(LogLevel.INFO, "hello").to_json()

    assert data == {
        "timestamp": "2024-03-15T10:30:45.123000+00:00",
        "level": "info",
        "message": "hello",
    }


def test_to_json_includes_context_error_and_trace_lines(make_entry) -> None:
    """TC-02: Verify optional fields and the stack trace line split."""
    entry = make_entry(
        LogLevel.ERROR,
        "boom",
        context={"userId": "u1"},
        error=RuntimeError("bad"),
        stack_trace="frame 1\nframe 2",
    )
    data = entry.to_json()

    assert data["context"] == {"userId": "u1"}
    assert data["error"] == "bad"
    assert data["stackTrace"] == ["frame 1", "frame 2"]


def test_empty_context_is_omitted(make_entry) -> None:
    """TC-03: Verify an empty context map is not serialized."""
    assert "context" not in make_entry(context={}).to_json()


def test_json_line_round_trip(make_entry) -> None:
    """TC-04: Verify a written line parses back to an equal entry."""
    entry = make_entry(
        LogLevel.WARNING,
        "disk low",
        context={"free": 12, "unit": "MB"},
        error="ENOSPC",
        stack_trace="a\nb",
    )
    line = entry.to_json_line()

    assert line.endswith("\n")
    assert line.count("\n") == 1
    assert LogEntry.from_json_line(line) == entry


def test_json_line_keeps_non_ascii_text(make_entry) -> None:
    """TC-05: Verify unicode messages are stored verbatim."""
    line = make_entry(message="año ✓").to_json_line()
    assert "año ✓" in line
    assert json.loads(line)["message"] == "año ✓"


@pytest.mark.parametrize("line", [
    "not json",
    "[1, 2, 3]",
    '{"level": "info", "message": "x"}',
    '{"timestamp": "2024-01-01T00:00:00", "level": "nope", "message": "x"}',
    '{"timestamp": "yesterday", "level": "info", "message": "x"}',
])
def test_from_json_line_rejects_malformed_input(line: str) -> None:
    """TC-06: Verify malformed lines raise ValueError."""
    with pytest.raises(ValueError):
        LogEntry.from_json_line(line)


def test_formatted_string_layout(make_entry) -> None:
    """TC-07: Verify header line and optional blocks of the text rendering."""
    text = make_entry(
        LogLevel.ERROR,
        "failed",
        context={"k": "v"},
        error="E",
        stack_trace="t1\nt2",
    ).to_formatted_string()

    assert text.splitlines() == [
        "[2024-03-15 10:30:45.123] [ERROR] failed",
        "Context: {'k': 'v'}",
        "Error: E",
        "StackTrace:",
        "t1",
        "t2",
    ]
    assert text.endswith("\n")
    assert str(make_entry(message="x")) == "[2024-03-15 10:30:45.123] [INFO] x\n"


def test_context_is_snapshotted_and_read_only(make_entry) -> None:
    """TC-08: Verify later mutation of the caller's dict does not leak in."""
    ctx = {"a": 1}
    entry = make_entry(context=ctx)
    ctx["a"] = 2

    assert entry.context["a"] == 1
    with pytest.raises(TypeError):
        entry.context["b"] = 3  # type: ignore[index]
    with pytest.raises(FrozenInstanceError):
        entry.message = "changed"  # type: ignore[misc]


def test_create_stamps_local_aware_time() -> None:
    """TC-09: Verify the factory uses a timezone-aware current time."""
    entry = LogEntry.create(LogLevel.DEBUG, "now")
    assert entry.timestamp.tzinfo is not None
    assert entry.context is None
