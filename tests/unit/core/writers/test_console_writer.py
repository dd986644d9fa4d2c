from __future__ import annotations

"""
Unit tests for the ConsoleWriter sink.

Uses an in-memory stream with colors disabled to inspect the rendering.
"""

import io

from app_logger.core.writers import ConsoleWriter
from app_logger.domain.log_level import LogLevel


def _writer(enabled: bool = True) -> tuple:
    stream = io.StringIO()
    return ConsoleWriter(enabled=enabled, stream=stream, use_colors=False), stream


def test_writes_level_and_message(make_entry) -> None:
    """TC-01: Verify the level name and message reach the stream."""
    writer, stream = _writer()
    writer.write(make_entry(LogLevel.INFO, "service started"))

    out = stream.getvalue()
    assert "| INFO     | service started" in out
    assert "Error:" not in out


def test_context_is_appended(make_entry) -> None:
    """TC-02: Verify a non-empty context is rendered after the message."""
    writer, stream = _writer()
    writer.write(make_entry(LogLevel.DEBUG, "ctx", context={"screen": "home"}))

    assert "Context: {'screen': 'home'}" in stream.getvalue()


def test_error_entries_carry_error_and_trace_blocks(make_entry) -> None:
    """TC-03: Verify ERROR entries render the error and stack trace separately."""
    writer, stream = _writer()
    writer.write(make_entry(LogLevel.ERROR, "crash", error="KeyError('x')", stack_trace="line a\nline b"))

    lines = stream.getvalue().splitlines()
    assert "| ERROR    | crash" in lines[0]
    assert lines[1:] == ["Error: KeyError('x')", "StackTrace:", "line a", "line b"]


def test_fatal_maps_to_critical(make_entry) -> None:
    """TC-04: Verify FATAL is printed with the CRITICAL stdlib level name."""
    writer, stream = _writer()
    writer.write(make_entry(LogLevel.FATAL, "gone"))
    assert "| CRITICAL | gone" in stream.getvalue()


def test_warning_does_not_render_error_block(make_entry) -> None:
    """TC-05: Verify error data is only shown for ERROR and FATAL."""
    writer, stream = _writer()
    writer.write(make_entry(LogLevel.WARNING, "careful", error="ignored"))
    assert "Error:" not in stream.getvalue()


def test_disabled_and_disposed_writers_are_silent(make_entry) -> None:
    """TC-06: Verify no output when disabled, and none after dispose."""
    disabled, disabled_stream = _writer(enabled=False)
    disabled.write(make_entry(message="hidden"))
    assert disabled_stream.getvalue() == ""

    writer, stream = _writer()
    writer.dispose()
    writer.dispose()
    writer.write(make_entry(message="late"))
    assert stream.getvalue() == ""


def test_writers_do_not_share_output(make_entry) -> None:
    """TC-07: Verify two instances write to their own streams only."""
    first, first_stream = _writer()
    second, second_stream = _writer()

    first.write(make_entry(message="one"))

    assert "one" in first_stream.getvalue()
    assert second_stream.getvalue() == ""
