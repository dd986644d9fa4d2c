from __future__ import annotations

"""
Unit tests for the LogLevel severity scale.

Verifies total ordering, stdlib mapping and tolerant parsing.
"""

import logging

import pytest

from app_logger.domain.log_level import LogLevel


def test_levels_are_totally_ordered() -> None:
    """TC-01: Verify DEBUG < INFO < WARNING < ERROR < FATAL."""
    ordered = [LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARNING, LogLevel.ERROR, LogLevel.FATAL]
    assert sorted(reversed(ordered)) == ordered
    assert LogLevel.ERROR >= LogLevel.ERROR
    assert LogLevel.FATAL > LogLevel.ERROR
    assert not LogLevel.INFO > LogLevel.WARNING


def test_values_are_lowercase_names() -> None:
    """TC-02: Verify the serialized names of each level."""
    assert [lvl.value for lvl in LogLevel] == ["debug", "info", "warning", "error", "fatal"]


def test_to_logging_level_maps_fatal_to_critical() -> None:
    """TC-03: Verify mapping onto stdlib logging constants."""
    assert LogLevel.DEBUG.to_logging_level() == logging.DEBUG
    assert LogLevel.WARNING.to_logging_level() == logging.WARNING
    assert LogLevel.FATAL.to_logging_level() == logging.CRITICAL


@pytest.mark.parametrize("raw, expected", [
    ("error", LogLevel.ERROR),
    ("  Warning ", LogLevel.WARNING),
    ("WARN", LogLevel.WARNING),
    ("critical", LogLevel.FATAL),
    (0, LogLevel.DEBUG),
    (4, LogLevel.FATAL),
    (LogLevel.INFO, LogLevel.INFO),
])
def test_parse_accepts_names_aliases_and_priorities(raw, expected) -> None:
    """TC-04: Verify every accepted input form resolves to the right level."""
    assert LogLevel.parse(raw) is expected


@pytest.mark.parametrize("raw", ["verbose", 9, True, None, 1.5])
def test_parse_rejects_unknown_values(raw) -> None:
    """TC-05: Verify unknown inputs raise ValueError."""
    with pytest.raises(ValueError):
        LogLevel.parse(raw)


def test_comparison_with_foreign_type_is_unsupported() -> None:
    """TC-06: Verify ordering against non-levels raises TypeError."""
    with pytest.raises(TypeError):
        _ = LogLevel.INFO < 3
