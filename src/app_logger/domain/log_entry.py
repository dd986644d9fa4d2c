from __future__ import annotations

"""
Log Entry Model.

Immutable record of a single log event and its two serialization
contracts: a JSON object for machine consumers (file and remote sinks)
and a multi-line human-readable rendering for display.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from app_logger.domain.log_level import LogLevel


@dataclass(frozen=True)
class LogEntry:
    """
    A single structured log event.

    Attributes:
        timestamp: Instant the event was created.
        level: Event severity.
        message: Human-readable message.
        context: Optional read-only mapping of JSON-serializable values.
        error: Optional error value, stringified on serialization.
        stack_trace: Optional stack trace text, serialized as a line list.
    """
    timestamp: datetime
    level: LogLevel
    message: str
    context: Optional[Mapping[str, Any]] = None
    error: Any = None
    stack_trace: Optional[str] = None

    def __post_init__(self) -> None:
        # Snapshot the caller's dict so later mutations never leak in
        if self.context is not None:
            object.__setattr__(self, "context", MappingProxyType(dict(self.context)))

    @classmethod
    def create(
            cls,
            level: LogLevel,
            message: str,
            context: Optional[Mapping[str, Any]] = None,
            error: Any = None,
            stack_trace: Optional[str] = None,
    ) -> LogEntry:
        """Build an entry stamped with the current local time."""
        return cls(
            timestamp=datetime.now().astimezone(),
            level=level,
            message=message,
            context=context,
            error=error,
            stack_trace=stack_trace,
        )

    # -------------------------------------------------------------------------
    # SERIALIZATION
    # -------------------------------------------------------------------------

    def to_json(self) -> Dict[str, Any]:
        """
        Convert the entry to its wire representation.

        Optional fields are omitted entirely when absent or empty.

        Returns:
            Dict[str, Any]: JSON-compatible dictionary.
        """
        data: Dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value,
            "message": self.message,
        }

        if self.context:
            data["context"] = dict(self.context)

        if self.error is not None:
            data["error"] = str(self.error)

        if self.stack_trace is not None:
            data["stackTrace"] = self.stack_trace.split("\n")

        return data

    def to_json_line(self) -> str:
        """Render the entry as one newline-terminated JSON line."""
        return json.dumps(self.to_json(), ensure_ascii=False, default=str) + "\n"

    def to_formatted_string(self) -> str:
        """Render the entry as a multi-line human-readable block."""
        stamp = self.timestamp.strftime("%Y-%m-%d %H:%M:%S.") + f"{self.timestamp.microsecond // 1000:03d}"
        lines: List[str] = [f"[{stamp}] [{self.level.value.upper()}] {self.message}"]

        if self.context:
            lines.append(f"Context: {dict(self.context)}")

        if self.error is not None:
            lines.append(f"Error: {self.error}")

        if self.stack_trace is not None:
            lines.append("StackTrace:")
            lines.append(self.stack_trace)

        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.to_formatted_string()

    # -------------------------------------------------------------------------
    # PARSING
    # -------------------------------------------------------------------------

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> LogEntry:
        """
        Rebuild an entry from its wire representation.

        Args:
            data: Dictionary produced by `to_json` (or decoded from a log line).

        Returns:
            LogEntry: The reconstructed entry. The error stays a string.

        Raises:
            ValueError: If a required field is missing or malformed.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Log entry must be an object, got {type(data).__name__}")

        try:
            timestamp = datetime.fromisoformat(str(data["timestamp"]))
            level = LogLevel.parse(data["level"])
            message = data["message"]
        except KeyError as e:
            raise ValueError(f"Log entry is missing field {e}") from e

        if not isinstance(message, str):
            raise ValueError("Log entry message must be a string")

        context = data.get("context")
        if context is not None and not isinstance(context, Mapping):
            raise ValueError("Log entry context must be an object")

        trace = data.get("stackTrace")
        if isinstance(trace, list):
            trace = "\n".join(str(line) for line in trace)
        elif trace is not None:
            trace = str(trace)

        return cls(
            timestamp=timestamp,
            level=level,
            message=message,
            context=context,
            error=data.get("error"),
            stack_trace=trace,
        )

    @classmethod
    def from_json_line(cls, line: str) -> LogEntry:
        """Decode a single JSON line into an entry (raises ValueError)."""
        return cls.from_json(json.loads(line))
