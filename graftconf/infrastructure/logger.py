"""
GRAFTCONF BINDING LOGGER - Where Did This Value Come From?

Records every property write made by a binder so that a running program can
explain its configuration: which flag or JSON field set which property on
which class.

Architecture:
- BindingEvent: one property write
- EventBuffer: in-memory ring buffer of recent events
- FileLogger: optional newline-delimited JSON log
- BindingLogger: the interface the binders report to

Usage:
    audit = BindingLogger()
    parser = JsonConfigFileParser("app.json", binding_logger=audit)
    parser.configure(settings)

    for event in audit.get_by_property("port"):
        print(f"{event.owner}.{event.property_name} <- {event.value_repr} ({event.source})")
"""
import io
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

import msgspec

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class LoggerConfig:
    """Configuration for the binding logger."""
    buffer_size: int = 1000             # In-memory buffer size
    log_path: Optional[Path] = None     # JSONL file to append events to, if any


# =============================================================================
# EVENTS
# =============================================================================

class BindingSource(str, Enum):
    """Where a bound value came from."""
    COMMAND_LINE = "command_line"
    JSON = "json"


class BindingEvent(msgspec.Struct, frozen=True, kw_only=True):
    """A single property write performed by a binder."""
    sequence: int
    timestamp: str
    source: BindingSource
    owner: str              # Qualified name of the class written to
    property_name: str
    binding_name: str       # Flag or JSON field name that matched
    value_repr: str


# =============================================================================
# EVENT BUFFER
# =============================================================================

class EventBuffer:
    """Ring buffer for recent binding events."""

    def __init__(self, max_size: int = 1000):
        self._buffer: deque[BindingEvent] = deque(maxlen=max_size)
        self._sequence = 0

    def append(self, event: BindingEvent) -> None:
        self._buffer.append(event)

    def get_last(self, n: int) -> List[BindingEvent]:
        items = list(self._buffer)
        return items[-n:] if n > 0 else []

    def get_by_property(self, property_name: str) -> List[BindingEvent]:
        return [e for e in self._buffer if e.property_name == property_name]

    def get_by_source(self, source: BindingSource) -> List[BindingEvent]:
        return [e for e in self._buffer if e.source == source]

    def next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def clear(self) -> None:
        self._buffer.clear()

    def __iter__(self):
        return iter(list(self._buffer))

    def __len__(self) -> int:
        return len(self._buffer)


# =============================================================================
# FILE LOGGER
# =============================================================================

class FileLogger:
    """Appends events to a file as newline-delimited JSON."""

    def __init__(self, log_path: Path):
        self._log_path = Path(log_path)
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file: Optional[io.BufferedWriter] = None
        self._encoder = msgspec.json.Encoder()

    def write(self, event: BindingEvent) -> None:
        if self._file is None:
            self._file = open(self._log_path, "ab")
        self._file.write(self._encoder.encode(event) + b"\n")
        self._file.flush()

    def read_log(self) -> List[BindingEvent]:
        if not self._log_path.exists():
            return []
        decoder = msgspec.json.Decoder(type=BindingEvent)
        with open(self._log_path, "rb") as f:
            return [decoder.decode(line) for line in f if line.strip()]

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


# =============================================================================
# BINDING LOGGER (Main Interface)
# =============================================================================

class BindingLogger:
    """
    Audit trail of property writes.

    Every event goes to the in-memory buffer, to the JSONL file when one is
    configured, and to the standard `logging` module at DEBUG level.
    """

    def __init__(self, config: Optional[LoggerConfig] = None):
        self.config = config or LoggerConfig()
        self._buffer = EventBuffer(self.config.buffer_size)
        self._file_logger: Optional[FileLogger] = None

        if self.config.log_path is not None:
            self._file_logger = FileLogger(self.config.log_path)

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def log_write(
        self,
        source: BindingSource,
        owner: str,
        property_name: str,
        binding_name: str,
        value: Any,
    ) -> BindingEvent:
        """Record that a binder wrote value to owner.property_name."""
        event = BindingEvent(
            sequence=self._buffer.next_sequence(),
            timestamp=self._now(),
            source=source,
            owner=owner,
            property_name=property_name,
            binding_name=binding_name,
            value_repr=repr(value),
        )
        self._buffer.append(event)
        if self._file_logger is not None:
            self._file_logger.write(event)

        logger.debug(
            "%s set %s.%s from %s = %s",
            source.value, owner, property_name, binding_name, event.value_repr,
        )
        return event

    # =========================================================================
    # QUERY METHODS
    # =========================================================================

    def get_events(self, n: Optional[int] = None) -> List[BindingEvent]:
        """All buffered events, or the n most recent."""
        return list(self._buffer) if n is None else self._buffer.get_last(n)

    def get_by_property(self, property_name: str) -> List[BindingEvent]:
        return self._buffer.get_by_property(property_name)

    def get_by_source(self, source: BindingSource) -> List[BindingEvent]:
        return self._buffer.get_by_source(source)

    def clear(self) -> None:
        self._buffer.clear()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def close(self) -> None:
        if self._file_logger is not None:
            self._file_logger.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


__all__ = [
    "LoggerConfig",
    "BindingSource",
    "BindingEvent",
    "EventBuffer",
    "FileLogger",
    "BindingLogger",
]
