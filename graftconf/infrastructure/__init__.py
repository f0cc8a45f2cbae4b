"""
GRAFTCONF INFRASTRUCTURE - Supporting Modules

- logger: binding audit trail (BindingLogger, EventBuffer, FileLogger)
- sources: reading configuration sources from paths, bytes and streams
"""

from graftconf.infrastructure.logger import (
    BindingEvent,
    BindingLogger,
    BindingSource,
    LoggerConfig,
)
from graftconf.infrastructure.sources import read_source, describe_source

__all__ = [
    "BindingEvent",
    "BindingLogger",
    "BindingSource",
    "LoggerConfig",
    "read_source",
    "describe_source",
]
