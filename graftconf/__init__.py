"""
GRAFTCONF - Bind JSON and Command-Line Configuration onto Live Objects

Configuration is written into objects the application already built, through
their property setters, following the object graph through property getters.
No schema is declared up front.

This package provides:
- option / json_property / json_root_name: metadata decorators
- CommandLineParser: argparse-backed command-line binder
- JsonConfigFileParser: msgspec-backed JSON binder
- BindingLogger: audit trail of every property write
"""

from graftconf.core.annotations import option, json_property, json_root_name
from graftconf.core.exceptions import (
    ConfigurationError,
    ConfigSourceError,
    ConfigParseError,
    UnsupportedFieldTypeError,
    MissingRequiredValueError,
    AccessorError,
)
from graftconf.binders.command_line import CommandLineParser
from graftconf.binders.config_file import (
    ConfigFileParser,
    JsonConfigFileParser,
    OverlayConfig,
)
from graftconf.infrastructure.logger import BindingLogger, LoggerConfig

__version__ = "0.1.0"

__all__ = [
    # Decorators
    "option",
    "json_property",
    "json_root_name",
    # Errors
    "ConfigurationError",
    "ConfigSourceError",
    "ConfigParseError",
    "UnsupportedFieldTypeError",
    "MissingRequiredValueError",
    "AccessorError",
    # Binders
    "CommandLineParser",
    "ConfigFileParser",
    "JsonConfigFileParser",
    "OverlayConfig",
    # Audit
    "BindingLogger",
    "LoggerConfig",
]
