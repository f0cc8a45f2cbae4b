"""
GRAFTCONF BINDERS - Sources Bound onto Object Graphs

- command_line: CommandLineParser (argparse)
- config_file: ConfigFileParser, JsonConfigFileParser (msgspec)
"""

from graftconf.binders.command_line import CommandLineParser
from graftconf.binders.config_file import (
    ConfigFileParser,
    JsonConfigFileParser,
    OverlayConfig,
)

__all__ = [
    "CommandLineParser",
    "ConfigFileParser",
    "JsonConfigFileParser",
    "OverlayConfig",
]
