"""
Configuration source acquisition.

A config source is one of:
- a path (str or os.PathLike)
- raw bytes (bytes, bytearray, memoryview)
- an open binary stream or file handle (anything with read())

read_source() turns any of these into bytes. I/O failures surface as
ConfigSourceError with the OSError chained; a text stream that cannot decode
its content raises ConfigParseError.
"""
import logging
import os
from pathlib import Path
from typing import IO, Union

from graftconf.core.exceptions import ConfigParseError, ConfigSourceError

logger = logging.getLogger(__name__)

Source = Union[str, os.PathLike, bytes, bytearray, memoryview, IO[bytes]]


def describe_source(source: Source) -> str:
    """Short human-readable name for a source, used in error messages."""
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    if isinstance(source, (bytes, bytearray, memoryview)):
        return f"<{len(source)} bytes>"
    name = getattr(source, "name", None)
    return str(name) if name is not None else f"<{type(source).__name__}>"


def read_source(source: Source) -> bytes:
    """
    Read a configuration source completely.

    Streams are read from their current position and are not closed.

    Raises:
        ConfigSourceError: If the source cannot be read
        ConfigParseError: If a text stream cannot decode its content
        TypeError: If the source is not a supported kind
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)

    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ConfigSourceError(f"Error reading configuration from {path}: {e}") from e
        logger.debug("Read %d bytes from %s", len(data), path)
        return data

    if hasattr(source, "read"):
        try:
            data = source.read()
        except OSError as e:
            raise ConfigSourceError(
                f"Error reading configuration from {describe_source(source)}: {e}"
            ) from e
        except UnicodeDecodeError as e:
            # Text-mode handle over bytes that are not in its encoding
            raise ConfigParseError(
                f"Error decoding configuration from {describe_source(source)}: {e}"
            ) from e
        if isinstance(data, str):
            # Text-mode handle; the decoders take UTF-8 bytes
            data = data.encode("utf-8")
        return bytes(data)

    raise TypeError(f"Unsupported configuration source: {type(source).__name__}")


__all__ = [
    "Source",
    "describe_source",
    "read_source",
]
