"""
GRAFTCONF EXCEPTIONS - What Can Go Wrong While Binding

Two families:
- ConfigurationError: bad input. The config source, the command line or the
  tree shape does not fit the object graph.
- AccessorError: bad code. A bound class does not expose the accessor the
  binder needs. Kept outside ConfigurationError on purpose so callers that
  report user mistakes do not hide programming defects.
"""
from typing import Optional


# =============================================================================
# CONFIGURATION ERRORS (Bad Input)
# =============================================================================

class ConfigurationError(Exception):
    """Base exception for configuration binding failures."""
    pass


class ConfigSourceError(ConfigurationError):
    """Raised when a configuration source cannot be read."""
    pass


class ConfigParseError(ConfigurationError):
    """Raised when a configuration source is not well-formed."""
    pass


class UnsupportedFieldTypeError(ConfigurationError):
    """Raised when a tree field of an unbindable kind (array) hits a property."""
    def __init__(self, field_name: str, owner: Optional[type] = None):
        self.field_name = field_name
        self.owner = owner
        msg = f"Unsupported JSON field type for field '{field_name}'"
        if owner is not None:
            msg += f" on {qualified_name(owner)}"
        super().__init__(msg)


class MissingRequiredValueError(ConfigurationError):
    """Raised when a value marked required is absent after binding."""
    def __init__(self, value_name: str):
        self.value_name = value_name
        super().__init__(f'Configuration value "{value_name}" is required')


# =============================================================================
# ACCESSOR ERRORS (Bad Code)
# =============================================================================

class AccessorError(Exception):
    """Raised when a property does not expose the accessor the binder needs."""
    def __init__(self, accessor_name: str, owner: type, reason: str = "is not invokable"):
        self.accessor_name = accessor_name
        self.owner = owner
        super().__init__(f"Accessor {accessor_name} on {qualified_name(owner)} {reason}")


def qualified_name(cls: type) -> str:
    """Fully qualified class name, e.g. 'app.settings.Server'."""
    return f"{cls.__module__}.{cls.__qualname__}"


__all__ = [
    "ConfigurationError",
    "ConfigSourceError",
    "ConfigParseError",
    "UnsupportedFieldTypeError",
    "MissingRequiredValueError",
    "AccessorError",
    "qualified_name",
]
