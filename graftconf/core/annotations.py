"""
GRAFTCONF ANNOTATIONS - Metadata Markers for Bindable Properties

Decorators that attach binding metadata to property accessors and classes.
They never wrap or replace the decorated function; they only tag it, so the
accessor behaves exactly as written.

Usage:
    @json_root_name("server")
    class ServerSettings:
        @property
        def port(self) -> int:
            return self._port

        @port.setter
        @option("--port", "-p", usage="TCP port to listen on", metavar="N")
        def port(self, value: int) -> None:
            self._port = value

        @property
        @json_property("tls")
        def tls_settings(self) -> TlsSettings:
            return self._tls
"""
from typing import Any, Callable, Optional, Tuple, TypeVar

import msgspec

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound=type)

OPTION_ATTR = "__graftconf_option__"
JSON_PROPERTY_ATTR = "__graftconf_json_property__"
ROOT_NAME_ATTR = "__graftconf_root_name__"


# =============================================================================
# METADATA SPECS
# =============================================================================

class OptionSpec(msgspec.Struct, frozen=True, kw_only=True):
    """Command-line option metadata attached to a property setter."""
    name: str                       # Primary flag, e.g. "--port"
    aliases: Tuple[str, ...] = ()   # Extra flags, e.g. ("-p",)
    usage: str = ""                 # Help text shown in the usage listing
    metavar: Optional[str] = None   # Placeholder for the value in usage
    required: bool = False

    @property
    def flags(self) -> Tuple[str, ...]:
        return (self.name,) + self.aliases


class JsonPropertySpec(msgspec.Struct, frozen=True, kw_only=True):
    """JSON binding-name override attached to a getter or setter."""
    name: Optional[str] = None
    required: bool = False


# =============================================================================
# DECORATORS
# =============================================================================

def option(
    name: str,
    *aliases: str,
    usage: str = "",
    metavar: Optional[str] = None,
    required: bool = False,
) -> Callable[[F], F]:
    """Mark a property setter as a command-line option."""
    if not name.startswith("-"):
        raise ValueError(f"Option name must start with '-': {name!r}")

    spec = OptionSpec(
        name=name,
        aliases=tuple(aliases),
        usage=usage,
        metavar=metavar,
        required=required,
    )

    def decorate(func: F) -> F:
        setattr(func, OPTION_ATTR, spec)
        return func

    return decorate


def json_property(name: Optional[str] = None, *, required: bool = False) -> Callable[[F], F]:
    """Override the JSON field name bound to a property, on its getter or setter."""
    spec = JsonPropertySpec(name=name, required=required)

    def decorate(func: F) -> F:
        setattr(func, JSON_PROPERTY_ATTR, spec)
        return func

    return decorate


def json_root_name(name: str) -> Callable[[C], C]:
    """Name the root JSON node a class is configured from. Not inherited."""
    def decorate(cls: C) -> C:
        setattr(cls, ROOT_NAME_ATTR, name)
        return cls

    return decorate


# =============================================================================
# LOOKUPS
# =============================================================================

def get_option(func: Optional[Callable[..., Any]]) -> Optional[OptionSpec]:
    return getattr(func, OPTION_ATTR, None) if func is not None else None


def get_json_property(func: Optional[Callable[..., Any]]) -> Optional[JsonPropertySpec]:
    return getattr(func, JSON_PROPERTY_ATTR, None) if func is not None else None


def get_root_name(cls: type) -> Optional[str]:
    """Root name declared directly on cls; base-class declarations do not count."""
    return vars(cls).get(ROOT_NAME_ATTR)


__all__ = [
    "OptionSpec",
    "JsonPropertySpec",
    "option",
    "json_property",
    "json_root_name",
    "get_option",
    "get_json_property",
    "get_root_name",
]
