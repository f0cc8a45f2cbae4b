"""
GRAFTCONF PROPERTIES - The Property Discoverer

Finds the bindable surface of a class: every `property` with its getter,
setter, declared type and binding metadata.

Architecture:
- PropertyDescriptor: one property (name, accessors, declared type, metadata)
- ClassDescriptor: all properties of one class plus name-keyed lookup tables
- describe(): builds a ClassDescriptor once per class and caches it

Design:
- Accessors only: values are read through the getter and written through the
  setter, never through instance attributes
- Discovery order is most-derived class first, definition order within a
  class; a name shadowed by a subclass is reported once
- The cache is write-once per class and is never invalidated
"""
import collections.abc
import datetime
import inspect
import logging
import numbers
import pathlib
import types
import typing
import uuid
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

import msgspec

from graftconf.core.annotations import (
    JsonPropertySpec,
    OptionSpec,
    get_json_property,
    get_option,
)
from graftconf.core.exceptions import AccessorError, ConfigurationError, qualified_name

logger = logging.getLogger(__name__)


# =============================================================================
# DECLARED TYPES
# =============================================================================

# Types that are never descended into: primitives, strings, collections,
# class objects, modules, and common value objects.
LEAF_TYPES: Tuple[type, ...] = (
    numbers.Number,
    str,
    bytes,
    bytearray,
    memoryview,
    collections.abc.Sequence,
    collections.abc.Mapping,
    collections.abc.Set,
    type,
    types.ModuleType,
    Enum,
    pathlib.PurePath,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
)

_UNION_TYPES = (typing.Union, types.UnionType)


def normalize_type(hint: Any) -> Optional[type]:
    """
    Reduce a type hint to a plain class, or None when it is unknown.

    Optional[X] becomes X, List[int] becomes list, Annotated[X, ...] becomes X.
    Unions of several classes, Any, TypeVars and unresolved strings are unknown.
    """
    if hint is None or hint is type(None) or hint is Any:
        return None

    origin = typing.get_origin(hint)
    if origin in _UNION_TYPES:
        members = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        return normalize_type(members[0]) if len(members) == 1 else None
    if origin is typing.Annotated:
        return normalize_type(typing.get_args(hint)[0])
    if origin is typing.Literal:
        values = typing.get_args(hint)
        return type(values[0]) if values else None
    if origin is not None:
        return origin if isinstance(origin, type) else None

    return hint if isinstance(hint, type) else None


def is_leaf_type(tp: Optional[type]) -> bool:
    """True for types a walker must never descend into."""
    return tp is not None and issubclass(tp, LEAF_TYPES)


def is_leaf_value(value: Any) -> bool:
    """Runtime counterpart of is_leaf_type, for properties with unknown types."""
    return isinstance(value, LEAF_TYPES)


def _type_hints(func: Callable[..., Any]) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(func, include_extras=True)
    except (NameError, AttributeError, TypeError):
        # Unresolvable forward references (classes local to a function,
        # missing module attributes, non-type strings)
        return {}


def _declared_type(prop: property) -> Optional[type]:
    if prop.fget is not None:
        declared = normalize_type(_type_hints(prop.fget).get("return"))
        if declared is not None:
            return declared

    if prop.fset is not None:
        try:
            params = list(inspect.signature(prop.fset).parameters)
        except (TypeError, ValueError):
            return None
        if len(params) >= 2:
            return normalize_type(_type_hints(prop.fset).get(params[1]))

    return None


# =============================================================================
# DESCRIPTORS
# =============================================================================

class PropertyDescriptor(msgspec.Struct, frozen=True, kw_only=True):
    """
    Capability descriptor for a single property.

    All reads and writes performed by the binders go through read() and
    write(), which is where accessor failures are turned into errors.
    """
    name: str
    owner: type
    fget: Optional[Callable[[Any], Any]] = None
    fset: Optional[Callable[[Any, Any], None]] = None
    declared_type: Optional[type] = None
    option: Optional[OptionSpec] = None
    read_override: Optional[JsonPropertySpec] = None
    write_override: Optional[JsonPropertySpec] = None

    @property
    def readable(self) -> bool:
        return self.fget is not None

    @property
    def writable(self) -> bool:
        return self.fset is not None

    @property
    def binding_name(self) -> str:
        """JSON field name: getter override, else setter override, else the property name."""
        for override in (self.read_override, self.write_override):
            if override is not None and override.name:
                return override.name
        return self.name

    @property
    def required(self) -> bool:
        return any(
            override is not None and override.required
            for override in (self.read_override, self.write_override)
        )

    @property
    def is_leaf(self) -> bool:
        return is_leaf_type(self.declared_type)

    def read(self, obj: Any) -> Any:
        """Invoke the getter on obj."""
        if self.fget is None:
            raise AccessorError(f"{self.name} getter", type(obj), "is not defined")
        try:
            return self.fget(obj)
        except (ConfigurationError, AccessorError):
            raise
        except Exception as e:
            raise ConfigurationError(
                f"Error invoking {self.name} getter on {qualified_name(type(obj))}"
            ) from e

    def write(self, obj: Any, value: Any) -> None:
        """Invoke the setter on obj."""
        if self.fset is None:
            raise AccessorError(f"{self.name} setter", type(obj), "is not defined")
        try:
            self.fset(obj, value)
        except (ConfigurationError, AccessorError):
            raise
        except Exception as e:
            raise ConfigurationError(
                f"Error invoking {self.name} setter on {qualified_name(type(obj))}"
            ) from e


class ClassDescriptor:
    """All bindable properties of one class, with lookup tables."""

    def __init__(self, cls: type, properties: Tuple[PropertyDescriptor, ...]):
        self.cls = cls
        self.properties = properties
        self._by_name = {p.name: p for p in properties}
        self._by_binding: Dict[str, PropertyDescriptor] = {}
        for p in properties:
            # First property in discovery order wins a contested binding name
            self._by_binding.setdefault(p.binding_name, p)

    def get(self, name: str) -> Optional[PropertyDescriptor]:
        return self._by_name.get(name)

    def find_binding(self, field_name: str) -> Optional[PropertyDescriptor]:
        return self._by_binding.get(field_name)

    def readable(self) -> Tuple[PropertyDescriptor, ...]:
        return tuple(p for p in self.properties if p.readable)

    def options(self) -> Tuple[PropertyDescriptor, ...]:
        return tuple(p for p in self.properties if p.writable and p.option is not None)

    def __iter__(self):
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)

    def __repr__(self) -> str:
        return f"ClassDescriptor({qualified_name(self.cls)}, {[p.name for p in self.properties]})"


# =============================================================================
# DISCOVERY
# =============================================================================

_DESCRIPTOR_CACHE: Dict[type, ClassDescriptor] = {}


def _discover(cls: type) -> ClassDescriptor:
    seen = set()
    found = []

    for klass in cls.__mro__:
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if name.startswith("_") or not isinstance(attr, property):
                continue
            found.append(PropertyDescriptor(
                name=name,
                owner=cls,
                fget=attr.fget,
                fset=attr.fset,
                declared_type=_declared_type(attr),
                option=get_option(attr.fset),
                read_override=get_json_property(attr.fget),
                write_override=get_json_property(attr.fset),
            ))

    logger.debug("Discovered %d properties on %s", len(found), qualified_name(cls))
    return ClassDescriptor(cls, tuple(found))


def describe(cls: type) -> ClassDescriptor:
    """
    Return the capability descriptor for a class, building it on first use.

    Args:
        cls: The class to describe (not an instance)

    Returns:
        The cached ClassDescriptor

    Raises:
        TypeError: If cls is not a class
    """
    if not isinstance(cls, type):
        raise TypeError(f"Expected a class, got {type(cls).__name__}")

    descriptor = _DESCRIPTOR_CACHE.get(cls)
    if descriptor is None:
        descriptor = _DESCRIPTOR_CACHE.setdefault(cls, _discover(cls))
    return descriptor


def readable_properties(cls: type) -> Tuple[PropertyDescriptor, ...]:
    """Properties of cls that have a getter."""
    return describe(cls).readable()


def option_properties(cls: type) -> Tuple[PropertyDescriptor, ...]:
    """Properties of cls whose setter carries command-line option metadata."""
    return describe(cls).options()


__all__ = [
    "PropertyDescriptor",
    "ClassDescriptor",
    "describe",
    "readable_properties",
    "option_properties",
    "normalize_type",
    "is_leaf_type",
    "is_leaf_value",
    "LEAF_TYPES",
]
