"""
GRAFTCONF WALKER - Depth-First Traversal of a Configurable Object Graph

Visits a root object, then every sub-object reachable through a getter whose
declared type is structural. Primitives, strings, collections, classes,
modules and enums are leaves and are never descended into.

Traversal rules:
- Pre-order: the visitor sees a node before any of its children
- A structural property whose getter returns None is skipped
- Getter failures abort the walk (see PropertyDescriptor.read)
- No cycle detection; the graph must be acyclic

Usage:
    def register(obj, descriptor, path):
        for prop in descriptor.options():
            ...

    walk(settings, register)
"""
import logging
from typing import Any, Callable, Iterable, Iterator, Optional, Tuple

from graftconf.core.properties import (
    ClassDescriptor,
    PropertyDescriptor,
    describe,
    is_leaf_type,
    is_leaf_value,
)

logger = logging.getLogger(__name__)

Visitor = Callable[[Any, ClassDescriptor, str], None]


def is_structural_type(tp: Optional[type]) -> bool:
    """True if a property of this declared type may be descended into. None means unknown."""
    return not is_leaf_type(tp)


def structural_children(
    obj: Any,
    descriptor: Optional[ClassDescriptor] = None,
) -> Iterator[Tuple[PropertyDescriptor, Any]]:
    """
    Yield (property, sub-object) for every structural property of obj.

    Properties with an unknown declared type are read and their value is
    classified instead. None values are not yielded.
    """
    if descriptor is None:
        descriptor = describe(type(obj))

    for prop in descriptor.readable():
        if prop.is_leaf:
            continue
        child = prop.read(obj)
        if child is None or is_leaf_value(child):
            continue
        yield prop, child


def walk(root: Any, visit: Visitor, path: Optional[str] = None) -> None:
    """
    Walk the object graph below root, calling visit(obj, descriptor, path) on each node.

    Args:
        root: Object to start from
        visit: Callback run on each node before its children
        path: Dotted path of root, defaults to its class name
    """
    descriptor = describe(type(root))
    if path is None:
        path = type(root).__name__

    logger.debug("Visiting %s", path)
    visit(root, descriptor, path)

    for prop, child in structural_children(root, descriptor):
        walk(child, visit, f"{path}.{prop.name}")


def walk_all(roots: Iterable[Any], visit: Visitor) -> None:
    """Walk each root in order."""
    for root in roots:
        walk(root, visit)


__all__ = [
    "Visitor",
    "is_structural_type",
    "structural_children",
    "walk",
    "walk_all",
]
