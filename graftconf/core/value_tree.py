"""
GRAFTCONF VALUE TREE - Node Kinds of a Decoded Configuration Tree

msgspec decodes JSON straight into builtins (dict, list, str, int, float,
bool, None). This module classifies those builtins into node kinds and
coerces scalar nodes to the width a property declares.
"""
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1


class NodeKind(str, Enum):
    """Kinds of node in a decoded JSON tree."""
    BOOLEAN = "boolean"
    INT = "int"         # Integer within the signed 32-bit range
    LONG = "long"       # Any other integer
    FLOAT = "float"
    STRING = "string"
    NULL = "null"
    OBJECT = "object"
    ARRAY = "array"


SCALAR_KINDS = frozenset({
    NodeKind.BOOLEAN,
    NodeKind.INT,
    NodeKind.LONG,
    NodeKind.FLOAT,
    NodeKind.STRING,
    NodeKind.NULL,
})


def node_kind(value: Any) -> NodeKind:
    """
    Classify a decoded JSON value.

    Raises:
        TypeError: If the value is not something a JSON decoder produces
    """
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return NodeKind.BOOLEAN
    if isinstance(value, int):
        return NodeKind.INT if INT_MIN <= value <= INT_MAX else NodeKind.LONG
    if isinstance(value, float):
        return NodeKind.FLOAT
    if isinstance(value, str):
        return NodeKind.STRING
    if value is None:
        return NodeKind.NULL
    if isinstance(value, dict):
        return NodeKind.OBJECT
    if isinstance(value, list):
        return NodeKind.ARRAY
    raise TypeError(f"Not a JSON tree node: {type(value).__name__}")


def is_scalar(value: Any) -> bool:
    return node_kind(value) in SCALAR_KINDS


def coerce_scalar(value: Any, declared_type: Optional[type]) -> Any:
    """
    Convert a scalar node to the numeric width of the target property.

    Only numbers are converted. Integers widen to float for float properties,
    numbers become Decimal for Decimal properties. Nothing is range checked.
    """
    kind = node_kind(value)
    if kind not in (NodeKind.INT, NodeKind.LONG, NodeKind.FLOAT) or declared_type is None:
        return value

    if issubclass(declared_type, Decimal):
        # repr keeps the shortest decimal spelling of a float
        return Decimal(repr(value)) if kind is NodeKind.FLOAT else Decimal(value)
    if declared_type is float:
        return float(value)
    return value


__all__ = [
    "NodeKind",
    "SCALAR_KINDS",
    "node_kind",
    "is_scalar",
    "coerce_scalar",
]
