"""
GRAFTCONF CORE - The Binding Engine

- annotations: option / json_property / json_root_name metadata
- properties: Property Discoverer and the per-class descriptor cache
- walker: depth-first traversal of configurable object graphs
- value_tree: node kinds and scalar coercion for decoded JSON
- exceptions: ConfigurationError family and AccessorError
"""

from graftconf.core.properties import (
    PropertyDescriptor,
    ClassDescriptor,
    describe,
    readable_properties,
    option_properties,
)
from graftconf.core.walker import walk, walk_all, structural_children, is_structural_type
from graftconf.core.value_tree import NodeKind, node_kind, coerce_scalar

__all__ = [
    "PropertyDescriptor",
    "ClassDescriptor",
    "describe",
    "readable_properties",
    "option_properties",
    "walk",
    "walk_all",
    "structural_children",
    "is_structural_type",
    "NodeKind",
    "node_kind",
    "coerce_scalar",
]
