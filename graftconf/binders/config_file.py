"""
GRAFTCONF CONFIG FILE BINDER - Overlaying a JSON Tree onto Live Objects

Reads a JSON document once and overlays its fields onto objects the caller
already built, writing through property setters and descending through
property getters.

Architecture:
- OverlayConfig: tuning for the unmatched-field search
- ConfigFileParser: source acquisition plus the parse/configure contract
- JsonConfigFileParser: msgspec-backed implementation

Root resolution (per object passed to configure()):
1. @json_root_name on the class, which must exist in the document
2. lower-camel-cased class name ("ServerSettings" -> "serverSettings")
3. fully qualified class name ("app.settings.ServerSettings")

Overlay (per field of a node, in document order):
- Scalar field: coerced to the property's declared numeric width, then set
- Object field: the property's current value is read and overlaid recursively
- Array field: UnsupportedFieldTypeError
- No property with that binding name: the nearest structural sub-object
  owning one receives the field (breadth-first, discovery order, bounded
  by OverlayConfig.max_search_depth)

Required values (json_property(required=True)) are checked once every root
has been overlaid, across each root's whole object graph. Writes routed by
the search count toward their owner.

Usage:
    parser = JsonConfigFileParser("app.json")
    parser.configure(server_settings, database_settings)
"""
import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import msgspec

from graftconf.core.annotations import get_root_name
from graftconf.core.exceptions import (
    ConfigParseError,
    ConfigurationError,
    MissingRequiredValueError,
    UnsupportedFieldTypeError,
    qualified_name,
)
from graftconf.core.properties import ClassDescriptor, PropertyDescriptor, describe, is_leaf_value
from graftconf.core.value_tree import NodeKind, coerce_scalar, node_kind
from graftconf.core.walker import structural_children
from graftconf.infrastructure.logger import BindingLogger, BindingSource
from graftconf.infrastructure.sources import Source, describe_source, read_source

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class OverlayConfig:
    """Configuration for tree overlays."""
    search_unmatched: bool = True   # Look for unmatched fields in sub-objects
    max_search_depth: int = 4       # Levels below the current object to search


# =============================================================================
# BASE PARSER
# =============================================================================

class ConfigFileParser(ABC):
    """
    A configuration file bound onto existing objects.

    The constructor reads the source immediately; configure() may then be
    called any number of times.
    """

    def __init__(
        self,
        source: Source,
        config: Optional[OverlayConfig] = None,
        binding_logger: Optional[BindingLogger] = None,
    ):
        """
        Args:
            source: Path, raw bytes, or an open binary stream
            config: Overlay tuning, defaults to OverlayConfig()
            binding_logger: Receives an event for every property write

        Raises:
            ConfigSourceError: If the source cannot be read
            ConfigParseError: If the content is malformed
        """
        self.config = config or OverlayConfig()
        self.binding_logger = binding_logger
        self.load(source)

    def load(self, source: Source) -> None:
        """Read and parse a source, replacing anything loaded before."""
        self.parse(read_source(source), describe_source(source))

    @abstractmethod
    def parse(self, data: bytes, origin: str = "<bytes>") -> None:
        """Parse raw content into the tree used by configure()."""

    @abstractmethod
    def configure(self, *objects: Any) -> None:
        """Overlay the loaded configuration onto each object."""


# =============================================================================
# JSON PARSER
# =============================================================================

class JsonConfigFileParser(ConfigFileParser):
    """Binds a JSON document onto objects through their properties."""

    _tree: Any = None

    def parse(self, data: bytes, origin: str = "<bytes>") -> None:
        try:
            self._tree = msgspec.json.decode(data)
        except (msgspec.DecodeError, UnicodeDecodeError) as e:
            raise ConfigParseError(f"Error reading JSON from {origin}: {e}") from e
        logger.debug("Loaded JSON configuration from %s", origin)

    @property
    def tree(self) -> Any:
        """The decoded document."""
        return self._tree

    # =========================================================================
    # ROOT RESOLUTION
    # =========================================================================

    def find_root(self, cls: type) -> Tuple[str, Any]:
        """
        Find the root node configuring cls.

        Returns:
            (node name, node value)

        Raises:
            ConfigurationError: If no candidate node exists
        """
        root = self._tree if isinstance(self._tree, dict) else {}

        explicit = get_root_name(cls)
        if explicit is not None:
            if explicit not in root:
                raise ConfigurationError(
                    f"Couldn't find configuration for {qualified_name(cls)}, "
                    f"was expecting JSON node named '{explicit}'"
                )
            return explicit, root[explicit]

        for name in (simple_node_name(cls), qualified_name(cls)):
            if name in root:
                return name, root[name]

        raise ConfigurationError(f"Couldn't find configuration for {qualified_name(cls)}")

    def configure(self, *objects: Any) -> None:
        """
        Overlay the document onto each object.

        Every root node is resolved before anything is written, so a missing
        root leaves all objects untouched. Required properties are checked
        once every root has been overlaid, across each root's whole graph.

        Raises:
            ConfigurationError: If a root node is missing or an accessor fails
            MissingRequiredValueError: If a required property was never written
            AccessorError: If a matched property lacks the accessor needed
        """
        resolved: List[Tuple[Any, str, Any]] = []
        for obj in objects:
            name, node = self.find_root(type(obj))
            resolved.append((obj, name, node))

        self._written = set()
        for obj, name, node in resolved:
            kind = node_kind(node)
            if kind is NodeKind.NULL:
                logger.debug("Node '%s' is null, nothing to configure", name)
                continue
            if kind is not NodeKind.OBJECT:
                raise ConfigurationError(
                    f"Configuration node '{name}' for {qualified_name(type(obj))} "
                    f"must be a JSON object, got {kind.value}"
                )
            logger.debug("Configuring %s from node '%s'", qualified_name(type(obj)), name)
            self._overlay(obj, node)

        for obj, _, _ in resolved:
            self._check_required(obj)

    # =========================================================================
    # OVERLAY
    # =========================================================================

    def overlay(self, obj: Any, node: Dict[str, Any]) -> None:
        """Overlay the fields of node onto obj, without root resolution."""
        self._written = set()
        self._overlay(obj, node)
        self._check_required(obj)

    def _overlay(self, obj: Any, node: Dict[str, Any]) -> None:
        descriptor = describe(type(obj))

        for field_name, value in node.items():
            prop = descriptor.find_binding(field_name)
            if prop is not None:
                self._apply(obj, prop, field_name, value)
                continue

            target = self._search(obj, descriptor, field_name) if self.config.search_unmatched else None
            if target is None:
                logger.debug("No property bound to '%s' on %s", field_name, qualified_name(type(obj)))
                continue
            owner, owner_prop = target
            self._apply(owner, owner_prop, field_name, value)

    def _apply(self, obj: Any, prop: PropertyDescriptor, field_name: str, value: Any) -> None:
        kind = node_kind(value)

        if kind is NodeKind.ARRAY:
            raise UnsupportedFieldTypeError(field_name, type(obj))

        if kind is NodeKind.OBJECT:
            child = prop.read(obj)
            if child is None:
                logger.warning(
                    "%s.%s is None, skipping JSON object '%s'",
                    qualified_name(type(obj)), prop.name, field_name,
                )
                return
            if is_leaf_value(child):
                raise UnsupportedFieldTypeError(field_name, type(obj))
            self._overlay(child, value)
            self._written.add((id(obj), prop.name))
            return

        coerced = coerce_scalar(value, prop.declared_type)
        prop.write(obj, coerced)
        self._written.add((id(obj), prop.name))
        if self.binding_logger is not None:
            self.binding_logger.log_write(
                BindingSource.JSON, qualified_name(type(obj)), prop.name, field_name, coerced,
            )

    def _check_required(self, root: Any) -> None:
        """Raise for the first required property in root's graph that nothing wrote."""
        queue = deque([root])
        visited = {id(root)}

        while queue:
            current = queue.popleft()
            descriptor = describe(type(current))
            for prop in descriptor.properties:
                if prop.required and (id(current), prop.name) not in self._written:
                    raise MissingRequiredValueError(prop.binding_name)
            for _, child in structural_children(current, descriptor):
                if id(child) not in visited:
                    visited.add(id(child))
                    queue.append(child)

    def _search(
        self,
        obj: Any,
        descriptor: ClassDescriptor,
        field_name: str,
    ) -> Optional[Tuple[Any, PropertyDescriptor]]:
        """Nearest sub-object with a property bound to field_name; ties go to discovery order."""
        max_depth = self.config.max_search_depth
        queue = deque([(obj, descriptor, 0)])
        visited = {id(obj)}

        while queue:
            current, current_descriptor, depth = queue.popleft()
            if depth >= max_depth:
                continue
            for _, child in structural_children(current, current_descriptor):
                if id(child) in visited:
                    continue
                visited.add(id(child))
                child_descriptor = describe(type(child))
                match = child_descriptor.find_binding(field_name)
                if match is not None:
                    return child, match
                queue.append((child, child_descriptor, depth + 1))

        return None


def simple_node_name(cls: type) -> str:
    """Class name with its first letter lower-cased."""
    name = cls.__name__
    return name[:1].lower() + name[1:]


__all__ = [
    "OverlayConfig",
    "ConfigFileParser",
    "JsonConfigFileParser",
    "simple_node_name",
]
