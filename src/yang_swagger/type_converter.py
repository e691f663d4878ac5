"""Convert YANG leaf types into Swagger properties.

Built-in YANG types map onto Swagger primitive types; typedefs are resolved
through their base chain; ``leafref`` leaves take the type of the leaf they
point at. The converter follows chained leafrefs until it reaches a concrete
type and annotates the resulting property with ``x-path`` so consumers keep
the link to the referenced leaf.

A leafref that cannot be resolved is a defect in the input schema and raises
:class:`~yang_swagger.exceptions.LeafrefResolutionError` instead of guessing.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set, Tuple

from .document import Property
from .exceptions import LeafrefResolutionError
from .models import LeafType, NodeKind, SchemaContext, SchemaNode

logger = logging.getLogger(__name__)

# YANG built-in -> (swagger type, swagger format)
BUILTIN_TYPES: Dict[str, Tuple[str, Optional[str]]] = {
    "int8": ("integer", "int32"),
    "int16": ("integer", "int32"),
    "int32": ("integer", "int32"),
    "uint8": ("integer", "int32"),
    "uint16": ("integer", "int32"),
    "int64": ("integer", "int64"),
    "uint32": ("integer", "int64"),
    "uint64": ("integer", "int64"),
    "decimal64": ("number", "double"),
    "boolean": ("boolean", None),
    "empty": ("boolean", None),
    "binary": ("string", "byte"),
    "string": ("string", None),
    "enumeration": ("string", None),
    "bits": ("string", None),
    "identityref": ("string", None),
    "instance-identifier": ("string", None),
    "union": ("string", None),
    "leafref": ("string", None),
}

LEAFREF_EXTENSION = "x-path"


class AnnotatingTypeConverter:
    """Turn leaves and leaf-lists into :class:`Property` objects."""

    def __init__(self, ctx: SchemaContext) -> None:
        self.ctx = ctx

    def convert(self, leaf: SchemaNode) -> Property:
        """Build the property for ``leaf``.

        Raises:
            LeafrefResolutionError: If ``leaf`` (directly or through a chain of
                leafrefs) points at a leaf that does not exist.
        """
        if leaf.type is None:
            raise LeafrefResolutionError(f"{leaf.schema_path} has no declared type", leaf.schema_path)

        reference, _ = self._effective(leaf.type, leaf.typedef_module)
        try:
            leaf_type, enum_values = self._resolve_leafref(leaf)
        except LeafrefResolutionError:
            if not leaf.in_grouping():
                raise
            # relative paths of a grouping body only resolve at its usage sites
            logger.warning("Cannot resolve leafref %s inside grouping, using string", leaf.schema_path)
            leaf_type, enum_values = LeafType("string"), []
        swagger_type, swagger_format = BUILTIN_TYPES.get(leaf_type.name, ("string", None))
        prop = Property(type=swagger_type, format=swagger_format, enum=enum_values)
        extensions = {LEAFREF_EXTENSION: reference.path} if reference.is_leafref else {}

        if leaf.kind == NodeKind.LEAF_LIST:
            prop = Property(type="array", items=prop)
        prop.extensions = extensions
        prop.description = leaf.description
        prop.read_only = not leaf.config
        return prop

    def _resolve_leafref(self, leaf: SchemaNode) -> Tuple[LeafType, List[str]]:
        """Follow a leafref chain down to a concrete type."""
        current = leaf
        leaf_type, enum_values = self._effective(leaf.type, leaf.typedef_module)
        visited: Set[SchemaNode] = set()
        while leaf_type.is_leafref:
            if current in visited:
                raise LeafrefResolutionError(
                    f"Circular leafref chain starting at {leaf.schema_path}", leaf_type.path or ""
                )
            visited.add(current)
            target = self.ctx.find_node(leaf_type.path or "", current)
            if target is None or target.type is None:
                raise LeafrefResolutionError(
                    f"Cannot resolve leafref path {leaf_type.path} of {current.schema_path}",
                    leaf_type.path or "",
                )
            logger.debug("leafref %s resolved to %s", leaf_type.path, target.schema_path)
            current = target
            leaf_type, enum_values = self._effective(target.type, target.typedef_module)
        return leaf_type, enum_values

    def _effective(self, leaf_type: LeafType, module: str) -> Tuple[LeafType, List[str]]:
        """Resolve typedefs until a built-in type is reached.

        Returns the built-in (or unknown) type together with the first
        enumeration found along the chain.
        """
        seen: Set[Tuple[str, str]] = set()
        current = leaf_type
        enum_values = list(leaf_type.enum_values)
        while current.name not in BUILTIN_TYPES:
            if (module, current.name) in seen:
                logger.warning("Circular typedef %s in module %s, using string", current.name, module)
                return LeafType("string"), enum_values
            seen.add((module, current.name))
            typedef = self.ctx.find_typedef(current.name, module)
            if typedef is None:
                logger.debug("Unknown type %s in module %s, using string", current.name, module)
                return LeafType("string"), enum_values
            prefix, _, _ = current.name.rpartition(":")
            if prefix:
                found = self.ctx.find_module_by_prefix(prefix)
                module = found.name if found is not None else module
            current = typedef
            enum_values = enum_values or list(typedef.enum_values)
        return current, enum_values
