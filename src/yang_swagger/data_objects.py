"""Build Swagger definitions for containers, lists and rpc payloads.

Two strategies share the :class:`DataObjectBuilder` contract:

* :class:`UnpackingDataObjectBuilder` inlines every field, including those
  coming from groupings. Each definition stands alone; nothing references a
  grouping.
* :class:`OptimizingDataObjectBuilder` turns groupings used at two or more
  places into definitions of their own. Usage sites reference the grouping
  definition (``$ref`` or ``allOf``) and only inline the fields that are
  truly local. A grouping used once is inlined, so schemas without shared
  groupings come out exactly as with the unpacking strategy.

Contract:
    ``process_module`` is a pre-pass run for every generated module before the
    walk; it only records grouping usage. ``add_model`` registers (or reuses)
    the definition of a node and returns its name. The walker calls it
    post-order, so a node's in-bound children are always registered before
    the node itself. ``reference`` hands out a property pointing at a node's
    definition; it may be called before the definition exists and is
    completed once ``add_model`` runs for that node.

Naming:
    Definitions are named after the node (``interface``), then the parent
    (``interfaces.interface``), then the module (``device.interface``), then a
    numeric suffix. A name whose existing definition is structurally equal is
    reused, so identical patterns collapse into one definition.

Read-only content:
    Grouping templates carry the flags of the grouping body. A site holding
    operational state (``config false``) never shares a writable grouping
    definition; its fields are inlined with their ``readOnly`` marks.

Depth:
    With a ``max_depth`` bound, a structural node of a grouping body only gets
    a definition when one of its copies lies within the bound. Otherwise the
    grouping definition shows it as an untyped object.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set

from .document import ComposedModel, Model, ObjectModel, Property, RefModel, SwaggerDocument
from .exceptions import SchemaError
from .grouping_hierarchy import GroupingHierarchy
from .models import PAYLOAD_KINDS, Module, NodeKind, SchemaContext, SchemaNode
from .type_converter import AnnotatingTypeConverter

logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    OPTIMIZING = "optimizing"
    UNPACKING = "unpacking"


class DataObjectBuilder(ABC):
    """Shared machinery of both strategies."""

    def __init__(
        self,
        ctx: SchemaContext,
        document: SwaggerDocument,
        converter: AnnotatingTypeConverter,
        hierarchy: Optional[GroupingHierarchy] = None,
        max_depth: Optional[int] = None,
    ) -> None:
        self.ctx = ctx
        self.document = document
        self.converter = converter
        self.hierarchy = hierarchy or GroupingHierarchy(ctx)
        self.max_depth = max_depth
        self._names: Dict[SchemaNode, str] = {}
        self._pending: Dict[SchemaNode, List[Property]] = defaultdict(list)
        self._in_progress: Set[SchemaNode] = set()
        self._usages: Dict[str, int] = defaultdict(int)
        self._groupings_counted = False
        self._processed: Set[str] = set()
        self._copies: Dict[SchemaNode, List[SchemaNode]] = defaultdict(list)
        self._payload_templates: Set[SchemaNode] = set()

    # ---------------- Contract ---------------- #

    def process_module(self, module: Module) -> None:
        """Record how often each grouping is used by ``module`` (and by groupings)."""
        if not self._groupings_counted:
            for grouping in self.ctx.groupings():
                for node in grouping.iter_nodes():
                    self._count_uses(node)
            self._groupings_counted = True
        self._processed.add(module.name)
        for top in module.data + module.rpcs:
            for node in top.iter_nodes():
                self._count_uses(node)
                self._record_copy(node, in_payload=top.kind == NodeKind.RPC)

    def add_model(self, node: SchemaNode) -> str:
        """Register the definition of ``node`` and return its name."""
        target = self.canonical(node)
        name = self._names.get(target)
        if name is None:
            self._in_progress.add(target)
            try:
                model = self.build_model(target)
            finally:
                self._in_progress.discard(target)
            name = self._register(target, model)
        self._names[node] = name
        for prop in self._pending.pop(node, []):
            prop.ref = name
        return name

    def reference(self, node: SchemaNode) -> Property:
        """Property referencing the definition of ``node``."""
        name = self.definition_name(node)
        prop = Property(ref=name)
        if name is None:
            self._pending[node].append(prop)
        return prop

    def definition_name(self, node: SchemaNode) -> Optional[str]:
        return self._names.get(node) or self._names.get(self.canonical(node))

    def usage_count(self, qname: str) -> int:
        return self._usages.get(qname, 0)

    @abstractmethod
    def build_model(self, node: SchemaNode) -> Model:
        """Model holding the fields of ``node``."""

    def canonical(self, node: SchemaNode) -> SchemaNode:
        """Node whose definition stands for ``node``."""
        return node

    # ---------------- Field generation ---------------- #

    def property_for(self, child: SchemaNode) -> Optional[Property]:
        if child.kind in (NodeKind.LEAF, NodeKind.LEAF_LIST):
            return self.converter.convert(child)
        if child.kind == NodeKind.ANYDATA:
            return Property(type="object", description=child.description, read_only=not child.config)
        if not child.is_structural:
            return None

        name = self._structural_ref(child)
        item = Property(ref=name) if name is not None else Property(type="object")
        prop = Property(type="array", items=item) if child.kind == NodeKind.LIST else item
        if prop.ref is None:
            prop.description = child.description
            prop.read_only = not child.config
        return prop

    def object_model(self, node: SchemaNode, fields: List[SchemaNode]) -> ObjectModel:
        properties: Dict[str, Property] = {}
        required: List[str] = []
        for child in fields:
            prop = self.property_for(child)
            if prop is None:
                continue
            properties[child.name] = prop
            if child.mandatory or child.name in node.keys:
                required.append(child.name)
        return ObjectModel(properties=properties, required=required, description=node.description)

    def _structural_ref(self, child: SchemaNode) -> Optional[str]:
        name = self.definition_name(child)
        if name is not None:
            return name
        if _walked_by_generator(self.canonical(child)):
            logger.debug("%s was not visited, emitting an untyped object", child.schema_path)
            return None
        if self.canonical(child) in self._in_progress:
            logger.warning("%s contains itself, emitting an untyped object", child.schema_path)
            return None
        if not self._within_bound(self.canonical(child)):
            logger.debug("%s only occurs beyond the maximum depth, emitting an untyped object", child.schema_path)
            return None
        # grouping bodies and rpc payloads are never walked; build them on demand
        return self.add_model(child)

    # ---------------- Naming ---------------- #

    def _register(self, node: SchemaNode, model: Model) -> str:
        for candidate in self._candidate_names(node):
            existing = self.document.definitions.get(candidate)
            if existing is None:
                self.document.add_definition(candidate, model)
                logger.debug("registered definition %s for %s", candidate, node.schema_path)
                break
            if existing == model:
                logger.debug("reusing definition %s for %s", candidate, node.schema_path)
                break
        self._names[node] = candidate
        return candidate

    def _candidate_names(self, node: SchemaNode) -> Iterator[str]:
        if node.kind == NodeKind.GROUPING:
            names = [self.hierarchy.grouping_name(node)]
        elif node.kind in PAYLOAD_KINDS and node.parent is not None:
            rpc = node.parent
            names = [f"{rpc.name}.{node.name}", f"{rpc.module}.{rpc.name}.{node.name}"]
        else:
            names = [node.name]
            parent = node.data_parent()
            if parent is not None and parent.kind != NodeKind.GROUPING:
                names.append(f"{parent.name}.{node.name}")
            names.append(f"{node.module}.{node.name}")
        yield from names
        suffix = 1
        while True:
            yield f"{names[-1]}{suffix}"
            suffix += 1

    def _count_uses(self, node: SchemaNode) -> None:
        if node.original is not None:
            return
        for ref in node.uses:
            grouping = self.ctx.find_grouping(ref, node.module)
            if grouping is not None:
                self._usages[grouping.qname] += 1

    def _record_copy(self, node: SchemaNode, in_payload: bool) -> None:
        template = node.original
        while template is not None:
            if in_payload:
                self._payload_templates.add(template)
            else:
                self._copies[template].append(node)
            template = template.original

    def _within_bound(self, template: SchemaNode) -> bool:
        if self.max_depth is None or template in self._payload_templates:
            return True
        return any(
            copy.module in self._processed
            and _level(copy) <= self.max_depth
            and self.canonical(copy) is template
            for copy in self._copies.get(template, ())
        )

    def _grouping(self, qname: str) -> SchemaNode:
        module, _, name = qname.partition(":")
        grouping = self.ctx.find_grouping(name, module)
        if grouping is None:
            raise SchemaError(f"grouping {qname} disappeared from the schema context")
        return grouping


class UnpackingDataObjectBuilder(DataObjectBuilder):
    """Inline every field; no definition references a grouping."""

    def build_model(self, node: SchemaNode) -> Model:
        return self.object_model(node, node.data_children())


class OptimizingDataObjectBuilder(DataObjectBuilder):
    """Emit shared groupings once and reference them from every usage site."""

    def is_shared(self, qname: str) -> bool:
        return self.usage_count(qname) > 1

    def canonical(self, node: SchemaNode) -> SchemaNode:
        target = node
        current = node
        while current.original is not None:
            if (
                current.source is not None
                and self.is_shared(current.source)
                and current.original.config == node.config
            ):
                target = current.original
            current = current.original
        return target

    def build_model(self, node: SchemaNode) -> Model:
        referenced: List[str] = []
        local: List[SchemaNode] = []
        for child in node.data_children():
            owner = self._shared_supplier(child, node)
            if owner is None:
                local.append(child)
            elif owner not in referenced:
                referenced.append(owner)

        # a grouping already included by another referenced grouping adds nothing
        referenced = [
            qname
            for qname in referenced
            if not any(
                other != qname and self.hierarchy.is_ancestor_of(qname, other)
                for other in referenced
            )
        ]
        if not referenced:
            return self.object_model(node, local)

        parts: List = [RefModel(self._grouping_definition(qname)) for qname in referenced]
        if not local and len(parts) == 1:
            return parts[0]
        if local:
            parts.append(self.object_model(node, local))
        return ComposedModel(all_of=parts, description=node.description)

    def _shared_supplier(self, child: SchemaNode, site: SchemaNode) -> Optional[str]:
        for qname in child.supplier_chain():
            # operational sites keep their own read-only copy of the fields
            if self.is_shared(qname) and self._grouping(qname).config == site.config:
                return qname
        return None

    def _grouping_definition(self, qname: str) -> str:
        return self.add_model(self._grouping(qname))


def _walked_by_generator(node: SchemaNode) -> bool:
    top = node
    while top.parent is not None:
        top = top.parent
    return top.kind not in (NodeKind.GROUPING, NodeKind.RPC)


def _level(node: SchemaNode) -> int:
    """Walk level of ``node``: 1 for top-level statements, cases excluded."""
    level = 1
    parent = node.parent
    while parent is not None:
        if parent.kind != NodeKind.CASE:
            level += 1
        parent = parent.parent
    return level


def create_builder(
    strategy: Strategy,
    ctx: SchemaContext,
    document: SwaggerDocument,
    converter: AnnotatingTypeConverter,
    hierarchy: Optional[GroupingHierarchy] = None,
    max_depth: Optional[int] = None,
) -> DataObjectBuilder:
    """Instantiate the builder implementing ``strategy``."""
    if Strategy(strategy) == Strategy.OPTIMIZING:
        return OptimizingDataObjectBuilder(ctx, document, converter, hierarchy, max_depth)
    return UnpackingDataObjectBuilder(ctx, document, converter, hierarchy, max_depth)
