"""Core data structures describing an already-validated YANG schema.

These lightweight dataclasses are produced by :mod:`yang_swagger.schema_loader`
(or by any other front end able to parse and validate YANG) and consumed by the
generator. They intentionally avoid framework dependencies so they can be
built by hand in tests or by foreign tooling.

Overview:
        * ``SchemaNode`` forms a tree mirroring the YANG statement hierarchy
            (containers, lists, leaves, choices, groupings, rpcs ...). Each node
            records its owning module, its effective ``config`` flag and, for
            leaves, a :class:`LeafType`.
        * ``Module`` groups the top-level data nodes, rpcs, groupings and
            typedefs declared by one YANG module.
        * ``SchemaContext`` is the whole validated schema: every module that
            can be referenced, including those that are not generated.

Typical construction (simplified)::

        from yang_swagger.models import LeafType, Module, NodeKind, SchemaContext, SchemaNode

        name = SchemaNode(NodeKind.LEAF, "name", "device", type=LeafType("string"))
        interface = SchemaNode(NodeKind.LIST, "interface", "device", keys=["name"], children=[name])
        interfaces = SchemaNode(NodeKind.CONTAINER, "interfaces", "device", children=[interface])
        ctx = SchemaContext([Module("device", data=[interfaces])])

Design notes:
        * Nodes expanded from a ``uses`` statement are copies of the grouping's
            nodes. ``added_by`` names the grouping that supplied a node to its
            parent, ``source`` names the grouping whose expansion produced the
            copy and ``original`` points back at the template node. Data object
            builders rely on this provenance to decide what can be shared.
        * ``choice`` and ``case`` nodes stay in the tree; helpers such as
            :meth:`SchemaNode.data_children` look through them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class NodeKind(str, Enum):
    CONTAINER = "container"
    LIST = "list"
    LEAF = "leaf"
    LEAF_LIST = "leaf-list"
    CHOICE = "choice"
    CASE = "case"
    ANYDATA = "anydata"
    GROUPING = "grouping"
    RPC = "rpc"
    INPUT = "input"
    OUTPUT = "output"


STRUCTURAL_KINDS = frozenset({NodeKind.CONTAINER, NodeKind.LIST})
TRANSPARENT_KINDS = frozenset({NodeKind.CHOICE, NodeKind.CASE})
PAYLOAD_KINDS = frozenset({NodeKind.INPUT, NodeKind.OUTPUT})

_PREDICATE = re.compile(r"\[[^\]]*\]")


@dataclass
class LeafType:
    """Declared type of a leaf or leaf-list.

    Attributes:
        name: YANG built-in type (``string``, ``uint32``, ``leafref`` ...) or
            the name of a typedef, optionally prefixed (``types:percent``).
        path: Target path when ``name`` is ``leafref``.
        enum_values: Allowed values for ``enumeration`` types.
    """

    name: str
    path: Optional[str] = None
    enum_values: List[str] = field(default_factory=list)

    @property
    def is_leafref(self) -> bool:
        return self.name == "leafref"


@dataclass(eq=False)
class SchemaNode:
    """One statement of the validated schema tree.

    Nodes compare by identity so they can key dictionaries during generation.

    Attributes:
        kind: Statement kind.
        name: Local name.
        module: Name of the module owning the node (for expanded groupings,
            the module where the ``uses`` statement occurs).
        config: Effective configuration flag; ``False`` marks operational state.
        description: Optional documentation.
        children: Child statements in declaration order.
        keys: Key leaf names for lists.
        type: Declared type for leaves and leaf-lists.
        mandatory: Whether the leaf is mandatory.
        uses: Grouping references declared directly on this node.
        added_by: Grouping that supplied this node to its parent.
        source: Grouping whose expansion produced this copy.
        original: Template node this copy was produced from.
        type_module: Module whose typedefs the node's type refers to. Set on
            expanded copies to the module defining the grouping.
        parent: Enclosing node (``None`` for top-level statements).
    """

    kind: NodeKind
    name: str
    module: str
    config: bool = True
    description: Optional[str] = None
    children: List["SchemaNode"] = field(default_factory=list)
    keys: List[str] = field(default_factory=list)
    type: Optional[LeafType] = None
    mandatory: bool = False
    uses: List[str] = field(default_factory=list)
    added_by: Optional[str] = None
    source: Optional[str] = None
    original: Optional["SchemaNode"] = field(default=None, repr=False)
    type_module: Optional[str] = None
    parent: Optional["SchemaNode"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.kind = NodeKind(self.kind)
        for child in self.children:
            child.parent = self

    @property
    def qname(self) -> str:
        return f"{self.module}:{self.name}"

    @property
    def schema_path(self) -> str:
        """Slash separated qualified names from the top-level statement."""
        names: List[str] = []
        node: Optional[SchemaNode] = self
        while node is not None:
            names.append(node.qname)
            node = node.parent
        return "/" + "/".join(reversed(names))

    @property
    def typedef_module(self) -> str:
        return self.type_module or self.module

    @property
    def is_structural(self) -> bool:
        return self.kind in STRUCTURAL_KINDS

    def add_child(self, child: "SchemaNode") -> None:
        child.parent = self
        self.children.append(child)

    def iter_nodes(self) -> List["SchemaNode"]:
        """Return a depth-first list of this node and all descendants."""
        nodes: List[SchemaNode] = [self]
        for child in self.children:
            nodes.extend(child.iter_nodes())
        return nodes

    def data_children(self) -> List["SchemaNode"]:
        """Children as they appear in instance data, looking through choice/case."""
        result: List[SchemaNode] = []
        for child in self.children:
            if child.kind in TRANSPARENT_KINDS:
                result.extend(child.data_children())
            else:
                result.append(child)
        return result

    def find_child(self, name: str) -> Optional["SchemaNode"]:
        return _find_in(self.children, name)

    def data_parent(self) -> Optional["SchemaNode"]:
        node = self.parent
        while node is not None and node.kind in TRANSPARENT_KINDS:
            node = node.parent
        return node

    def in_grouping(self) -> bool:
        node: Optional[SchemaNode] = self
        while node is not None:
            if node.kind == NodeKind.GROUPING:
                return True
            node = node.parent
        return False

    def supplier_chain(self) -> List[str]:
        """Groupings that supplied this node to its parent, outermost first.

        A node copied into ``N`` from grouping ``G``, where ``G`` itself got the
        node from ``H``, yields ``[G, H]``.
        """
        chain: List[str] = []
        node: Optional[SchemaNode] = self
        while node is not None and node.added_by is not None:
            chain.append(node.added_by)
            node = node.original
        return chain

    def copy_for(self, module: str, source: str) -> "SchemaNode":
        """Deep copy produced by expanding grouping ``source`` inside ``module``."""
        return SchemaNode(
            kind=self.kind,
            name=self.name,
            module=module,
            config=self.config,
            description=self.description,
            children=[child.copy_for(module, source) for child in self.children],
            keys=list(self.keys),
            type=self.type,
            mandatory=self.mandatory,
            uses=list(self.uses),
            added_by=self.added_by,
            source=source,
            original=self,
            type_module=self.typedef_module,
        )


@dataclass
class Module:
    """A YANG module: its top-level statements plus identifying metadata."""

    name: str
    prefix: str = ""
    namespace: Optional[str] = None
    revision: Optional[str] = None
    description: Optional[str] = None
    data: List[SchemaNode] = field(default_factory=list)
    rpcs: List[SchemaNode] = field(default_factory=list)
    groupings: List[SchemaNode] = field(default_factory=list)
    typedefs: Dict[str, LeafType] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.prefix:
            self.prefix = self.name

    def find_data_node(self, name: str) -> Optional[SchemaNode]:
        return _find_in(self.data, name)


@dataclass
class SchemaContext:
    """Every module of a validated schema.

    Lookups accept either a module name or a module prefix wherever YANG
    allows a prefix (grouping references, typedef references, leafref paths).
    """

    modules: List[Module] = field(default_factory=list)

    def find_module(self, name: str) -> Optional[Module]:
        for module in self.modules:
            if module.name == name:
                return module
        return None

    def find_module_by_prefix(self, prefix: str) -> Optional[Module]:
        module = self.find_module(prefix)
        if module is not None:
            return module
        for candidate in self.modules:
            if candidate.prefix == prefix:
                return candidate
        return None

    def groupings(self) -> List[SchemaNode]:
        """All groupings declared anywhere in the schema, in module order."""
        return [grouping for module in self.modules for grouping in module.groupings]

    def find_grouping(self, ref: str, module: str) -> Optional[SchemaNode]:
        """Resolve a ``uses`` argument as written inside ``module``."""
        target, name = self._split(ref, module)
        if target is None:
            return None
        for grouping in target.groupings:
            if grouping.name == name:
                return grouping
        return None

    def find_typedef(self, ref: str, module: str) -> Optional[LeafType]:
        target, name = self._split(ref, module)
        if target is None:
            return None
        return target.typedefs.get(name)

    def find_node(self, path: str, context: Optional[SchemaNode] = None) -> Optional[SchemaNode]:
        """Resolve a leafref style path.

        Absolute paths start at the module top level; relative paths are
        evaluated from ``context``. Key predicates are ignored and choice/case
        statements are looked through.
        """
        cleaned = _PREDICATE.sub("", path).strip()
        current: Optional[SchemaNode]
        if cleaned.startswith("/"):
            current = None
        else:
            if context is None:
                return None
            current = context
        default_module = context.module if context is not None else None

        for step in cleaned.split("/"):
            step = step.strip()
            if step in ("", "."):
                continue
            if step == "..":
                current = current.data_parent() if current is not None else None
                if current is None:
                    return None
                continue
            prefix, _, name = step.rpartition(":")
            if current is None:
                module_name = prefix or default_module
                module = self.find_module_by_prefix(module_name) if module_name else None
                if module is None:
                    return None
                current = _find_in(module.data + module.rpcs, name)
            else:
                current = current.find_child(name)
            if current is None:
                return None
        return current

    def _split(self, ref: str, module: str) -> Tuple[Optional[Module], str]:
        prefix, _, name = ref.rpartition(":")
        target = self.find_module_by_prefix(prefix) if prefix else self.find_module(module)
        return target, name


def _find_in(nodes: List[SchemaNode], name: str) -> Optional[SchemaNode]:
    for node in nodes:
        if node.kind in TRANSPARENT_KINDS:
            match = _find_in(node.children, name)
            if match is not None:
                return match
        elif node.name == name:
            return node
    return None
