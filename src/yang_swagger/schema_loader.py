"""Load a validated YANG schema tree from a JSON or YAML document.

The generator does not parse YANG text. Front ends (pyang plugins, yangson,
ODL exporters ...) serialize the validated schema into a plain document that
this module turns into a :class:`~yang_swagger.models.SchemaContext`.

Document layout::

        modules:
          - name: device
            prefix: dev
            description: Device configuration
            typedefs:
              mtu-type: uint32
            groupings:
              - name: common
                children:
                  - {kind: leaf, name: enabled, type: boolean}
            data:
              - kind: container
                name: interfaces
                children:
                  - kind: list
                    name: interface
                    key: name
                    uses: [common]
                    children:
                      - {kind: leaf, name: name, type: string}
                      - kind: leaf
                        name: mtu
                        type: {name: leafref, path: /dev:limits/dev:max-mtu}
            rpcs:
              - name: reset
                input:
                  - {kind: leaf, name: delay, type: uint16}

Loading rules:
* ``config`` follows YANG inheritance: a node without an explicit flag takes
    its parent's effective flag, and nothing below operational state can be
    configuration. Rpc payloads are always treated as writable.
* ``uses`` statements are expanded: the grouping's nodes are copied under the
    using node (after its own children) and re-owned by the using module.
    Each copy remembers its grouping and template node.
* A ``uses`` naming an unknown grouping is logged and skipped; the reference
    stays on the node so later stages can report it too.
* Children of a ``choice`` that are not ``case`` statements are wrapped in an
    implicit case, as YANG's shorthand form allows.
* ``augments`` entries (``{target: /dev:interfaces, children: [...]}``) add
    nodes owned by the augmenting module to another module's tree. Targets are
    absolute, prefixed paths.

Typical usage:
        from pathlib import Path
        from yang_swagger.schema_loader import load_schema

        ctx = load_schema(Path("device.yaml"))
        print([m.name for m in ctx.modules])
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import yaml

from .exceptions import SchemaError
from .models import LeafType, Module, NodeKind, SchemaContext, SchemaNode

logger = logging.getLogger(__name__)

LEAF_KINDS = frozenset({NodeKind.LEAF, NodeKind.LEAF_LIST})


class SchemaLoader:
    """Build a :class:`SchemaContext` from a decoded schema document.

    Example:
        loader = SchemaLoader({"modules": [{"name": "device", "data": []}]})
        ctx = loader.load()
    """

    def __init__(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise SchemaError("Schema document must be a mapping with a 'modules' list")
        self.data = data
        self._explicit_config: Dict[SchemaNode, bool] = {}
        self._expanded: Set[SchemaNode] = set()
        self._expanding: List[str] = []
        self._augments: List[Tuple[str, str, List[SchemaNode]]] = []
        self.ctx = SchemaContext()

    def load(self) -> SchemaContext:
        """Parse every module, expand groupings and resolve config flags.

        Raises:
            SchemaError: If the document declares no modules or contains a
                malformed statement or a circular grouping usage.
        """
        raw_modules = self.data.get("modules")
        if not raw_modules:
            raise SchemaError("Schema document declares no modules")

        self.ctx.modules = [self._build_module(raw) for raw in raw_modules]

        for module in self.ctx.modules:
            for grouping in module.groupings:
                self._expand_grouping(grouping)
            for node in module.data + module.rpcs:
                self._expand(node)
        for module_name, target_path, nodes in self._augments:
            self._apply_augment(module_name, target_path, nodes)

        for module in self.ctx.modules:
            for node in module.groupings + module.data:
                self._propagate_config(node, inherited=True)
            for rpc in module.rpcs:
                for node in rpc.iter_nodes():
                    node.config = True
        return self.ctx

    # ---------------- Internal helpers ---------------- #

    def _build_module(self, raw: Mapping[str, Any]) -> Module:
        name = raw.get("name") if isinstance(raw, Mapping) else None
        if not name:
            raise SchemaError("Encountered module without a name")
        typedefs = {
            typedef_name: self._parse_type(spec, f"typedef {typedef_name}")
            for typedef_name, spec in (raw.get("typedefs") or {}).items()
        }
        for augment in raw.get("augments") or []:
            if not isinstance(augment, Mapping) or not augment.get("target"):
                raise SchemaError(f"augment in module {name} needs a target path")
            nodes = [self._build_node(child, name) for child in augment.get("children") or []]
            self._augments.append((name, augment["target"], nodes))
        return Module(
            name=name,
            prefix=raw.get("prefix", ""),
            namespace=raw.get("namespace"),
            revision=raw.get("revision"),
            description=raw.get("description"),
            data=[self._build_node(n, name) for n in raw.get("data") or []],
            rpcs=[self._build_rpc(r, name) for r in raw.get("rpcs") or []],
            groupings=[
                self._build_node(g, name, kind=NodeKind.GROUPING)
                for g in raw.get("groupings") or []
            ],
            typedefs=typedefs,
        )

    def _build_node(
        self, raw: Any, module: str, kind: Optional[NodeKind] = None
    ) -> SchemaNode:
        if not isinstance(raw, Mapping):
            raise SchemaError(f"Statement in module {module} must be a mapping, got {raw!r}")
        raw_kind = kind or raw.get("kind")
        try:
            node_kind = NodeKind(raw_kind)
        except ValueError:
            raise SchemaError(f"Unknown statement kind '{raw_kind}' in module {module}") from None
        name = raw.get("name")
        if not name:
            raise SchemaError(f"Encountered anonymous {node_kind.value} statement in module {module}")

        children = [self._build_node(child, module) for child in raw.get("children") or []]
        if node_kind == NodeKind.CHOICE:
            children = [
                child
                if child.kind == NodeKind.CASE
                else SchemaNode(NodeKind.CASE, child.name, module, children=[child])
                for child in children
            ]

        leaf_type = None
        if node_kind in LEAF_KINDS:
            if raw.get("type") is None:
                raise SchemaError(f"{node_kind.value} {module}:{name} has no type")
            leaf_type = self._parse_type(raw["type"], f"{module}:{name}")

        node = SchemaNode(
            kind=node_kind,
            name=name,
            module=module,
            description=raw.get("description"),
            children=children,
            keys=_as_list(raw.get("key")),
            type=leaf_type,
            mandatory=bool(raw.get("mandatory", False)),
            uses=_as_list(raw.get("uses")),
        )
        if raw.get("config") is not None:
            self._explicit_config[node] = bool(raw["config"])
        return node

    def _build_rpc(self, raw: Any, module: str) -> SchemaNode:
        if not isinstance(raw, Mapping):
            raise SchemaError(f"rpc in module {module} must be a mapping, got {raw!r}")
        rpc = self._build_node({**raw, "kind": NodeKind.RPC.value}, module)
        for kind in (NodeKind.INPUT, NodeKind.OUTPUT):
            payload = raw.get(kind.value)
            if payload is None:
                continue
            if not isinstance(payload, Mapping):
                payload = {"children": payload}
            rpc.add_child(self._build_node({**payload, "name": kind.value}, module, kind=kind))
        return rpc

    def _parse_type(self, spec: Any, owner: str) -> LeafType:
        if isinstance(spec, str):
            leaf_type = LeafType(name=spec)
        elif isinstance(spec, Mapping) and spec.get("name"):
            leaf_type = LeafType(
                name=spec["name"],
                path=spec.get("path"),
                enum_values=[str(v) for v in spec.get("enum") or []],
            )
        else:
            raise SchemaError(f"Invalid type specification for {owner}: {spec!r}")
        if leaf_type.is_leafref and not leaf_type.path:
            raise SchemaError(f"leafref type of {owner} has no path")
        return leaf_type

    def _expand_grouping(self, grouping: SchemaNode) -> None:
        if grouping in self._expanded:
            return
        if grouping.qname in self._expanding:
            cycle = " -> ".join(self._expanding + [grouping.qname])
            raise SchemaError(f"Circular grouping usage: {cycle}")
        self._expanding.append(grouping.qname)
        self._expand(grouping)
        self._expanding.pop()
        self._expanded.add(grouping)

    def _expand(self, node: SchemaNode) -> None:
        """Expand ``uses`` statements of ``node`` and its descendants in place."""
        for child in list(node.children):
            self._expand(child)
        for ref in node.uses:
            grouping = self.ctx.find_grouping(ref, node.module)
            if grouping is None:
                logger.warning(
                    "No grouping named %s found for %s. Ignoring uses statement.",
                    ref,
                    node.schema_path,
                )
                continue
            self._expand_grouping(grouping)
            for template in grouping.children:
                copy = template.copy_for(node.module, grouping.qname)
                copy.added_by = grouping.qname
                node.add_child(copy)

    def _apply_augment(self, module: str, target_path: str, nodes: List[SchemaNode]) -> None:
        target = self.ctx.find_node(target_path)
        if target is None:
            raise SchemaError(f"augment target {target_path} of module {module} not found")
        for node in nodes:
            self._expand(node)
            target.add_child(node)
        logger.debug("module %s augments %s with %d nodes", module, target.schema_path, len(nodes))

    def _explicit(self, node: SchemaNode) -> Optional[bool]:
        current: Optional[SchemaNode] = node
        while current is not None:
            if current in self._explicit_config:
                return self._explicit_config[current]
            current = current.original
        return None

    def _propagate_config(self, node: SchemaNode, inherited: bool) -> None:
        explicit = self._explicit(node)
        if explicit and not inherited:
            logger.warning(
                "%s declares config true under operational state; treating it as read-only",
                node.schema_path,
            )
        node.config = inherited and (explicit if explicit is not None else True)
        for child in node.children:
            self._propagate_config(child, node.config)


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return [str(v) for v in value]


def schema_from_dict(data: Mapping[str, Any]) -> SchemaContext:
    """Convenience wrapper around :class:`SchemaLoader`."""
    return SchemaLoader(data).load()


def load_schema(path: Path) -> SchemaContext:
    """Read a JSON or YAML schema document from disk.

    Args:
        path: File ending in ``.json``, ``.yaml`` or ``.yml``.

    Returns:
        The loaded :class:`SchemaContext`.

    Raises:
        SchemaError: If the file cannot be decoded or describes an invalid tree.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SchemaError(f"Cannot decode schema document {path}: {exc}") from exc
    return schema_from_dict(data or {})
