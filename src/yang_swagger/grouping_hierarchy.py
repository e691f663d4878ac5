"""Grouping name disambiguation and the grouping "used-by" hierarchy.

Groupings become shared Swagger definitions under the optimizing strategy, so
they need names that are unique across the whole schema and the builder needs
to know how groupings include each other.

Naming:
    A grouping keeps its local name when no other grouping anywhere in the
    schema has the same local name; otherwise it is qualified as
    ``module:local``. Collisions are a whole-schema property, so all names are
    computed up front before any of them is handed out.

Hierarchy:
    Every grouping gets a :class:`HierarchyNode` keyed by its qualified name.
    A ``uses`` on a grouping statement records the used grouping as one of the
    node's parents. Ancestor queries walk parents iteratively with a visited
    set, so an (illegal) circular usage cannot hang the generator.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Set

from .models import SchemaContext, SchemaNode

logger = logging.getLogger(__name__)


@dataclass
class HierarchyNode:
    qname: str
    display_name: str
    parents: Set[str] = field(default_factory=set)

    def add_parent(self, qname: str) -> None:
        self.parents.add(qname)


class GroupingHierarchy:
    """Answer naming and ancestry questions about the schema's groupings.

    Example:
        hierarchy = GroupingHierarchy(ctx)
        hierarchy.display_name("device:common")   # 'common' or 'device:common'
        hierarchy.is_ancestor_of("base:id", "device:common")
    """

    def __init__(self, ctx: SchemaContext) -> None:
        self.ctx = ctx
        self._names = self.compute_names()
        self._hierarchy = self.build_hierarchy()

    def compute_names(self) -> Dict[str, str]:
        """Map every grouping qname to its display name."""
        groupings = self.ctx.groupings()
        by_local: Dict[str, Set[str]] = defaultdict(set)
        for grouping in groupings:
            by_local[grouping.name].add(grouping.qname)

        names: Dict[str, str] = {}
        for grouping in groupings:
            if len(by_local[grouping.name]) < 2:
                names[grouping.qname] = grouping.name
            else:
                names[grouping.qname] = grouping.qname
        return names

    def build_hierarchy(self) -> Dict[str, HierarchyNode]:
        result = {
            grouping.qname: HierarchyNode(grouping.qname, self._names[grouping.qname])
            for grouping in self.ctx.groupings()
        }
        for grouping in self.ctx.groupings():
            node = result[grouping.qname]
            for ref in grouping.uses:
                target = self.ctx.find_grouping(ref, grouping.module)
                if target is None or target.qname not in result:
                    logger.warning(
                        "Hierarchy creation problem. No grouping with name %s found. Ignoring hierarchy relation.",
                        ref,
                    )
                    continue
                node.add_parent(target.qname)
        return result

    def grouping_name(self, grouping: SchemaNode) -> str:
        return self.display_name(grouping.qname)

    def display_name(self, qname: str) -> str:
        return self._names.get(qname, qname)

    def parents_of(self, qname: str) -> List[str]:
        node = self._hierarchy.get(qname)
        return sorted(node.parents) if node is not None else []

    def is_ancestor_of(self, candidate: str, qname: str) -> bool:
        """True when grouping ``qname`` transitively uses ``candidate``.

        Unknown groupings are logged and reported as not related.
        """
        node = self._hierarchy.get(qname)
        if node is None:
            logger.warning("Node not found for name %s", qname)
            return False

        visited: Set[str] = {qname}
        pending = list(node.parents)
        while pending:
            current = pending.pop()
            if current == candidate:
                return True
            if current in visited:
                continue
            visited.add(current)
            parent = self._hierarchy.get(current)
            if parent is not None:
                pending.extend(parent.parents)
        return False
