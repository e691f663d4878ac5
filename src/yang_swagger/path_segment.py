"""Immutable path context used while walking a module.

Every container, list or rpc visited by the walker extends the current
:class:`PathSegment` with :meth:`PathSegment.push`. The result is a new
segment linked to its predecessor; the predecessor is never modified, so
returning to it (``segment.parent`` / ``segment.drop()``) is all it takes to
leave a subtree. Siblings therefore never observe each other's segments.

Example:
        root = PathSegment.root("device")
        interfaces = root.push("interfaces")
        interface = interfaces.push("interface", list_keys=("name",))
        interface.path()         # '/device:interfaces/interface={name}'
        interface.drop() is interfaces  # True
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Optional, Set, Tuple


class PathParameter(NamedTuple):
    name: str
    key: str
    segment: "PathSegment"


@dataclass(frozen=True, eq=False)
class PathSegment:
    """One level of the generated path hierarchy.

    Attributes:
        name: Local name of the data node (``None`` for the module root).
        module: Module owning the node.
        read_only: Local operational-state flag. Use :attr:`is_read_only`
            for the effective value, which also honours every ancestor.
        list_keys: Key leaf names when the segment addresses a list entry.
        parent: Enclosing segment, ``None`` for the module root.
    """

    name: Optional[str] = None
    module: Optional[str] = None
    read_only: bool = False
    list_keys: Tuple[str, ...] = ()
    parent: Optional["PathSegment"] = field(default=None, repr=False)

    @classmethod
    def root(cls, module: str) -> "PathSegment":
        return cls(module=module)

    def push(
        self,
        name: str,
        module: Optional[str] = None,
        read_only: bool = False,
        list_keys: Iterable[str] = (),
    ) -> "PathSegment":
        return PathSegment(
            name=name,
            module=module or self.module,
            read_only=read_only,
            list_keys=tuple(list_keys),
            parent=self,
        )

    def drop(self) -> Optional["PathSegment"]:
        return self.parent

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_read_only(self) -> bool:
        return any(segment.read_only for segment in self._lineage())

    @property
    def depth(self) -> int:
        return len(self.chain())

    def chain(self) -> List["PathSegment"]:
        """Non-root segments from the top of the module down to this one."""
        return [segment for segment in reversed(self._lineage()) if not segment.is_root]

    def path(self) -> str:
        return self._render()[0]

    def parameters(self) -> List[PathParameter]:
        return self._render()[1]

    def _lineage(self) -> List["PathSegment"]:
        segments: List[PathSegment] = []
        segment: Optional[PathSegment] = self
        while segment is not None:
            segments.append(segment)
            segment = segment.parent
        return segments

    def _render(self) -> Tuple[str, List[PathParameter]]:
        used: Set[str] = set()
        parts: List[str] = []
        parameters: List[PathParameter] = []
        previous_module: Optional[str] = None
        for segment in self.chain():
            label = segment.name if segment.module == previous_module else f"{segment.module}:{segment.name}"
            previous_module = segment.module
            if segment.list_keys:
                names = []
                for key in segment.list_keys:
                    parameter = key if key not in used else f"{segment.name}-{key}"
                    suffix = 1
                    while parameter in used:
                        suffix += 1
                        parameter = f"{segment.name}-{key}{suffix}"
                    used.add(parameter)
                    parameters.append(PathParameter(parameter, key, segment))
                    names.append("{" + parameter + "}")
                label = f"{label}={','.join(names)}"
            parts.append(label)
        return "/" + "/".join(parts), parameters
