"""RFC 8040 (RESTCONF) path emission.

The walker hands every container, list and rpc together with its
:class:`~yang_swagger.path_segment.PathSegment` to a :class:`PathHandler`,
which appends operations to the document:

========================  =========================================
Node                      Operations
========================  =========================================
configuration data        ``get``, ``put``, ``post``, ``delete``
operational data          ``get``
rpc                       ``post`` under ``/operations``
========================  =========================================

Data paths live under ``/data`` and use RESTCONF addressing, e.g.
``/data/device:interfaces/interface={name}``. Bodies and responses reference
the node's definition through the data object builder.

Tags are produced by pluggable :class:`TagGenerator` objects; the default
tags operations with the top-level data node they belong to.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Protocol

from .data_objects import DataObjectBuilder
from .document import Operation, Parameter, Property, Response, SwaggerDocument
from .models import Module, NodeKind, SchemaNode
from .path_segment import PathSegment
from .type_converter import AnnotatingTypeConverter

DATA_ROOT = "/data"
OPERATIONS_ROOT = "/operations"


class TagGenerator(Protocol):
    def tags(self, segment: PathSegment) -> List[str]:
        ...


class SegmentTagGenerator:
    """Tag with the name of the top-level data node (or rpc)."""

    def tags(self, segment: PathSegment) -> List[str]:
        chain = segment.chain()
        return [chain[0].name] if chain else []


class ModuleTagGenerator:
    """Tag with the module owning the top-level segment."""

    def tags(self, segment: PathSegment) -> List[str]:
        chain = segment.chain()
        return [chain[0].module] if chain else []


def operation_id(method: str, segment: PathSegment) -> str:
    chain = segment.chain()
    parts = [method] + ([chain[0].module] if chain else []) + [s.name for s in chain]
    return re.sub(r"[^0-9A-Za-z]+", "_", "_".join(parts))


class PathHandler:
    """Emit operations for the nodes of one module."""

    def __init__(
        self,
        module: Module,
        document: SwaggerDocument,
        data_objects: DataObjectBuilder,
        converter: AnnotatingTypeConverter,
        tag_generators: List[TagGenerator],
    ) -> None:
        self.module = module
        self.document = document
        self.data_objects = data_objects
        self.converter = converter
        self.tag_generators = tag_generators
        self._nodes: Dict[PathSegment, SchemaNode] = {}

    def path(self, node: SchemaNode, segment: PathSegment) -> None:
        self._nodes[segment] = node
        if node.kind == NodeKind.RPC:
            self._rpc_path(node, segment)
        else:
            self._data_path(node, segment)

    def _data_path(self, node: SchemaNode, segment: PathSegment) -> None:
        path = DATA_ROOT + segment.path()
        tags = self._tags(segment)
        parameters = self._path_parameters(segment)

        self.document.add_operation(
            path,
            "get",
            Operation(
                operation_id=operation_id("get", segment),
                summary=f"returns {node.name}",
                description=node.description,
                tags=tags,
                parameters=list(parameters),
                responses={
                    "200": Response("Correct response", self.data_objects.reference(node)),
                    "400": Response("Internal error"),
                },
            ),
        )
        if segment.is_read_only:
            return

        writes = {
            "put": ("creates or updates", {"201": "Object created", "204": "Object modified"}),
            "post": ("creates", {"201": "Object created", "409": "Object already exists"}),
        }
        for method, (verb, codes) in writes.items():
            responses = {code: Response(text) for code, text in codes.items()}
            responses["400"] = Response("Internal error")
            self.document.add_operation(
                path,
                method,
                Operation(
                    operation_id=operation_id(method, segment),
                    summary=f"{verb} {node.name}",
                    description=node.description,
                    tags=tags,
                    parameters=list(parameters) + [self._body(node)],
                    responses=responses,
                ),
            )
        self.document.add_operation(
            path,
            "delete",
            Operation(
                operation_id=operation_id("delete", segment),
                summary=f"removes {node.name}",
                description=node.description,
                tags=tags,
                parameters=list(parameters),
                responses={"204": Response("Object deleted"), "400": Response("Internal error")},
            ),
        )

    def _rpc_path(self, rpc: SchemaNode, segment: PathSegment) -> None:
        payloads = {child.kind: child for child in rpc.children}
        parameters: List[Parameter] = []
        responses: Dict[str, Response] = {}

        rpc_input = payloads.get(NodeKind.INPUT)
        if rpc_input is not None and rpc_input.data_children():
            parameters.append(
                Parameter(
                    name="input",
                    location="body",
                    description=f"{rpc.name} input",
                    schema=Property(ref=self.data_objects.add_model(rpc_input)),
                )
            )
        rpc_output = payloads.get(NodeKind.OUTPUT)
        if rpc_output is not None and rpc_output.data_children():
            responses["200"] = Response(
                "Correct response", Property(ref=self.data_objects.add_model(rpc_output))
            )
        else:
            responses["204"] = Response("Operation completed")
        responses["400"] = Response("Internal error")

        self.document.add_operation(
            OPERATIONS_ROOT + segment.path(),
            "post",
            Operation(
                operation_id=operation_id("rpc", segment),
                summary=f"operates on {rpc.name}",
                description=rpc.description,
                tags=self._tags(segment),
                parameters=parameters,
                responses=responses,
            ),
        )

    def _body(self, node: SchemaNode) -> Parameter:
        return Parameter(
            name=f"{node.name}.body-param",
            location="body",
            description=f"{node.name} to be added or updated",
            schema=self.data_objects.reference(node),
        )

    def _path_parameters(self, segment: PathSegment) -> List[Parameter]:
        parameters: List[Parameter] = []
        for parameter in segment.parameters():
            owner = self._nodes.get(parameter.segment)
            key_leaf = owner.find_child(parameter.key) if owner is not None else None
            prop = self.converter.convert(key_leaf) if key_leaf is not None else Property(type="string")
            parameters.append(
                Parameter(
                    name=parameter.name,
                    location="path",
                    description=f"Id of {parameter.segment.name}",
                    type=prop.type,
                    format=prop.format,
                )
            )
        return parameters

    def _tags(self, segment: PathSegment) -> List[str]:
        tags: List[str] = []
        for generator in self.tag_generators:
            for tag in generator.tags(segment):
                if tag not in tags:
                    tags.append(tag)
        return tags


class PathHandlerBuilder:
    """Collect tag generators, then hand out one :class:`PathHandler` per module."""

    def __init__(self, tag_generators: Optional[List[TagGenerator]] = None) -> None:
        self.tag_generators: List[TagGenerator] = list(tag_generators or [])
        self._document: Optional[SwaggerDocument] = None
        self._data_objects: Optional[DataObjectBuilder] = None
        self._converter: Optional[AnnotatingTypeConverter] = None

    def add_tag_generator(self, generator: TagGenerator) -> "PathHandlerBuilder":
        self.tag_generators.append(generator)
        return self

    def configure(
        self, document: SwaggerDocument, data_objects: DataObjectBuilder
    ) -> "PathHandlerBuilder":
        self._document = document
        self._data_objects = data_objects
        self._converter = data_objects.converter
        return self

    def for_module(self, module: Module) -> PathHandler:
        if self._document is None or self._data_objects is None or self._converter is None:
            raise RuntimeError("PathHandlerBuilder.configure() must be called before for_module()")
        return PathHandler(
            module,
            self._document,
            self._data_objects,
            self._converter,
            self.tag_generators or [SegmentTagGenerator()],
        )
