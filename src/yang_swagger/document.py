"""In-memory Swagger 2.0 document produced by the generator.

The classes mirror the subset of the Swagger object model the generator emits.
They are plain dataclasses so tests can compare them structurally and the
serialization layer can render them with :meth:`SwaggerDocument.to_dict`.

Definitions come in three shapes:
        * :class:`ObjectModel` - an object with inlined properties.
        * :class:`RefModel` - an alias of another definition.
        * :class:`ComposedModel` - ``allOf`` a list of references plus local fields.

Cross links between definitions (and from operations to definitions) are
stored as bare definition names in ``Property.ref`` / ``RefModel.ref`` and
rendered as ``#/definitions/<name>`` on output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Set, Union

DEFINITIONS_PREFIX = "#/definitions/"


def definition_ref(name: str) -> str:
    return DEFINITIONS_PREFIX + name


@dataclass
class Property:
    """Schema of a single field, parameter body or response body."""

    type: Optional[str] = None
    format: Optional[str] = None
    ref: Optional[str] = None
    items: Optional["Property"] = None
    enum: List[str] = field(default_factory=list)
    description: Optional[str] = None
    read_only: bool = False
    extensions: Dict[str, Any] = field(default_factory=dict)

    def iter_properties(self) -> Iterator["Property"]:
        yield self
        if self.items is not None:
            yield from self.items.iter_properties()

    def to_dict(self) -> Dict[str, Any]:
        if self.ref is not None:
            result: Dict[str, Any] = {"$ref": definition_ref(self.ref)}
        else:
            result = {}
            if self.type is not None:
                result["type"] = self.type
            if self.format is not None:
                result["format"] = self.format
            if self.items is not None:
                result["items"] = self.items.to_dict()
            if self.enum:
                result["enum"] = list(self.enum)
            if self.description:
                result["description"] = self.description
            if self.read_only:
                result["readOnly"] = True
        result.update(self.extensions)
        return result


@dataclass
class ObjectModel:
    properties: Dict[str, Property] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)
    description: Optional[str] = None
    extensions: Dict[str, Any] = field(default_factory=dict)

    def iter_properties(self) -> Iterator[Property]:
        for prop in self.properties.values():
            yield from prop.iter_properties()

    def is_empty(self) -> bool:
        return not self.properties

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": "object"}
        if self.description:
            result["description"] = self.description
        if self.required:
            result["required"] = list(self.required)
        result["properties"] = {name: prop.to_dict() for name, prop in self.properties.items()}
        result.update(self.extensions)
        return result


@dataclass
class RefModel:
    ref: str

    def iter_properties(self) -> Iterator[Property]:
        return iter(())

    def to_dict(self) -> Dict[str, Any]:
        return {"$ref": definition_ref(self.ref)}


@dataclass
class ComposedModel:
    all_of: List[Union[RefModel, ObjectModel]] = field(default_factory=list)
    description: Optional[str] = None

    def iter_properties(self) -> Iterator[Property]:
        for part in self.all_of:
            yield from part.iter_properties()

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"allOf": [part.to_dict() for part in self.all_of]}
        if self.description:
            result["description"] = self.description
        return result


Model = Union[ObjectModel, RefModel, ComposedModel]


def model_references(model: Model) -> List[str]:
    """Definition names ``model`` points at, in declaration order."""
    names: List[str] = []
    parts = model.all_of if isinstance(model, ComposedModel) else [model]
    for part in parts:
        if isinstance(part, RefModel):
            names.append(part.ref)
        else:
            names.extend(prop.ref for prop in part.iter_properties() if prop.ref is not None)
    return names


@dataclass
class Parameter:
    name: str
    location: str
    required: bool = True
    description: Optional[str] = None
    type: Optional[str] = None
    format: Optional[str] = None
    schema: Optional[Property] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name, "in": self.location, "required": self.required}
        if self.description:
            result["description"] = self.description
        if self.schema is not None:
            result["schema"] = self.schema.to_dict()
        else:
            result["type"] = self.type or "string"
            if self.format is not None:
                result["format"] = self.format
        return result


@dataclass
class Response:
    description: str
    schema: Optional[Property] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"description": self.description}
        if self.schema is not None:
            result["schema"] = self.schema.to_dict()
        return result


@dataclass
class Operation:
    operation_id: str
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    responses: Dict[str, Response] = field(default_factory=dict)

    def iter_properties(self) -> Iterator[Property]:
        for parameter in self.parameters:
            if parameter.schema is not None:
                yield from parameter.schema.iter_properties()
        for response in self.responses.values():
            if response.schema is not None:
                yield from response.schema.iter_properties()

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.tags:
            result["tags"] = list(self.tags)
        if self.summary:
            result["summary"] = self.summary
        if self.description:
            result["description"] = self.description
        result["operationId"] = self.operation_id
        if self.parameters:
            result["parameters"] = [p.to_dict() for p in self.parameters]
        result["responses"] = {code: r.to_dict() for code, r in self.responses.items()}
        return result


@dataclass
class Info:
    title: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("title", self.title),
                ("description", self.description),
                ("version", self.version),
            )
            if value is not None
        }


@dataclass
class SwaggerDocument:
    """Accumulating output of one generation run.

    Paths and definitions are only ever added during the walk; post
    processors may replace or reorder them afterwards.
    """

    info: Info = field(default_factory=Info)
    host: Optional[str] = None
    base_path: Optional[str] = None
    consumes: List[str] = field(default_factory=list)
    produces: List[str] = field(default_factory=list)
    paths: Dict[str, Dict[str, Operation]] = field(default_factory=dict)
    definitions: Dict[str, Model] = field(default_factory=dict)

    def add_operation(self, path: str, method: str, operation: Operation) -> None:
        self.paths.setdefault(path, {})[method] = operation

    def add_definition(self, name: str, model: Model) -> None:
        self.definitions[name] = model

    def iter_properties(self) -> Iterator[Property]:
        for operations in self.paths.values():
            for operation in operations.values():
                yield from operation.iter_properties()
        for model in self.definitions.values():
            yield from model.iter_properties()

    def references(self) -> Set[str]:
        """Every definition name referenced from a path or a definition."""
        names = {prop.ref for prop in self.iter_properties() if prop.ref is not None}
        for model in self.definitions.values():
            names.update(model_references(model))
        return names

    def replace_references(self, resolve: Callable[[str], str]) -> None:
        """Rewrite every definition reference through ``resolve``."""
        for prop in self.iter_properties():
            if prop.ref is not None:
                prop.ref = resolve(prop.ref)
        for model in self.definitions.values():
            parts = model.all_of if isinstance(model, ComposedModel) else [model]
            for part in parts:
                if isinstance(part, RefModel):
                    part.ref = resolve(part.ref)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"swagger": "2.0", "info": self.info.to_dict()}
        if self.host is not None:
            result["host"] = self.host
        if self.base_path is not None:
            result["basePath"] = self.base_path
        if self.consumes:
            result["consumes"] = list(self.consumes)
        if self.produces:
            result["produces"] = list(self.produces)
        result["paths"] = {
            path: {method: op.to_dict() for method, op in operations.items()}
            for path, operations in self.paths.items()
        }
        result["definitions"] = {name: model.to_dict() for name, model in self.definitions.items()}
        return result
