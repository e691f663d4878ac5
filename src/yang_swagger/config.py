"""Generator configuration.

:class:`GeneratorConfig` gathers every knob of a generation run. It is
assembled once (by the CLI, the HTTP service, or library callers) and passed
to :class:`~yang_swagger.generator.SwaggerGenerator`; the generator never
changes it afterwards.

Environment based configuration mirrors the service deployment style::

        YANG_SWAGGER_CONFIG="max_depth=4,strategy=unpacking,elements=data"

Keys are field names; ``elements`` takes ``+`` separated values.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional

from .data_objects import Strategy
from .path_handler import TagGenerator
from .postprocessor import Postprocessor, default_postprocessors

CONFIG_ENV_VAR = "YANG_SWAGGER_CONFIG"


class Format(str, Enum):
    YAML = "yaml"
    JSON = "json"


class Elements(str, Enum):
    DATA = "data"  # paths for containers and lists
    RPC = "rpc"  # paths for rpc operations


@dataclass
class GeneratorConfig:
    """Configuration for a generation run.

    Args:
        host: Host written to the document.
        base_path: Base path of the API (RESTCONF root).
        consumes: Media type accepted by every operation.
        produces: Media type returned by every operation.
        version: API version written to ``info``.
        format: Output encoding used by ``write``/``dumps``.
        elements: Which statement categories produce paths.
        max_depth: Maximum walk depth below a module root; ``None`` means
            unbounded.
        strategy: How groupings become definitions.
        tag_generators: Tag generators used by the path handler (empty means
            the handler's default).
        postprocessors: Document transforms applied in order after the walk.
    """

    host: str = "localhost:8080"
    base_path: str = "/restconf"
    consumes: str = "application/json"
    produces: str = "application/json"
    version: str = "1.0.0-SNAPSHOT"
    format: Format = Format.YAML
    elements: FrozenSet[Elements] = frozenset({Elements.DATA, Elements.RPC})
    max_depth: Optional[int] = None
    strategy: Strategy = Strategy.OPTIMIZING
    tag_generators: List[TagGenerator] = field(default_factory=list)
    postprocessors: List[Postprocessor] = field(default_factory=default_postprocessors)

    def __post_init__(self) -> None:
        self.format = Format(self.format)
        self.strategy = Strategy(self.strategy)
        self.elements = frozenset(Elements(e) for e in self.elements)
        if self.max_depth is not None and self.max_depth < 1:
            raise ValueError(f"max_depth must be a positive integer or None, got {self.max_depth}")


def parse_elements(value: str) -> FrozenSet[Elements]:
    return frozenset(Elements(part.strip().lower()) for part in value.split("+") if part.strip())


def config_from_env() -> GeneratorConfig:
    """Build a configuration from ``YANG_SWAGGER_CONFIG``.

    Unknown keys are ignored. ``max_depth`` accepts ``unbounded``.
    """
    values = {}
    for pair in os.getenv(CONFIG_ENV_VAR, "").split(","):
        if "=" not in pair:
            continue
        key, value = (part.strip() for part in pair.split("=", 1))
        if key == "max_depth":
            values[key] = None if value.lower() in ("", "unbounded") else int(value)
        elif key == "elements":
            values[key] = parse_elements(value)
        elif key in ("host", "base_path", "consumes", "produces", "version", "format", "strategy"):
            values[key] = value.lower() if key in ("format", "strategy") else value
    return GeneratorConfig(**values)
