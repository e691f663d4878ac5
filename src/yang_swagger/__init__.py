"""YANG Swagger
============

Compile an already-validated YANG schema tree into a Swagger 2.0 API
description that follows RESTCONF (RFC 8040) addressing.

Key capabilities
----------------
- Load the validated tree from JSON / YAML into
  :class:`~yang_swagger.models.SchemaContext` objects, expanding groupings
  and augmentations.
- RESTCONF data paths (``/data/device:interfaces/interface={name}``) and rpc
  paths (``/operations/device:reset``) with CRUD operations that honour the
  ``config`` flag.
- Two grouping strategies: *optimizing* (shared groupings become reusable
  definitions) and *unpacking* (everything inlined).
- Leafref chains resolved to concrete types, annotated with ``x-path``.
- Command line (``yang-swagger``) and FastAPI service front ends.

Minimal quick start
-------------------
>>> from yang_swagger import SwaggerGenerator, load_schema
>>> ctx = load_schema('device.yaml')
>>> print(SwaggerGenerator(ctx, ['device']).dumps())

Public surface
--------------
Only a curated subset is exported at the package level to keep the import
surface stable; advanced modules can be imported explicitly.
"""

__version__ = "0.1.0"

from .config import GeneratorConfig
from .data_objects import Strategy
from .exceptions import GeneratorError, LeafrefResolutionError, SchemaError
from .generator import SwaggerGenerator
from .schema_loader import load_schema, schema_from_dict

__all__ = [
    "GeneratorConfig",
    "Strategy",
    "SwaggerGenerator",
    "load_schema",
    "schema_from_dict",
    "SchemaError",
    "GeneratorError",
    "LeafrefResolutionError",
]
