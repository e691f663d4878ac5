"""FastAPI application exposing Swagger generation over HTTP.

The service accepts a serialized schema document (see
:mod:`yang_swagger.schema_loader`) together with the modules to generate and
returns the finished Swagger document.

Quick start (run the server)::

    uvicorn yang_swagger.app:app --reload

Core endpoints (REST):

    GET  /health               Basic health probe
    GET  /config/generator     Defaults applied to generation requests
    POST /generate             Generate a document (JSON, or YAML with ?format=yaml)

Example: generate the device API::

    curl -X POST http://localhost:8000/generate \
         -H "Content-Type: application/json" \
         -d '{"schema": {"modules": [...]}, "modules": ["device"],
              "options": {"max_depth": 3, "strategy": "unpacking"}}'

Error responses share one JSON shape: ``{"error": ..., "detail": ...}``.
Schema problems (including dangling leafrefs) answer ``422``, generation
preconditions such as an unknown module answer ``400``.

Environment Variables:
    YANG_SWAGGER_CONFIG: Default generator settings, ``key=value,...``
        (see :func:`yang_swagger.config.config_from_env`).
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from . import __version__
from .config import Elements, Format, GeneratorConfig, config_from_env
from .data_objects import Strategy
from .exceptions import GeneratorError, SchemaError
from .generator import SwaggerGenerator
from .schema_loader import schema_from_dict
from .postprocessor import sort_document

logger = logging.getLogger(__name__)

app = FastAPI(
    title="YANG Swagger API",
    version=__version__,
    description="Generate Swagger 2.0 / RESTCONF API descriptions from YANG schema trees",
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.middleware("http")
async def time_requests(request: Request, call_next):
    """Add generation timing headers to every response."""
    start_time = time.time()
    response = await call_next(request)
    response.headers["X-Response-Time"] = f"{time.time() - start_time:.3f}s"
    response.headers["X-API-Version"] = __version__
    return response


class GenerationOptions(BaseModel):
    """Per request overrides of the generator defaults."""

    host: Optional[str] = Field(None, description="API host written to the document")
    base_path: Optional[str] = Field(None, description="API base path")
    version: Optional[str] = Field(None, description="API version written to info")
    max_depth: Optional[int] = Field(None, ge=1, description="Maximum path depth")
    strategy: Optional[Strategy] = Field(None, description="Grouping strategy")
    elements: Optional[List[Elements]] = Field(
        None, description="Statement categories producing paths"
    )


class GenerateRequest(BaseModel):
    """Request model for the generation endpoint."""

    schema_document: Dict[str, Any] = Field(
        ..., alias="schema", description="Serialized schema tree with a 'modules' list"
    )
    modules: List[str] = Field(..., description="Modules to generate")
    options: GenerationOptions = Field(default_factory=GenerationOptions)


class GeneratorConfigResponse(BaseModel):
    """Defaults applied to generation requests."""

    host: str = Field(..., description="Default API host")
    base_path: str = Field(..., description="Default API base path")
    version: str = Field(..., description="Default API version")
    max_depth: Optional[int] = Field(None, description="Default maximum depth (null = unbounded)")
    strategy: Strategy = Field(..., description="Default grouping strategy")
    elements: List[Elements] = Field(..., description="Default statement categories")


@lru_cache(maxsize=1)
def get_default_config() -> GeneratorConfig:
    return config_from_env()


def build_config(options: GenerationOptions, defaults: GeneratorConfig) -> GeneratorConfig:
    """Overlay request options on top of the service defaults."""
    overrides = {
        key: value
        for key, value in options.model_dump(exclude_unset=True).items()
        if value is not None
    }
    if "elements" in overrides:
        overrides["elements"] = frozenset(overrides["elements"])
    # fresh postprocessor instances per request
    return replace(defaults, postprocessors=list(defaults.postprocessors), **overrides)


@app.get("/health")
def health() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/config/generator")
def generator_config(
    defaults: GeneratorConfig = Depends(get_default_config),
) -> GeneratorConfigResponse:
    """Get the generator defaults."""
    return GeneratorConfigResponse(
        host=defaults.host,
        base_path=defaults.base_path,
        version=defaults.version,
        max_depth=defaults.max_depth,
        strategy=defaults.strategy,
        elements=sorted(defaults.elements, key=lambda e: e.value),
    )


@app.post("/generate")
def generate(
    request: GenerateRequest,
    format: Format = Query(Format.JSON, description="Response encoding"),
    defaults: GeneratorConfig = Depends(get_default_config),
):
    """Generate a Swagger document for the requested modules."""
    config = build_config(request.options, defaults)
    config.format = format
    ctx = schema_from_dict(request.schema_document)
    generator = SwaggerGenerator(ctx, request.modules, config)
    if format == Format.YAML:
        return Response(content=generator.dumps(), media_type="application/x-yaml")
    document = generator.generate()
    sort_document(document)
    return JSONResponse(content=document.to_dict())


@app.exception_handler(SchemaError)
async def schema_error_handler(request, exc):
    """Invalid schema documents, including dangling cross references."""
    logger.warning("Rejected schema for %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=422,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


@app.exception_handler(GeneratorError)
async def generator_error_handler(request, exc):
    """Generation preconditions such as empty or unknown module selections."""
    return JSONResponse(
        status_code=400,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc):
    """Invalid generator settings."""
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid configuration", "detail": str(exc)},
    )
