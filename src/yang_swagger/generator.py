"""YANG to Swagger generator.

Generates Swagger definitions from YANG modules. Generator modeling concepts:

* container, list, leaf, leaf-list, enumerations - containers and lists get
  RESTCONF paths and definitions, leaves become properties.
* groupings - depending on the :class:`~yang_swagger.data_objects.Strategy`
  groupings are either inlined or turned into shared definitions.
* leafrefs - mapped to the type of the leaf they point at, annotated with
  ``x-path``.
* choice / case - invisible; their children behave as children of the
  enclosing node.
* config flag - operational data only gets ``GET`` operations.
* augmentations - nodes owned by modules outside the generated set are
  skipped, so augmenting modules are only generated when selected.

Example:
        from yang_swagger.generator import SwaggerGenerator
        from yang_swagger.schema_loader import load_schema

        ctx = load_schema(Path("device.yaml"))
        generator = SwaggerGenerator(ctx, ["device"])
        document = generator.generate()
        print(sorted(document.paths))

Process:
    1. ``process_module`` pre-pass of the data object builder for every
       selected module.
    2. Depth-first walk of each module (:class:`ModuleGenerator`): a path
       segment is pushed for each container/list, the path handler emits the
       operations, children are visited, then the node's definition is
       registered (post-order) and the parent segment is resumed.
    3. ``info`` is filled from the module names and descriptions.
    4. Configured post processors run in order, unless the document has no
       definitions at all.
"""

from __future__ import annotations

import logging
from typing import IO, Iterable, List, Optional, Union

from .config import Elements, GeneratorConfig
from .data_objects import DataObjectBuilder, create_builder
from .document import Info, SwaggerDocument
from .exceptions import GeneratorError
from .grouping_hierarchy import GroupingHierarchy
from .models import NodeKind, Module, SchemaContext, SchemaNode
from .path_handler import PathHandler, PathHandlerBuilder
from .path_segment import PathSegment
from .postprocessor import sort_document
from .serialization import dumps
from .type_converter import AnnotatingTypeConverter

logger = logging.getLogger(__name__)


class SwaggerGenerator:
    """Generate one Swagger document for a set of modules.

    Args:
        ctx: The whole validated schema, including imported modules.
        modules: Modules (or module names) to turn into API paths.
        config: Generation settings; defaults to :class:`GeneratorConfig`.

    Raises:
        GeneratorError: If the context holds no modules, the selection is
            empty, or a selected module is not part of the context.
    """

    def __init__(
        self,
        ctx: SchemaContext,
        modules: Iterable[Union[str, Module]],
        config: Optional[GeneratorConfig] = None,
    ) -> None:
        if not ctx.modules:
            logger.error("No modules found in the context.")
            raise GeneratorError("No modules found in the context.")
        selected = list(modules)
        if not selected:
            logger.error("No modules has been specified for swagger generation")
            logger.info("Modules in the context are: %s", ", ".join(m.name for m in ctx.modules))
            raise GeneratorError("No modules to generate has been specified")

        self.ctx = ctx
        self.config = config or GeneratorConfig()
        self.modules: List[Module] = [self._resolve_module(m) for m in selected]
        self.module_names = {module.name for module in self.modules}

        self.document = SwaggerDocument(
            info=Info(version=self.config.version),
            host=self.config.host,
            base_path=self.config.base_path,
            consumes=[self.config.consumes],
            produces=[self.config.produces],
        )
        self.converter = AnnotatingTypeConverter(ctx)
        self.data_objects: DataObjectBuilder = create_builder(
            self.config.strategy,
            ctx,
            self.document,
            self.converter,
            GroupingHierarchy(ctx),
            max_depth=self.config.max_depth,
        )
        self.path_handler_builder = PathHandlerBuilder(self.config.tag_generators)
        self._generated = False

    def _resolve_module(self, module: Union[str, Module]) -> Module:
        name = module.name if isinstance(module, Module) else module
        found = self.ctx.find_module(name)
        if found is None:
            raise GeneratorError(f"Module {name} is not part of the schema context")
        return found

    def generate(self) -> SwaggerDocument:
        """Run generation for the configured modules and return the document.

        The walk happens once; later calls return the same document.
        """
        if self._generated:
            return self.document

        names = [module.name for module in self.modules]
        logger.info("Generating swagger for yang modules: [%s]", ",".join(names))

        for module in self.modules:
            self.data_objects.process_module(module)
        self.path_handler_builder.configure(self.document, self.data_objects)

        for module in self.modules:
            ModuleGenerator(self, module).generate()

        descriptions = ",".join(m.description for m in self.modules if m.description)
        title = ",".join(names)
        self.document.info.title = f"{title} API"
        self.document.info.description = descriptions or f"{title} API generated from yang definitions"

        self.post_process()
        self._generated = True
        return self.document

    def post_process(self) -> None:
        """Apply configured post processors in order."""
        if not self.document.definitions:
            logger.warning("Generated swagger has no definitions")
            return
        for postprocessor in self.config.postprocessors:
            postprocessor(self.document)

    def dumps(self) -> str:
        """Generate and encode the document in the configured format."""
        document = self.generate()
        sort_document(document)
        return dumps(document, self.config.format)

    def write(self, target: IO[str]) -> None:
        target.write(self.dumps())


def _next_depth(depth: Optional[int]) -> Optional[int]:
    return None if depth is None else depth - 1


class ModuleGenerator:
    """Depth-first walk of one module."""

    def __init__(self, generator: SwaggerGenerator, module: Module) -> None:
        self.module = module
        self.config = generator.config
        self.module_names = generator.module_names
        self.data_objects = generator.data_objects
        self.handler: PathHandler = generator.path_handler_builder.for_module(module)

    def generate(self) -> None:
        if Elements.DATA in self.config.elements:
            root = PathSegment.root(self.module.name)
            for node in self.module.data:
                self.visit(node, root, self.config.max_depth)

        if Elements.RPC in self.config.elements:
            root = PathSegment.root(self.module.name)
            for rpc in self.module.rpcs:
                self.visit_rpc(rpc, root)

    def visit_rpc(self, rpc: SchemaNode, parent: PathSegment) -> None:
        segment = parent.push(rpc.name, self.module.name)
        self.handler.path(rpc, segment)

    def visit(self, node: SchemaNode, parent: PathSegment, depth: Optional[int]) -> None:
        """Visit ``node`` below ``parent``; ``depth`` of ``None`` is unbounded."""
        if depth == 0:
            logger.debug("Maximum depth level reached, skipping %s and its children", node.schema_path)
            return
        if node.module not in self.module_names:
            logger.debug("skipping %s as it is from %s module", node.schema_path, node.module)
            return

        if node.is_structural:
            logger.info("processing %s statement %s", node.kind.value, node.name)
            segment = parent.push(
                node.name,
                node.module,
                read_only=not node.config,
                list_keys=node.keys if node.kind == NodeKind.LIST else (),
            )
            self.handler.path(node, segment)
            for child in node.children:
                self.visit(child, segment, _next_depth(depth))
            self.data_objects.add_model(node)
        elif node.kind == NodeKind.CHOICE:
            # choice and cases are invisible from the perspective of generating paths
            logger.info("inlining choice statement %s", node.name)
            for case in node.children:
                for child in case.children:
                    self.visit(child, parent, _next_depth(depth))
