"""
CLI commands for generating Swagger documents from YANG schemas.
"""

import argparse
import sys
import logging
from pathlib import Path

from .config import Format, GeneratorConfig, parse_elements
from .data_objects import Strategy
from .exceptions import YangSwaggerError
from .generator import SwaggerGenerator
from .path_handler import ModuleTagGenerator, SegmentTagGenerator
from .schema_loader import load_schema

def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

def _max_depth(value: str):
    if value.lower() == "unbounded":
        return None
    depth = int(value)
    if depth < 1:
        raise argparse.ArgumentTypeError("depth must be a positive integer or 'unbounded'")
    return depth

def build_config(args) -> GeneratorConfig:
    """Translate parsed arguments into a :class:`GeneratorConfig`."""
    tag_generators = [SegmentTagGenerator()]
    if args.module_tags:
        tag_generators.append(ModuleTagGenerator())
    return GeneratorConfig(
        host=args.host,
        base_path=args.base_path,
        version=args.api_version,
        format=args.format,
        elements=parse_elements(args.elements),
        max_depth=args.max_depth,
        strategy=args.strategy,
        tag_generators=tag_generators,
    )

def cmd_generate(args):
    """Generate a Swagger document command."""
    setup_logging(args.verbose)

    try:
        ctx = load_schema(args.schema)
        generator = SwaggerGenerator(ctx, args.modules, build_config(args))
        text = generator.dumps()
    except (YangSwaggerError, OSError, ValueError) as e:
        print(f"✗ Failed to generate swagger: {e}")
        return 1

    if args.output:
        args.output.write_text(text, encoding="utf-8")
        print(f"✓ Wrote swagger for {', '.join(args.modules)} to: {args.output}")
    else:
        sys.stdout.write(text)
    return 0

def cmd_modules(args):
    """List modules of a schema document."""
    setup_logging(args.verbose)

    try:
        ctx = load_schema(args.schema)
    except (YangSwaggerError, OSError) as e:
        print(f"✗ Failed to load schema: {e}")
        return 1
    print("Modules in schema:")
    for module in ctx.modules:
        revision = f" ({module.revision})" if module.revision else ""
        print(f"  ○ {module.name}{revision}: {len(module.data)} data nodes, {len(module.rpcs)} rpcs")
    return 0

def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="YANG to Swagger generator CLI",
        prog="yang-swagger"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands"
    )

    defaults = GeneratorConfig()

    # Generate command
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate a Swagger document for selected modules"
    )
    generate_parser.add_argument("schema", type=Path, help="Schema document (.json, .yaml)")
    generate_parser.add_argument(
        "-m", "--module",
        dest="modules",
        action="append",
        required=True,
        help="Module to generate (repeatable)"
    )
    generate_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the document to this file instead of stdout"
    )
    generate_parser.add_argument(
        "--format",
        default=defaults.format.value,
        choices=[f.value for f in Format],
        help=f"Output format (default: {defaults.format.value})"
    )
    generate_parser.add_argument(
        "--strategy",
        default=defaults.strategy.value,
        choices=[s.value for s in Strategy],
        help=f"Grouping strategy (default: {defaults.strategy.value})"
    )
    generate_parser.add_argument(
        "--max-depth",
        type=_max_depth,
        default=defaults.max_depth,
        help="Maximum depth of generated paths, or 'unbounded' (default: unbounded)"
    )
    generate_parser.add_argument(
        "--elements",
        default="data+rpc",
        help="Generated statement categories: data, rpc or data+rpc (default: data+rpc)"
    )
    generate_parser.add_argument("--host", default=defaults.host, help=f"API host (default: {defaults.host})")
    generate_parser.add_argument(
        "--base-path",
        default=defaults.base_path,
        help=f"API base path (default: {defaults.base_path})"
    )
    generate_parser.add_argument(
        "--api-version",
        default=defaults.version,
        help=f"API version written to info (default: {defaults.version})"
    )
    generate_parser.add_argument(
        "--module-tags",
        action="store_true",
        help="Also tag operations with their module name"
    )
    generate_parser.set_defaults(func=cmd_generate)

    # Modules command
    modules_parser = subparsers.add_parser(
        "modules",
        help="List modules declared by a schema document"
    )
    modules_parser.add_argument("schema", type=Path, help="Schema document (.json, .yaml)")
    modules_parser.set_defaults(func=cmd_modules)

    args = parser.parse_args(argv)

    if not hasattr(args, 'func'):
        parser.print_help()
        return 1

    return args.func(args)

if __name__ == "__main__":
    sys.exit(main())
