"""Orchestration logic for generating the public declaration file."""

import argparse
import logging
import sys

from dts_surface.assemble_output import assemble_output, render_banner
from dts_surface.declaration_transformer import DeclarationTransformer
from dts_surface.dependency_resolver import DependencyResolver
from dts_surface.frontend import parse_declarations
from dts_surface.generator_config import GeneratorConfig
from dts_surface.load_config import load_config
from dts_surface.read_api_version import read_api_version
from dts_surface.run_context import RunContext

logger = logging.getLogger(__name__)


def run_generation(args: argparse.Namespace) -> int:
    """Execute the full generation pipeline.

    The result goes to the configured output file, or to stdout when none is
    configured. Nothing is written unless every stage succeeds.
    """
    config = load_config(args.config)
    banner = _build_banner(config)

    context = _resolve_declarations(config)
    printed = _transform_declarations(config, context)
    text = assemble_output(printed, config.include_paths, banner)

    output_path = config.output_path
    if output_path is None:
        sys.stdout.write(text)
        return 0

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")
    logger.info("Wrote %d declarations to %s", len(context.master), output_path)
    return 0


def _build_banner(config: GeneratorConfig) -> str | None:
    """Render the version banner when a package manifest is configured."""
    package_path = config.package_path
    if package_path is None:
        return None
    version = read_api_version(package_path)
    logger.info("API version %s", version)
    return render_banner(config.banner, version)


def _resolve_declarations(config: GeneratorConfig) -> RunContext:
    """Collect every declaration reachable from the index file."""
    context = RunContext(config.max_invocations, strict_collisions=config.strict_collisions)
    DependencyResolver(config, context).resolve(config.index_path)
    logger.info(
        "Resolved %d declarations in %d file reads", len(context.master), context.invocations
    )
    return context


def _transform_declarations(config: GeneratorConfig, context: RunContext) -> str:
    """Apply the redaction policy to the concatenated declarations."""
    source = parse_declarations(context.master_text(), "composite")
    return DeclarationTransformer(config).prune(source)
