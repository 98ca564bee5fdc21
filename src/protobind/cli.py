"""protobind CLI.

Usage:
    protobind generate                          # Fetch the default version, write bindings
    protobind generate --version <ref>          # Fetch a specific version / git ref
    protobind generate --schema p.json -o out.py  # Compile local documents
    protobind generate --config protobind.yaml  # Settings from a YAML file

    protobind domains --schema p.json           # List domains with counts
    protobind domains --format json
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from .compiler import FileOutputSink, generate
from .config import GeneratorConfig
from .exceptions import SchemaError
from .schema import FileSchemaProvider, HttpSchemaProvider, SchemaProvider

FORMAT_TABLE = "table"
FORMAT_JSON = "json"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def _provider_for(config: GeneratorConfig) -> SchemaProvider:
    if config.schema_files:
        return FileSchemaProvider(config.schema_files)
    return HttpSchemaProvider(
        cache_dir=config.cache_dir,
        source_url=config.source_url,
        documents=config.documents,
        refresh=config.refresh,
        timeout=config.fetch_timeout,
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """protobind - compile protocol descriptions into typed Python clients."""
    ctx.ensure_object(dict)
    _configure_logging(verbose)


@main.command("generate")
@click.option("--version", "version", help="Protocol version or source ref to generate")
@click.option(
    "--schema",
    "schema_files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Local protocol document (repeatable); disables fetching",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Output module path")
@click.option("--class-name", help="Name of the generated client class")
@click.option("--cache-dir", type=click.Path(file_okay=False, path_type=Path), help="Download cache directory")
@click.option("--refresh", is_flag=True, help="Ignore cached documents")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with generator settings",
)
def generate_cmd(
    version: str | None,
    schema_files: tuple[Path, ...],
    output: Path | None,
    class_name: str | None,
    cache_dir: Path | None,
    refresh: bool,
    config_path: Path | None,
) -> None:
    """Generate typed bindings for a protocol version.

    Examples:

        # Latest published protocol
        protobind generate -o cdp.py

        # From local documents
        protobind generate --schema browser_protocol.json --schema js_protocol.json
    """
    config = GeneratorConfig.load(
        config_path,
        version=version,
        schema_files=schema_files or None,
        output=output,
        class_name=class_name,
        cache_dir=cache_dir,
        refresh=refresh or None,
    )
    # local documents carry their own version unless one is requested explicitly
    requested = version if config.schema_files else config.version

    try:
        result = asyncio.run(
            generate(
                requested,
                _provider_for(config),
                FileOutputSink(config.output),
                class_name=config.class_name,
            )
        )
    except SchemaError as e:
        click.echo(f"Schema error: {e}", err=True)
        sys.exit(1)

    click.echo(
        f"Protocol {result.version}: {result.domains} domains, {result.types} types, "
        f"{result.commands} commands, {result.events} events -> {result.location}"
    )


@main.command("domains")
@click.option("--version", "version", help="Protocol version or source ref")
@click.option(
    "--schema",
    "schema_files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Local protocol document (repeatable); disables fetching",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([FORMAT_TABLE, FORMAT_JSON]),
    default=FORMAT_TABLE,
    help="Output format",
)
def domains_cmd(version: str | None, schema_files: tuple[Path, ...], output_format: str) -> None:
    """List the domains of a protocol description."""
    config = GeneratorConfig.load(version=version, schema_files=schema_files or None)
    requested = version if config.schema_files else config.version

    try:
        description = asyncio.run(_provider_for(config).get_protocol(requested))
    except SchemaError as e:
        click.echo(f"Schema error: {e}", err=True)
        sys.exit(1)

    rows = [
        {
            "domain": d.domain,
            "types": len(d.types or ()),
            "commands": len(d.commands or ()),
            "events": len(d.events or ()),
            "experimental": d.experimental,
            "deprecated": d.deprecated,
        }
        for d in description.domains
    ]

    if output_format == FORMAT_JSON:
        click.echo(json.dumps({"version": description.version.tag, "domains": rows}, indent=2))
        return

    click.echo(f"{'Domain':<24} {'Types':>6} {'Commands':>9} {'Events':>7}")
    click.echo("-" * 49)
    for row in rows:
        click.echo(f"{row['domain']:<24} {row['types']:>6} {row['commands']:>9} {row['events']:>7}")
    click.echo(f"\nProtocol {description.version.tag}: {len(rows)} domain(s)")


if __name__ == "__main__":
    main()
