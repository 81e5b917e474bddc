import logging
import sys
from pathlib import Path
from typing import Any

import rich_click as click
import yaml
from graphql import GraphQLSchema, graphql_sync, print_ast, print_schema
from pydantic import ValidationError
from rich.traceback import install

from transform_federation import __version__, log
from transform_federation.classifier import TypeClassification, classify_types
from transform_federation.config import FederationConfig, load_federation_config
from transform_federation.errors import FederationConfigError
from transform_federation.sdl import get_federation_directives
from transform_federation.transform import transform_schema_federation
from transform_federation.utils.schema_loader import check_correct_schema, load_schema, resolve_graphql_files

SERVICE_SDL_QUERY = "{ _service { sdl } }"


class PathResolverOption(click.Option):
    def process_value(self, ctx: click.Context, value: Any) -> list[Path] | None:
        value = super().process_value(ctx, value)
        if not value:
            return None
        paths = set(value)
        return resolve_graphql_files(list(paths))


schema_option = click.option(
    "--schema",
    "-s",
    "schemas",
    type=click.Path(exists=True, path_type=Path),
    cls=PathResolverOption,
    required=True,
    multiple=True,
    help="The GraphQL schema file or directory containing schema files. Can be specified multiple times.",
)


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="YAML file mapping type names to their federation settings (keyFields, extend, resolveReference)",
)


optional_output_option = click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=False,
    help="Output file, printed to stdout when omitted",
)


def write_output(content: str, output: Path | None) -> None:
    if output is None:
        click.echo(content, nl=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content)
    log.success(f"Written to {output}")


def load_inputs(schemas: list[Path], config_path: Path) -> tuple[GraphQLSchema, FederationConfig]:
    """Load the schema and federation config, exiting with status 1 on invalid input."""
    try:
        schema = load_schema(schemas)
    except OSError as e:
        log.error(f"File I/O error: {e}")
        sys.exit(1)
    except Exception as e:
        log.error(f"Invalid schema: {e}")
        sys.exit(1)

    try:
        config = load_federation_config(config_path)
    except OSError as e:
        log.error(f"File I/O error: {e}")
        sys.exit(1)
    except (yaml.YAMLError, TypeError, ValidationError) as e:
        log.error(f"Invalid federation config: {e}")
        sys.exit(1)

    return schema, config


def federate(schema: GraphQLSchema, config: FederationConfig) -> GraphQLSchema:
    try:
        return transform_schema_federation(schema, config)
    except FederationConfigError as e:
        log.error(f"Invalid federation config: {e}")
        sys.exit(1)


def describe_classification(classification: TypeClassification) -> None:
    log.rule("Federated Types")
    if not classification.types:
        log.hint("No types configured")
        return

    for federated_type in classification:
        resolver = "resolveReference" if federated_type.config.resolve_reference is not None else "default resolution"
        role = "entity" if federated_type.is_entity else "type"
        log.list_item(f"{federated_type.name} ({role}, {resolver})")

        directives = " ".join(print_ast(d) for d in get_federation_directives(federated_type.config))
        if directives:
            log.key_value("  directives", directives)


@click.group(context_settings={"auto_envvar_prefix": "transform_federation"})
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    help="Log level",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Log file",
)
@click.version_option(__version__)
def cli(log_level: str, log_file: Path | None) -> None:
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level.upper())
    if log_level.upper() == "DEBUG":
        _ = install(show_locals=True)


@cli.command()
@schema_option
@config_option
@optional_output_option
def sdl(schemas: list[Path], config_path: Path, output: Path | None) -> None:
    """Print the federation SDL of a schema, as served by `_service { sdl }`."""
    schema, config = load_inputs(schemas, config_path)
    federated_schema = federate(schema, config)

    result = graphql_sync(federated_schema, SERVICE_SDL_QUERY)
    if result.errors or not result.data:
        for error in result.errors or []:
            log.error(error.message)
        sys.exit(1)

    write_output(result.data["_service"]["sdl"], output)


@cli.command(name="schema")
@schema_option
@config_option
@optional_output_option
def subgraph_schema(schemas: list[Path], config_path: Path, output: Path | None) -> None:
    """Print the complete subgraph schema, including the federation types and fields."""
    schema, config = load_inputs(schemas, config_path)
    federated_schema = federate(schema, config)
    write_output(print_schema(federated_schema) + "\n", output)


@cli.command()
@schema_option
@config_option
def check(schemas: list[Path], config_path: Path) -> None:
    """Check a federation config against a schema and list the federated types."""
    schema, config = load_inputs(schemas, config_path)

    try:
        classification = classify_types(schema, config)
    except FederationConfigError as e:
        log.error(f"Invalid federation config: {e}")
        sys.exit(1)

    describe_classification(classification)

    schema_errors = check_correct_schema(federate(schema, config))
    if schema_errors:
        log.error("Federated schema validation failed:")
        for error in schema_errors:
            log.error(error)
        sys.exit(1)

    log.success("Federation config is valid.")


if __name__ == "__main__":
    cli()
