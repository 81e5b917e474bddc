from pathlib import Path

from ariadne import load_schema_from_path
from graphql import GraphQLSchema, build_schema, print_schema, validate_schema

from transform_federation import log


def resolve_graphql_files(paths: list[Path]) -> list[Path]:
    """Resolve a list of paths (files and directories) into a flat list of unique GraphQL files.

    Args:
        paths: List of file or directory paths

    Returns:
        Flat list of unique GraphQL file paths, sorted
    """
    resolved_files: set[Path] = set()

    for path in paths:
        if path.is_file():
            resolved_files.add(path)
        elif path.is_dir():
            for file in path.rglob("*.graphql"):
                resolved_files.add(file)

    return sorted(resolved_files)


def build_schema_str(graphql_schema_paths: list[Path]) -> str:
    """Concatenate the type definitions of GraphQL files into one SDL string."""
    schema_str = ""
    for graphql_file in graphql_schema_paths:
        schema_str += load_schema_from_path(graphql_file) + "\n"
    return schema_str


def load_schema(graphql_schema_paths: Path | list[Path]) -> GraphQLSchema:
    """Load and build a GraphQL schema from files or folders."""
    if isinstance(graphql_schema_paths, Path):
        graphql_schema_paths = [graphql_schema_paths]

    schema_str = build_schema_str(resolve_graphql_files(graphql_schema_paths))
    schema = build_schema(schema_str)
    log.info("Successfully built the given GraphQL schema string.")
    log.debug(f"Read schema: \n{print_schema(schema)}")
    return schema


def check_correct_schema(schema: GraphQLSchema) -> list[str]:
    """Validate a schema against the GraphQL specification.

    Args:
        schema: The GraphQL schema to validate

    Returns:
        list[str]: Error messages, empty for a valid schema
    """
    return [f"  - {error.message}" for error in validate_schema(schema)]
