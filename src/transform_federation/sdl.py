from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from graphql import (
    DirectiveNode,
    GraphQLEnumType,
    GraphQLField,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLSchema,
    GraphQLUnionType,
    is_specified_directive,
    print_ast,
)
from graphql.utilities.print_schema import (
    is_defined_type,
    print_args,
    print_block,
    print_deprecated,
    print_description,
    print_directive,
    print_implemented_interfaces,
    print_input_value,
    print_schema_definition,
    print_specified_by_url,
)

from transform_federation import log
from transform_federation.classifier import TypeClassification
from transform_federation.config import TypeFederationConfig
from transform_federation.utils.directive import (
    build_extends_directive,
    build_key_directive,
    get_applied_directives,
    merge_directives,
)
from transform_federation.utils.graphql_type import (
    is_federation_directive,
    is_federation_field,
    is_federation_type,
)

# Type name, or (type name, field or enum value name), to the directives printed on it
DirectiveMap = dict[str | tuple[str, str], tuple[DirectiveNode, ...]]


@dataclass(frozen=True)
class ServiceDescriptor:
    """The `_service` value of a federated schema."""

    sdl: str


def get_federation_directives(config: TypeFederationConfig) -> list[DirectiveNode]:
    directives = [build_key_directive(key_set) for key_set in config.key_fields]
    if config.extend:
        directives.append(build_extends_directive())
    return directives


def build_federation_directive_map(schema: GraphQLSchema, classification: TypeClassification) -> DirectiveMap:
    """
    Collect the directives to print on the types, fields and enum values of a schema.

    Directives applied in the source SDL come first, followed by the `@key` and
    `@extends` directives of configured types. A federation directive identical
    to an applied one is left out.

    Args:
        schema: The schema before federation types are added.
        classification: The classified federation config of the schema.
    Returns:
        DirectiveMap: The directives per type name or (type name, member name).
    """
    directive_map: DirectiveMap = {}

    for type_name, graphql_type in schema.type_map.items():
        if not is_defined_type(graphql_type) or is_federation_type(type_name):
            continue

        directives = tuple(get_applied_directives(graphql_type))
        federated_type = classification.get(type_name)
        if federated_type is not None:
            directives = merge_directives(directives, get_federation_directives(federated_type.config))
        if directives:
            directive_map[type_name] = directives

        members: Mapping[str, Any] = {}
        if isinstance(graphql_type, GraphQLEnumType):
            members = graphql_type.values
        elif isinstance(graphql_type, GraphQLObjectType | GraphQLInterfaceType | GraphQLInputObjectType):
            members = graphql_type.fields

        for member_name, member in members.items():
            member_directives = get_applied_directives(member)
            if member_directives:
                directive_map[(type_name, member_name)] = tuple(member_directives)

    return directive_map


def print_directives(directives: Iterable[DirectiveNode]) -> str:
    return "".join(f" {print_ast(directive)}" for directive in directives)


def _print_fields(type_name: str, fields: Mapping[str, GraphQLField], directive_map: DirectiveMap) -> str:
    return print_block(
        [
            print_description(field, "  ", not i)
            + f"  {name}"
            + print_args(field.args, "  ")
            + f": {field.type}"
            + print_deprecated(field.deprecation_reason)
            + print_directives(directive_map.get((type_name, name), ()))
            for i, (name, field) in enumerate(fields.items())
        ]
    )


def print_federated_type(
    graphql_type: GraphQLNamedType, directive_map: DirectiveMap, query_type_name: str | None = None
) -> str | None:
    """
    Print a type the way graphql-core's print_schema does, with its directives.

    The root query type is printed without its federation fields, and not at
    all when it has no other fields.
    """
    name = graphql_type.name
    description = print_description(graphql_type)
    directives = print_directives(directive_map.get(name, ()))

    if isinstance(graphql_type, GraphQLScalarType):
        return description + f"scalar {name}" + print_specified_by_url(graphql_type) + directives

    if isinstance(graphql_type, GraphQLObjectType | GraphQLInterfaceType):
        fields = graphql_type.fields
        if name == query_type_name:
            fields = {field_name: f for field_name, f in fields.items() if not is_federation_field(field_name)}
            if graphql_type.fields and not fields:
                return None
        keyword = "type" if isinstance(graphql_type, GraphQLObjectType) else "interface"
        return (
            description
            + f"{keyword} {name}"
            + print_implemented_interfaces(graphql_type)
            + directives
            + _print_fields(name, fields, directive_map)
        )

    if isinstance(graphql_type, GraphQLUnionType):
        types = graphql_type.types
        possible_types = " = " + " | ".join(t.name for t in types) if types else ""
        return description + f"union {name}" + directives + possible_types

    if isinstance(graphql_type, GraphQLEnumType):
        values = [
            print_description(value, "  ", not i)
            + f"  {value_name}"
            + print_deprecated(value.deprecation_reason)
            + print_directives(directive_map.get((name, value_name), ()))
            for i, (value_name, value) in enumerate(graphql_type.values.items())
        ]
        return description + f"enum {name}" + directives + print_block(values)

    if isinstance(graphql_type, GraphQLInputObjectType):
        input_fields = [
            print_description(field, "  ", not i)
            + "  "
            + print_input_value(field_name, field)  # type: ignore[arg-type]
            + print_directives(directive_map.get((name, field_name), ()))
            for i, (field_name, field) in enumerate(graphql_type.fields.items())
        ]
        one_of = " @oneOf" if getattr(graphql_type, "is_one_of", False) else ""
        return description + f"input {name}" + one_of + directives + print_block(input_fields)

    raise TypeError(f"Unexpected type: {graphql_type!r}.")


def _print_schema_definition(schema: GraphQLSchema, left_out_types: set[str]) -> str | None:
    definition = print_schema_definition(schema)
    if definition is None:
        return None

    lines = [
        line
        for line in definition.split("\n")
        if not (line.startswith("  ") and line.split(": ")[-1] in left_out_types)
    ]
    if not any(line.startswith("  ") for line in lines):
        return None
    return "\n".join(lines)


def print_federated_sdl(schema: GraphQLSchema, classification: TypeClassification) -> str:
    """
    Print the SDL of a schema annotated with its federation directives.

    Every configured type gets one `@key(fields: "...")` per key field set and
    `@extends` when it extends a type of another service. Directives applied in
    the source SDL are restored, and the federation protocol definitions are
    left out, so the result describes the service itself. Everything else is
    printed exactly as graphql-core's print_schema prints it.

    Args:
        schema: The schema before federation types are added.
        classification: The classified federation config of the schema.
    Returns:
        str: The annotated SDL, ending with a single newline, or an empty string
        for a schema without type definitions.
    """
    directive_map = build_federation_directive_map(schema, classification)
    query_type_name = schema.query_type.name if schema.query_type else None

    printed_types: list[str] = []
    left_out_types: set[str] = set()
    for graphql_type in schema.type_map.values():
        if not is_defined_type(graphql_type) or is_federation_type(graphql_type.name):
            continue
        printed = print_federated_type(graphql_type, directive_map, query_type_name)
        if printed is None:
            left_out_types.add(graphql_type.name)
            continue
        printed_types.append(printed)

    directives = [
        print_directive(directive)
        for directive in schema.directives
        if not is_specified_directive(directive) and not is_federation_directive(directive.name)
    ]
    schema_definition = _print_schema_definition(schema, left_out_types)

    sdl = "\n\n".join([*filter(None, [schema_definition]), *directives, *printed_types])
    log.debug(f"Federated SDL: \n{sdl}")

    return f"{sdl}\n" if sdl else ""


def build_service_descriptor(schema: GraphQLSchema, classification: TypeClassification) -> ServiceDescriptor:
    return ServiceDescriptor(sdl=print_federated_sdl(schema, classification))
