from collections.abc import Mapping
from typing import Any, cast

from graphql import (
    GraphQLAbstractType,
    GraphQLObjectType,
    GraphQLResolveInfo,
    GraphQLSchema,
    extend_schema,
    is_object_type,
    parse,
)

from transform_federation import log
from transform_federation.classifier import TypeClassification
from transform_federation.entities import EntitiesResolver
from transform_federation.sdl import ServiceDescriptor
from transform_federation.utils.graphql_type import (
    ANY_SCALAR_NAME,
    ENTITIES_FIELD_NAME,
    ENTITY_UNION_NAME,
    EXTENDS_DIRECTIVE_NAME,
    FIELD_SET_SCALAR_NAME,
    KEY_DIRECTIVE_NAME,
    SERVICE_FIELD_NAME,
    SERVICE_TYPE_NAME,
    TYPENAME_KEY,
)

DEFAULT_QUERY_TYPE_NAME = "Query"


def resolve_entity_type(value: Any, info: GraphQLResolveInfo, abstract_type: GraphQLAbstractType) -> str | None:
    """
    Resolve the concrete `_Entity` member of a value returned by `_entities`.

    Values are tagged with `__typename` by the entities resolver; untagged
    values fall back to the `is_type_of` checks of the union members.
    """
    if isinstance(value, Mapping):
        type_name = value.get(TYPENAME_KEY)
    else:
        type_name = getattr(value, TYPENAME_KEY, None)
    if type_name is not None:
        return str(type_name)

    for possible_type in info.schema.get_possible_types(abstract_type):
        if possible_type.is_type_of is not None and possible_type.is_type_of(value, info) is True:
            return possible_type.name
    return None


def build_federation_type_defs(schema: GraphQLSchema, entity_names: list[str]) -> str:
    """Build the SDL extension adding the federation types and root fields to a schema."""
    type_defs = [
        f"scalar {ANY_SCALAR_NAME}",
        f"type {SERVICE_TYPE_NAME} {{\n  sdl: String\n}}",
    ]
    if entity_names:
        type_defs.append(f"union {ENTITY_UNION_NAME} = {' | '.join(entity_names)}")

    if schema.get_type(FIELD_SET_SCALAR_NAME) is None:
        type_defs.append(f"scalar {FIELD_SET_SCALAR_NAME}")
    if schema.get_directive(KEY_DIRECTIVE_NAME) is None:
        type_defs.append(
            f"directive @{KEY_DIRECTIVE_NAME}(fields: {FIELD_SET_SCALAR_NAME}!) repeatable on OBJECT | INTERFACE"
        )
    if schema.get_directive(EXTENDS_DIRECTIVE_NAME) is None:
        type_defs.append(f"directive @{EXTENDS_DIRECTIVE_NAME} on OBJECT | INTERFACE")

    query_fields = [f"  {SERVICE_FIELD_NAME}: {SERVICE_TYPE_NAME}!"]
    if entity_names:
        query_fields.append(f"  {ENTITIES_FIELD_NAME}(representations: [{ANY_SCALAR_NAME}!]!): [{ENTITY_UNION_NAME}]!")
    query_body = "{\n" + "\n".join(query_fields) + "\n}"

    if schema.query_type is not None:
        type_defs.append(f"extend type {schema.query_type.name} {query_body}")
    else:
        if is_object_type(schema.get_type(DEFAULT_QUERY_TYPE_NAME)):
            type_defs.append(f"extend type {DEFAULT_QUERY_TYPE_NAME} {query_body}")
        else:
            type_defs.append(f"type {DEFAULT_QUERY_TYPE_NAME} {query_body}")
        type_defs.append(f"extend schema {{\n  query: {DEFAULT_QUERY_TYPE_NAME}\n}}")

    return "\n\n".join(type_defs)


def augment_schema(
    schema: GraphQLSchema, classification: TypeClassification, descriptor: ServiceDescriptor
) -> GraphQLSchema:
    """
    Add the federation types and root fields to a schema.

    The root query type (created if absent) gains `_service` and, when the
    schema has entities, `_entities`. Existing types, fields and resolvers are
    carried over unchanged; the given schema is not modified.

    Args:
        schema: The executable schema to augment.
        classification: The classified federation config of the schema.
        descriptor: The value returned by the `_service` field.
    Returns:
        GraphQLSchema: The augmented subgraph schema.
    """
    entity_names = classification.entity_names
    if schema.query_type is None:
        log.info("The provided schema has no Query type, a Query type will be added.")
    if not entity_names:
        log.info(f"No entities configured, {ENTITIES_FIELD_NAME} and {ENTITY_UNION_NAME} are not added.")

    type_defs = build_federation_type_defs(schema, entity_names)
    log.debug(f"Federation type definitions: \n{type_defs}")

    # Existing federation fields are overwritten, which SDL validation would reject
    federated_schema = extend_schema(schema, parse(type_defs), assume_valid_sdl=True)

    def resolve_service(_root: Any, _info: GraphQLResolveInfo) -> ServiceDescriptor:
        return descriptor

    query_type = cast(GraphQLObjectType, federated_schema.query_type)
    query_type.fields[SERVICE_FIELD_NAME].resolve = resolve_service

    if entity_names:
        query_type.fields[ENTITIES_FIELD_NAME].resolve = EntitiesResolver(classification)
        entity_union = federated_schema.get_type(ENTITY_UNION_NAME)
        entity_union.resolve_type = resolve_entity_type  # type: ignore[union-attr]

    log.info(f"Added federation fields to the {query_type.name} type")
    return federated_schema
