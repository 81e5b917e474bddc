from collections.abc import Iterator
from dataclasses import dataclass, field

from graphql import (
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    is_interface_type,
    is_object_type,
)

from transform_federation import log
from transform_federation.config import FederationConfig, TypeFederationConfig
from transform_federation.errors import FederationConfigError, FederationConfigErrorMessages
from transform_federation.utils.directive import get_key_field_names


@dataclass(frozen=True)
class FederatedType:
    name: str
    graphql_type: GraphQLNamedType
    config: TypeFederationConfig

    @property
    def is_entity(self) -> bool:
        return self.config.is_entity


@dataclass(frozen=True)
class TypeClassification:
    """Configured types of a schema, keyed by type name in config order."""

    types: dict[str, FederatedType] = field(default_factory=dict)

    def __iter__(self) -> Iterator[FederatedType]:
        return iter(self.types.values())

    def __contains__(self, type_name: object) -> bool:
        return type_name in self.types

    def get(self, type_name: str) -> FederatedType | None:
        return self.types.get(type_name)

    @property
    def entities(self) -> list[GraphQLObjectType]:
        """Object types with key fields, the members of the `_Entity` union."""
        return [
            t.graphql_type
            for t in self.types.values()
            if t.is_entity and isinstance(t.graphql_type, GraphQLObjectType)
        ]

    @property
    def entity_names(self) -> list[str]:
        return [entity.name for entity in self.entities]


def _check_type_config(type_name: str, graphql_type: GraphQLNamedType | None, config: TypeFederationConfig) -> None:
    if config.resolve_reference is not None and not is_object_type(graphql_type):
        raise FederationConfigError(FederationConfigErrorMessages.RESOLVE_REFERENCE_NOT_OBJECT.format(name=type_name))

    if graphql_type is None:
        raise FederationConfigError(FederationConfigErrorMessages.TYPE_NOT_DEFINED.format(name=type_name))

    if config.key_fields and not is_object_type(graphql_type):
        raise FederationConfigError(FederationConfigErrorMessages.KEY_FIELDS_NOT_OBJECT.format(name=type_name))

    if config.extend and not (is_object_type(graphql_type) or is_interface_type(graphql_type)):
        raise FederationConfigError(FederationConfigErrorMessages.EXTEND_NOT_OBJECT.format(name=type_name))

    if not config.key_fields:
        return

    fields = graphql_type.fields  # type: ignore[attr-defined]
    for key_set in config.key_fields:
        for field_name in get_key_field_names(key_set):
            if field_name not in fields:
                raise FederationConfigError(
                    FederationConfigErrorMessages.KEY_FIELD_UNKNOWN.format(field=field_name, name=type_name)
                )


def classify_types(schema: GraphQLSchema, config: FederationConfig) -> TypeClassification:
    """
    Validate a federation config against a schema and classify its types.

    Every configured type must exist in the schema. A resolveReference function
    and key fields are only legal on object types, `extend` on object and
    interface types, and every top-level key field must be a field of its type.

    Args:
        schema: The executable schema to federate.
        config: The validated federation config.
    Returns:
        TypeClassification: The configured types, with the entities exposed via `entities`.
    Raises:
        FederationConfigError: On the first illegal type configuration.
    """
    types: dict[str, FederatedType] = {}
    for type_name, type_config in config.items():
        graphql_type = schema.get_type(type_name)
        _check_type_config(type_name, graphql_type, type_config)
        types[type_name] = FederatedType(
            name=type_name,
            graphql_type=graphql_type,  # type: ignore[arg-type]
            config=type_config,
        )

    classification = TypeClassification(types=types)
    log.info(f"Found {len(classification.entities)} federation entities in {len(types)} configured types")
    log.debug(f"Entities: {', '.join(classification.entity_names) or '-'}")

    return classification
