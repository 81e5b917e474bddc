import asyncio
from collections.abc import Awaitable, Mapping, Sequence
from inspect import isawaitable
from typing import Any

from graphql import GraphQLResolveInfo, is_object_type

from transform_federation import log
from transform_federation.classifier import FederatedType, TypeClassification
from transform_federation.errors import EntityResolutionError, EntityResolutionErrorMessages
from transform_federation.utils.directive import get_key_field_names, join_key_fields
from transform_federation.utils.graphql_type import TYPENAME_KEY


def get_typename(representation: Any) -> str:
    """Read the `__typename` discriminator of an entity representation."""
    if not isinstance(representation, Mapping):
        kind = type(representation).__name__
        raise EntityResolutionError(EntityResolutionErrorMessages.NOT_A_MAPPING.format(kind=kind))

    type_name = representation.get(TYPENAME_KEY)
    if not isinstance(type_name, str) or not type_name:
        raise EntityResolutionError(EntityResolutionErrorMessages.MISSING_TYPENAME)
    return type_name


def check_key_fields(federated_type: FederatedType, representation: Mapping[str, Any]) -> None:
    """Ensure a representation holds the top-level fields of at least one key set of its type."""
    key_sets = federated_type.config.key_fields
    if not key_sets:
        return

    for key_set in key_sets:
        if all(field_name in representation for field_name in get_key_field_names(key_set)):
            return

    keys = " or ".join(f'"{join_key_fields(key_set)}"' for key_set in key_sets)
    raise EntityResolutionError(
        EntityResolutionErrorMessages.MISSING_KEY_FIELDS.format(name=federated_type.name, keys=keys)
    )


def tag_entity(entity: Any, type_name: str) -> Any:
    """
    Tag a resolved entity with its type name for the `_Entity` type resolution.

    Mappings are copied with a `__typename` entry. Other objects get a
    `__typename` attribute where they accept one; the ones that do not rely on
    the `is_type_of` checks of the union members.
    """
    if entity is None:
        return None
    if isinstance(entity, Mapping):
        return {**entity, TYPENAME_KEY: type_name}
    try:
        setattr(entity, TYPENAME_KEY, type_name)
    except (AttributeError, TypeError):
        log.debug(f"Could not tag {type(entity).__name__} entity with {TYPENAME_KEY} '{type_name}'")
    return entity


async def gather_entities(results: Sequence[Any]) -> list[Any]:
    """
    Await the pending entity results together, keeping their positions.

    Every awaitable is started before any is awaited. A failing result becomes
    its exception in the returned list instead of cancelling the others.
    """
    pending = [index for index, result in enumerate(results) if isawaitable(result)]
    outcomes = await asyncio.gather(*(results[index] for index in pending), return_exceptions=True)

    entities = list(results)
    for index, outcome in zip(pending, outcomes, strict=True):
        if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, Exception):
            log.warning(f"Failed to resolve entity at position {index}: {outcome}")
        entities[index] = outcome
    return entities


class EntitiesResolver:
    """
    Resolver of the `_entities` root field.

    Each representation is resolved on its own: by the `resolve_reference`
    function configured for its type, or as the representation itself. A
    failure is returned in place of its entity, which the executor reports as
    an error with a null at that position.
    """

    def __init__(self, classification: TypeClassification) -> None:
        self.classification = classification

    def __call__(
        self, _root: Any, info: GraphQLResolveInfo, representations: Sequence[Any]
    ) -> list[Any] | Awaitable[list[Any]]:
        log.debug(f"Resolving {len(representations)} entity representations")
        results = [self.resolve_representation(representation, info) for representation in representations]

        if any(isawaitable(result) for result in results):
            return gather_entities(results)
        return results

    def lookup(self, type_name: str, info: GraphQLResolveInfo) -> FederatedType | None:
        """
        Find the federation settings of a representation's type.

        Returns None for an object type of the schema without federation
        settings, which resolves to the representation itself.
        """
        federated_type = self.classification.get(type_name)
        if federated_type is not None:
            return federated_type

        graphql_type = info.schema.get_type(type_name)
        if graphql_type is None:
            raise EntityResolutionError(EntityResolutionErrorMessages.TYPE_NOT_DEFINED.format(name=type_name))
        if not is_object_type(graphql_type):
            raise EntityResolutionError(EntityResolutionErrorMessages.TYPE_NOT_OBJECT.format(name=type_name))
        return None

    def resolve_representation(self, representation: Any, info: GraphQLResolveInfo) -> Any:
        try:
            type_name = get_typename(representation)
            federated_type = self.lookup(type_name, info)

            resolve_reference = None
            if federated_type is not None:
                check_key_fields(federated_type, representation)
                resolve_reference = federated_type.config.resolve_reference

            if resolve_reference is None:
                log.debug(f"Resolving {type_name} representation to itself")
                return tag_entity(representation, type_name)

            result = resolve_reference(representation, info.context, info)
        except Exception as error:
            log.warning(f"Failed to resolve entity representation: {error}")
            return error

        if isawaitable(result):
            return self._tag_when_resolved(result, type_name)
        return tag_entity(result, type_name)

    @staticmethod
    async def _tag_when_resolved(result: Awaitable[Any], type_name: str) -> Any:
        return tag_entity(await result, type_name)
