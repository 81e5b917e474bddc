from collections.abc import Mapping
from typing import Any

from graphql import GraphQLSchema

from transform_federation import log
from transform_federation.augment import augment_schema
from transform_federation.classifier import classify_types
from transform_federation.config import parse_federation_config
from transform_federation.sdl import build_service_descriptor


def transform_schema_federation(schema: GraphQLSchema, federation_config: Mapping[str, Any]) -> GraphQLSchema:
    """
    Turn an executable schema into a federation subgraph schema.

    Example:
        schema = transform_schema_federation(
            executable_schema,
            {
                "Product": {
                    "keyFields": ["id"],
                    "extend": True,
                    "resolveReference": lambda reference, context, info: {**reference, "name": "..."},
                },
            },
        )

    Args:
        schema: The executable schema, left unchanged.
        federation_config: Mapping of type name to its federation settings, see
            TypeFederationConfig.
    Returns:
        GraphQLSchema: The schema with the `_service` and `_entities` root fields.
    Raises:
        FederationConfigError: If the config does not fit the schema.
        ValidationError: If the settings of a type are malformed.
    """
    config = parse_federation_config(federation_config)
    classification = classify_types(schema, config)
    descriptor = build_service_descriptor(schema, classification)
    log.info("Successfully built the federated service SDL.")

    return augment_schema(schema, classification, descriptor)
