import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from ariadne import QueryType, gql, make_executable_schema
from graphql import ExecutionResult, GraphQLSchema, build_schema, graphql
from hypothesis import strategies as st
from hypothesis.strategies import composite

ENTITY_TYPE_NAMES = ["Product", "Review"]


class TestSchemaData:
    TESTS_DATA_DIR: Path = Path(__file__).parent / "data"
    PRODUCTS_SCHEMA: Path = TESTS_DATA_DIR / "products.graphql"
    REVIEWS_SCHEMA_DIR: Path = TESTS_DATA_DIR / "reviews"

    FEDERATION_CONFIG: Path = TESTS_DATA_DIR / "federation.yaml"
    MULTIPLE_KEYS_CONFIG: Path = TESTS_DATA_DIR / "multiple_keys.yaml"
    INVALID_RESOLVE_REFERENCE_CONFIG: Path = TESTS_DATA_DIR / "invalid_resolve_reference.yaml"
    UNKNOWN_KEY_FIELD_CONFIG: Path = TESTS_DATA_DIR / "unknown_key_field.yaml"
    MALFORMED_CONFIG: Path = TESTS_DATA_DIR / "malformed.yaml"


ENTITIES_QUERY = """
    query ($representations: [_Any!]!) {
        _entities(representations: $representations) {
            __typename
            ... on Product {
                id
                name
            }
            ... on Review {
                id
                body
            }
        }
    }
"""


def run_query(
    schema: GraphQLSchema,
    source: str,
    variables: dict[str, Any] | None = None,
    context: Any = None,
) -> ExecutionResult:
    """Execute a query with the async executor, as a federation gateway would call the service."""
    return asyncio.run(graphql(schema, source, variable_values=variables, context_value=context))


@pytest.fixture
def execute() -> Callable[..., ExecutionResult]:
    return run_query


@pytest.fixture
def product_schema() -> GraphQLSchema:
    return build_schema(
        """
        type Product {
          id: ID!
          name: String!
        }
        """
    )


@pytest.fixture
def catalog_schema() -> GraphQLSchema:
    """An executable schema with resolvers for Product and Review lookups."""
    type_defs = gql(
        """
        type Product {
          id: ID!
          sku: String
          name: String!
        }

        type Review {
          id: ID!
          body: String
        }

        type Query {
          productById(id: String!): Product!
          ping: String
        }
        """
    )
    query = QueryType()

    @query.field("productById")
    def resolve_product_by_id(*_: Any, id: str) -> dict[str, Any]:
        return {"id": id, "sku": f"SKU-{id}", "name": f"product{id}"}

    @query.field("ping")
    def resolve_ping(*_: Any) -> str:
        return "pong"

    return make_executable_schema(type_defs, query)


@composite
def representations_strategy(draw: Any, min_size: int = 0, max_size: int = 12) -> list[dict[str, Any]]:
    """Generates lists of Product/Review representations with unique ids, e.g.
    [{"__typename": "Review", "id": "r-0"}, {"__typename": "Product", "id": "p-1"}]
    """
    type_names = draw(st.lists(st.sampled_from(ENTITY_TYPE_NAMES), min_size=min_size, max_size=max_size))
    return [
        {"__typename": type_name, "id": f"{type_name[0].lower()}-{index}"} for index, type_name in enumerate(type_names)
    ]
