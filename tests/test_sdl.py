from typing import Any

from graphql import GraphQLSchema, build_schema, print_ast, print_schema

from transform_federation.classifier import classify_types
from transform_federation.config import parse_federation_config
from transform_federation.sdl import (
    ServiceDescriptor,
    build_federation_directive_map,
    build_service_descriptor,
    get_federation_directives,
    print_federated_sdl,
)
from transform_federation.transform import transform_schema_federation


def federated_sdl(schema: GraphQLSchema, raw_config: dict[str, Any]) -> str:
    return print_federated_sdl(schema, classify_types(schema, parse_federation_config(raw_config)))


def test_key_directive_on_single_entity(product_schema: GraphQLSchema) -> None:
    sdl = federated_sdl(product_schema, {"Product": {"keyFields": ["id"]}})

    assert sdl == 'type Product @key(fields: "id") {\n  id: ID!\n  name: String!\n}\n'


def test_extends_directive_follows_keys(product_schema: GraphQLSchema) -> None:
    sdl = federated_sdl(product_schema, {"Product": {"keyFields": ["id"], "extend": True}})

    assert sdl.startswith('type Product @key(fields: "id") @extends {\n')


def test_extend_without_keys(product_schema: GraphQLSchema) -> None:
    sdl = federated_sdl(product_schema, {"Product": {"extend": True}})

    assert sdl.startswith("type Product @extends {\n")
    assert "@key" not in sdl


def test_multi_field_key_is_space_joined() -> None:
    schema = build_schema("type Variant { sku: String! region: String! color: String }")

    sdl = federated_sdl(schema, {"Variant": {"keyFields": ["sku", "region"]}})

    assert sdl.startswith('type Variant @key(fields: "sku region") {')


def test_one_key_directive_per_key_set() -> None:
    schema = build_schema("type Product { id: ID! sku: String! upc: String! }")

    sdl = federated_sdl(schema, {"Product": {"keyFields": [["id"], ["sku", "upc"]]}})

    assert sdl.startswith('type Product @key(fields: "id") @key(fields: "sku upc") {')
    assert sdl.count("@key") == 2


def test_unconfigured_declarations_are_unchanged() -> None:
    type_defs = (
        '"""A product in the catalog"""\n'
        "type Product {\n"
        "  id: ID!\n"
        "  price(currency: String = \"EUR\"): Float @deprecated(reason: \"Use offers\")\n"
        "}\n"
        "\n"
        "enum Currency {\n"
        "  EUR\n"
        "  USD\n"
        "}\n"
        "\n"
        "input ProductFilter {\n"
        "  currency: Currency\n"
        "}\n"
        "\n"
        "type Query {\n"
        "  products(filter: ProductFilter): [Product!]!\n"
        "}"
    )
    schema = build_schema(type_defs)

    sdl = federated_sdl(schema, {"Product": {"keyFields": ["id"]}})

    expected = type_defs.replace("type Product {", 'type Product @key(fields: "id") {')
    assert sdl == expected + "\n"


def test_sdl_ends_with_single_newline(product_schema: GraphQLSchema) -> None:
    sdl = federated_sdl(product_schema, {"Product": {"keyFields": ["id"]}})

    assert sdl.endswith("}\n")
    assert not sdl.endswith("\n\n")


def test_applied_directives_are_restored() -> None:
    schema = build_schema(
        """
        directive @tag(name: String!) repeatable on OBJECT | FIELD_DEFINITION | ENUM_VALUE | INPUT_FIELD_DEFINITION

        type Product @tag(name: "catalog") {
          id: ID!
          name: String @tag(name: "public")
        }

        enum Color {
          RED @tag(name: "warm")
          BLUE
        }

        input ProductInput {
          name: String @tag(name: "input")
        }
        """
    )

    sdl = federated_sdl(schema, {"Product": {"keyFields": ["id"]}})

    assert "directive @tag(name: String!) repeatable on" in sdl
    assert 'type Product @tag(name: "catalog") @key(fields: "id") {' in sdl
    assert '  name: String @tag(name: "public")' in sdl
    assert '  RED @tag(name: "warm")' in sdl
    assert "  BLUE\n" in sdl
    assert '  name: String @tag(name: "input")' in sdl


def test_existing_key_directive_is_not_duplicated() -> None:
    schema = build_schema(
        """
        directive @key(fields: String!) repeatable on OBJECT | INTERFACE

        type Product @key(fields: "id") {
          id: ID!
          sku: String!
        }
        """
    )

    sdl = federated_sdl(schema, {"Product": {"keyFields": [["id"], ["sku"]]}})

    assert sdl == 'type Product @key(fields: "id") @key(fields: "sku") {\n  id: ID!\n  sku: String!\n}\n'


def test_federation_definitions_are_left_out() -> None:
    schema = build_schema(
        """
        type Product { id: ID! }
        type Query { topProducts: [Product!]! }
        """
    )
    federated = transform_schema_federation(schema, {"Product": {"keyFields": ["id"]}})

    sdl = federated_sdl(federated, {"Product": {"keyFields": ["id"]}})

    assert sdl == (
        'type Product @key(fields: "id") {\n  id: ID!\n}\n\ntype Query {\n  topProducts: [Product!]!\n}\n'
    )


def test_query_type_with_only_federation_fields_is_left_out(product_schema: GraphQLSchema) -> None:
    federated = transform_schema_federation(product_schema, {"Product": {"keyFields": ["id"]}})

    sdl = federated_sdl(federated, {"Product": {"keyFields": ["id"]}})

    assert "Query" not in sdl
    assert sdl == federated_sdl(product_schema, {"Product": {"keyFields": ["id"]}})


def test_empty_schema() -> None:
    schema = GraphQLSchema()

    assert federated_sdl(schema, {}) == ""


def test_service_descriptor(product_schema: GraphQLSchema) -> None:
    classification = classify_types(product_schema, parse_federation_config({"Product": {"keyFields": ["id"]}}))

    descriptor = build_service_descriptor(product_schema, classification)

    assert isinstance(descriptor, ServiceDescriptor)
    assert descriptor.sdl == print_federated_sdl(product_schema, classification)


def test_get_federation_directives() -> None:
    config = parse_federation_config({"Product": {"keyFields": [["id"], ["sku"]], "extend": True}})["Product"]

    directives = get_federation_directives(config)

    assert [d.name.value for d in directives] == ["key", "key", "extends"]


DESCRIBED_TYPE_DEFS = '''
"""A product in the catalog"""
type Product {
  "The id"
  id: ID!

  """
  Display name,
  localized for the viewer
  """
  name(
    "Language of the name"
    locale: String = "en"
    fallback: Boolean
  ): String
}

interface Node {
  "Globally unique"
  id: ID!
}

enum Currency {
  "Euro"
  EUR

  """
  US dollar
  """
  USD
}

input ProductFilter {
  name: String

  "Only products in this currency"
  currency: Currency
}

type Query {
  "The best selling products"
  topProducts: [Product!]!
}
'''


def test_described_definitions_are_printed_like_print_schema() -> None:
    schema = build_schema(DESCRIBED_TYPE_DEFS)

    assert federated_sdl(schema, {}) == print_schema(schema) + "\n"


def test_key_directive_on_described_type_changes_only_the_declaration_line() -> None:
    schema = build_schema(DESCRIBED_TYPE_DEFS)

    sdl = federated_sdl(schema, {"Product": {"keyFields": ["id"], "extend": True}})

    expected = print_schema(schema).replace("type Product {", 'type Product @key(fields: "id") @extends {')
    assert sdl == expected + "\n"
    assert '  """The id"""\n  id: ID!\n\n  """\n  Display name,\n' in sdl


def test_directives_follow_implemented_interfaces() -> None:
    schema = build_schema(
        """
        interface Node { id: ID! }
        type Product implements Node { id: ID! }
        union SearchResult = Product
        """
    )

    sdl = federated_sdl(schema, {"Product": {"keyFields": ["id"]}, "Node": {"extend": True}})

    assert 'type Product implements Node @key(fields: "id") {' in sdl
    assert "interface Node @extends {" in sdl
    assert "union SearchResult = Product\n" in sdl


def test_custom_root_query_left_without_fields_is_left_out_of_schema_definition() -> None:
    schema = build_schema(
        """
        schema { query: RootQuery }
        type RootQuery
        type Product { id: ID! }
        """
    )
    federated = transform_schema_federation(schema, {"Product": {"keyFields": ["id"]}})

    sdl = federated_sdl(federated, {"Product": {"keyFields": ["id"]}})

    assert sdl == 'type Product @key(fields: "id") {\n  id: ID!\n}\n'


def test_custom_root_query_keeps_schema_definition() -> None:
    schema = build_schema(
        """
        schema { query: RootQuery }
        type RootQuery { version: String }
        type Product { id: ID! }
        """
    )
    federated = transform_schema_federation(schema, {"Product": {"keyFields": ["id"]}})

    sdl = federated_sdl(federated, {"Product": {"keyFields": ["id"]}})

    assert sdl.startswith("schema {\n  query: RootQuery\n}\n\ntype RootQuery {\n  version: String\n}\n")


def test_federation_directive_map() -> None:
    schema = build_schema(
        """
        directive @tag(name: String!) on OBJECT | FIELD_DEFINITION | ENUM_VALUE
        type Product @tag(name: "catalog") { id: ID! @tag(name: "key") sku: String }
        enum Color { RED @tag(name: "warm") BLUE }
        """
    )
    classification = classify_types(schema, parse_federation_config({"Product": {"keyFields": ["id"]}}))

    directive_map = build_federation_directive_map(schema, classification)

    assert {key: [print_ast(d) for d in directives] for key, directives in directive_map.items()} == {
        "Product": ['@tag(name: "catalog")', '@key(fields: "id")'],
        ("Product", "id"): ['@tag(name: "key")'],
        ("Color", "RED"): ['@tag(name: "warm")'],
    }
