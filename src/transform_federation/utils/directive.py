import re
from collections.abc import Iterable, Sequence
from typing import Any

from graphql import (
    ArgumentNode,
    DirectiveNode,
    NameNode,
    StringValueNode,
    print_ast,
)

from transform_federation.utils.graphql_type import EXTENDS_DIRECTIVE_NAME, KEY_DIRECTIVE_NAME

# Directives that graphql-core's print_schema already renders on its own
PRINTED_DIRECTIVE_NAMES = frozenset({"deprecated", "specifiedBy", "oneOf"})

KEY_FIELD_TOKEN_PATTERN = re.compile(r"[{}]|[_A-Za-z][_0-9A-Za-z]*")


def join_key_fields(key_set: Sequence[str]) -> str:
    """Join a key field set into the value of a `@key(fields: ...)` argument."""
    return " ".join(key_set)


def get_key_field_names(key_set: Sequence[str]) -> list[str]:
    """
    Extract the top-level field names selected by a key field set.

    Nested selections (e.g. `organization { id }`) contribute only their
    top-level field (`organization`).

    Args:
        key_set: The key field set, one entry per field or raw selection.
    Returns:
        list[str]: Unique top-level field names in declaration order.
    """
    names: list[str] = []
    depth = 0
    for token in KEY_FIELD_TOKEN_PATTERN.findall(join_key_fields(key_set)):
        if token == "{":
            depth += 1
        elif token == "}":
            depth -= 1
        elif depth == 0 and token not in names:
            names.append(token)
    return names


def build_key_directive(key_set: Sequence[str]) -> DirectiveNode:
    return DirectiveNode(
        name=NameNode(value=KEY_DIRECTIVE_NAME),
        arguments=(
            ArgumentNode(
                name=NameNode(value="fields"),
                value=StringValueNode(value=join_key_fields(key_set), block=False),
            ),
        ),
    )


def build_extends_directive() -> DirectiveNode:
    return DirectiveNode(name=NameNode(value=EXTENDS_DIRECTIVE_NAME), arguments=())


def get_applied_directives(element: Any) -> list[DirectiveNode]:
    """
    Collect the directives applied to a schema element in its source SDL.

    graphql-core keeps these only on the element's AST nodes, and print_schema
    does not render them. Directives print_schema does render are skipped.

    Args:
        element: A named type, field, input field or enum value of a schema.
    Returns:
        list[DirectiveNode]: The applied directives in source order.
    """
    nodes = [getattr(element, "ast_node", None), *(getattr(element, "extension_ast_nodes", None) or ())]
    directives: list[DirectiveNode] = []
    for node in nodes:
        if node is None or not getattr(node, "directives", None):
            continue
        directives.extend(d for d in node.directives if d.name.value not in PRINTED_DIRECTIVE_NAMES)
    return directives


def merge_directives(
    existing: Iterable[DirectiveNode], additions: Iterable[DirectiveNode]
) -> tuple[DirectiveNode, ...]:
    """Append directives that are not already present with identical arguments."""
    merged = list(existing)
    seen = {print_ast(directive) for directive in merged}
    for directive in additions:
        printed = print_ast(directive)
        if printed in seen:
            continue
        seen.add(printed)
        merged.append(directive)
    return tuple(merged)
