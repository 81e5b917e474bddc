TYPENAME_KEY = "__typename"

ANY_SCALAR_NAME = "_Any"
FIELD_SET_SCALAR_NAME = "_FieldSet"
SERVICE_TYPE_NAME = "_Service"
ENTITY_UNION_NAME = "_Entity"

SERVICE_FIELD_NAME = "_service"
ENTITIES_FIELD_NAME = "_entities"

KEY_DIRECTIVE_NAME = "key"
EXTENDS_DIRECTIVE_NAME = "extends"

FEDERATION_TYPE_NAMES = frozenset(
    {
        ANY_SCALAR_NAME,
        FIELD_SET_SCALAR_NAME,
        SERVICE_TYPE_NAME,
        ENTITY_UNION_NAME,
    }
)
FEDERATION_FIELD_NAMES = frozenset({SERVICE_FIELD_NAME, ENTITIES_FIELD_NAME})
FEDERATION_DIRECTIVE_NAMES = frozenset(
    {
        KEY_DIRECTIVE_NAME,
        EXTENDS_DIRECTIVE_NAME,
        "external",
        "requires",
        "provides",
    }
)


def is_federation_type(type_name: str) -> bool:
    return type_name in FEDERATION_TYPE_NAMES


def is_federation_field(field_name: str) -> bool:
    return field_name in FEDERATION_FIELD_NAMES


def is_federation_directive(directive_name: str) -> bool:
    return directive_name in FEDERATION_DIRECTIVE_NAMES
