class FederationConfigError(ValueError):
    """Raised at transform time when the federation config does not fit the schema.

    The transform call produces no schema when this is raised; the configuration
    must be fixed first.
    """


class EntityResolutionError(ValueError):
    """Raised for a single `_entities` representation that cannot be resolved.

    The error is reported at the position of the offending representation while
    its siblings resolve normally.
    """


class FederationConfigErrorMessages:
    """Standard messages for FederationConfigError exceptions."""

    RESOLVE_REFERENCE_NOT_OBJECT = "Type \"{name}\" is not an object type and can't have a resolveReference function."
    TYPE_NOT_DEFINED = 'Type "{name}" is not defined in the schema.'
    KEY_FIELDS_NOT_OBJECT = "Type \"{name}\" is not an object type and can't have key fields."
    EXTEND_NOT_OBJECT = "Type \"{name}\" is not an object or interface type and can't be extended."
    KEY_FIELD_UNKNOWN = 'Key field "{field}" is not a field of type "{name}".'


class EntityResolutionErrorMessages:
    """Standard messages for EntityResolutionError exceptions."""

    NOT_A_MAPPING = "Entity representation must be an object, got {kind}."
    MISSING_TYPENAME = 'Entity representation is missing a string "__typename" field.'
    TYPE_NOT_DEFINED = 'Type "{name}" is not defined in the schema.'
    TYPE_NOT_OBJECT = 'Type "{name}" is not an object type.'
    MISSING_KEY_FIELDS = 'Representation of "{name}" is missing key fields: {keys}'
