from collections.abc import Callable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field, ImportString, field_validator

from transform_federation import log

KeyFieldSet = tuple[str, ...]
ReferenceResolver = Callable[..., Any]


class TypeFederationConfig(BaseModel):
    """Federation settings of a single named type.

    Attributes:
        key_fields: Key field sets of the type, one `@key` directive each.
        extend: Whether the type extends a type owned by another service.
        resolve_reference: Called as `resolve_reference(representation, context, info)`
            to turn an `_entities` representation into an entity.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    key_fields: tuple[KeyFieldSet, ...] = Field(default=(), alias="keyFields")
    extend: bool = False
    resolve_reference: ImportString[ReferenceResolver] | None = Field(default=None, alias="resolveReference")

    @field_validator("key_fields", mode="before")
    @classmethod
    def normalize_key_fields(cls, value: Any) -> Any:
        """
        Normalize the accepted key field shapes into a tuple of key sets.

        - `None` or an empty list: no key
        - `"id organization { id }"`: one key set holding a raw selection
        - `["id", "sku"]`: one key set
        - `[["id"], ["sku", "region"]]`: one key set per item
        """
        if value is None:
            return ()
        if isinstance(value, str):
            return ((value,),)
        if not isinstance(value, list | tuple):
            return value
        if not any(isinstance(item, list | tuple) for item in value):
            return (tuple(value),) if value else ()

        key_sets = []
        for item in value:
            key_set = (item,) if isinstance(item, str) else tuple(item)
            if not key_set:
                raise ValueError("Key field sets must not be empty")
            key_sets.append(key_set)
        return tuple(key_sets)

    @property
    def is_entity(self) -> bool:
        return bool(self.key_fields)


FederationConfig = Mapping[str, TypeFederationConfig]


def parse_federation_config(raw: Mapping[str, Any]) -> FederationConfig:
    """
    Validate a federation config mapping.

    Args:
        raw: Mapping of type name to either a TypeFederationConfig or a plain
            mapping of its settings (camelCase or snake_case keys).
    Returns:
        FederationConfig: A read-only mapping of validated per-type settings.
    Raises:
        TypeError: If the config is not a mapping.
        ValidationError: If the settings of a type are malformed.
    """
    if not isinstance(raw, Mapping):
        raise TypeError(f"Federation config must be a mapping, got {type(raw).__name__}")

    config: dict[str, TypeFederationConfig] = {}
    for type_name, settings in raw.items():
        if isinstance(settings, TypeFederationConfig):
            config[type_name] = settings
        else:
            config[type_name] = TypeFederationConfig.model_validate(settings or {})

    log.debug(f"Parsed federation config for types: {', '.join(config) or '-'}")
    return MappingProxyType(config)


def load_federation_config(config_path: Path | None) -> FederationConfig:
    """
    Load and validate a federation config from a YAML file.

    Example:
        Product:
          keyFields: [id]
          resolveReference: my_service.references.resolve_product
        Review:
          keyFields: [[id], [author, createdAt]]
          extend: true

    Args:
        config_path: Path to the YAML file, or None for an empty config.
    Returns:
        FederationConfig: The validated config.
    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
        TypeError: If the YAML root is not a mapping.
        ValidationError: If validation against TypeFederationConfig fails.
    """
    if config_path is None:
        log.debug("No federation config provided")
        return MappingProxyType({})

    raw: Any
    with config_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    log.debug(f"Loaded federation config from {config_path}")

    if raw is None:
        return MappingProxyType({})

    if not isinstance(raw, dict):
        raise TypeError(f"Federation config root must be a mapping (YAML object), got {type(raw).__name__}")

    return parse_federation_config(cast(dict[str, Any], raw))
