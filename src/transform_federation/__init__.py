from transform_federation.logger import get_logger

__version__ = "0.3.0"

log = get_logger("transform_federation")

from transform_federation.config import (  # noqa: E402
    FederationConfig,
    TypeFederationConfig,
    load_federation_config,
    parse_federation_config,
)
from transform_federation.errors import EntityResolutionError, FederationConfigError  # noqa: E402
from transform_federation.transform import transform_schema_federation  # noqa: E402

__all__ = [
    "EntityResolutionError",
    "FederationConfig",
    "FederationConfigError",
    "TypeFederationConfig",
    "load_federation_config",
    "log",
    "parse_federation_config",
    "transform_schema_federation",
]
