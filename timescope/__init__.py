from timescope.database.schema import MetadataSchemaProbe, ReflectedSchemaProbe, SchemaProbe
from timescope.errors import ColumnNotFoundError, ConfigurationError, Error
from timescope.models.schemas import BoundaryOptions
from timescope.models.scope import DEFAULT_SCOPE_NAME, BoundaryConfig, Pattern, ScopeDefinition
from timescope.scopes import (
    InTimeScope,
    declare_scope,
    in_time_scope,
    time_scope_definitions,
)

__all__ = [
    "DEFAULT_SCOPE_NAME",
    "BoundaryConfig",
    "BoundaryOptions",
    "ColumnNotFoundError",
    "ConfigurationError",
    "Error",
    "InTimeScope",
    "MetadataSchemaProbe",
    "Pattern",
    "ReflectedSchemaProbe",
    "SchemaProbe",
    "ScopeDefinition",
    "declare_scope",
    "in_time_scope",
    "time_scope_definitions",
]
