"""
timescope/scopes/resolver.py

Configuration resolver: turns user-supplied boundary options into
BoundaryConfig values.

Resolution order for one boundary
---------------------------------
1. ``column`` explicitly None      -> disabled, no schema lookup.
2. Effective column                 -> explicit ``column`` or the default
                                       ("start_at" / "end_at", prefixed with
                                       "<scope name>_" for named scopes).
3. ``null`` explicitly given        -> trusted as-is.
4. Otherwise                        -> asked from the schema probe, which
                                       raises ColumnNotFoundError for a
                                       missing column.

Step 4 runs at declaration time, so a misconfigured model fails on import.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from timescope.config import settings
from timescope.database.schema import SchemaProbe
from timescope.errors import ColumnNotFoundError
from timescope.models.schemas import BoundaryOptions
from timescope.models.scope import DEFAULT_SCOPE_NAME, BoundaryConfig

logger = structlog.get_logger(__name__)

BoundaryInput = BoundaryOptions | Mapping[str, Any] | None


def coerce_options(options: BoundaryInput) -> BoundaryOptions:
    """Accept a BoundaryOptions, a plain mapping, or None (all defaults)."""
    if options is None:
        return BoundaryOptions()
    if isinstance(options, BoundaryOptions):
        return options
    return BoundaryOptions.model_validate(dict(options))


def default_columns(scope_name: str) -> tuple[str, str]:
    """Conventional (start, end) column names for a scope."""
    prefix = "" if scope_name == DEFAULT_SCOPE_NAME else f"{scope_name}_"
    return f"{prefix}{settings.start_column}", f"{prefix}{settings.end_column}"


def resolve_boundary(
    options: BoundaryInput,
    *,
    default_column: str,
    table: str,
    probe: SchemaProbe,
) -> BoundaryConfig:
    opts = coerce_options(options)
    if opts.disabled:
        return BoundaryConfig.disabled()

    column = opts.column if opts.column is not None else default_column

    nullable = opts.nullable_override
    if nullable is None:
        try:
            nullable = probe.column_nullable(table, column)
        except ColumnNotFoundError:
            logger.error("time_scope_column_missing", table=table, column=column)
            raise

    return BoundaryConfig(column=column, nullable=nullable)


def resolve_scope(
    scope_name: str,
    start_at: BoundaryInput,
    end_at: BoundaryInput,
    *,
    table: str,
    probe: SchemaProbe,
) -> tuple[BoundaryConfig, BoundaryConfig]:
    """Resolve both boundaries of a scope declaration."""
    start_default, end_default = default_columns(scope_name)
    start = resolve_boundary(start_at, default_column=start_default, table=table, probe=probe)
    end = resolve_boundary(end_at, default_column=end_default, table=table, probe=probe)
    return start, end
