"""
timescope/database/schema.py

Schema probes: answer "does this column exist, and is it nullable?".

MetadataSchemaProbe
    Reads the SQLAlchemy MetaData the model was declared against.  This is
    the default probe; it needs no database connection.

ReflectedSchemaProbe
    Reflects the live database through sqlalchemy.inspect().  Reflected
    columns are cached per (engine, schema, table) for the lifetime of the
    process, since the schema is assumed not to change while it runs.
    Call clear_cache() after a migration in long-lived processes.

Both raise ColumnNotFoundError for a missing column (or a missing table).
"""
from __future__ import annotations

from functools import lru_cache
from typing import Protocol

import structlog
from sqlalchemy import MetaData, inspect
from sqlalchemy.engine import Engine

from timescope.errors import ColumnNotFoundError

logger = structlog.get_logger(__name__)


class SchemaProbe(Protocol):
    def column_nullable(self, table: str, column: str) -> bool:
        """Return the column's nullability or raise ColumnNotFoundError."""
        ...


class MetadataSchemaProbe:
    """Probe backed by declared table metadata."""

    def __init__(self, metadata: MetaData) -> None:
        self._metadata = metadata

    def column_nullable(self, table: str, column: str) -> bool:
        tbl = self._metadata.tables.get(table)
        col = tbl.c.get(column) if tbl is not None else None
        if col is None:
            raise ColumnNotFoundError(column, table)
        return bool(col.nullable)


@lru_cache(maxsize=None)
def _reflect_columns(engine: Engine, table: str, schema: str | None) -> dict[str, bool]:
    inspector = inspect(engine)
    if not inspector.has_table(table, schema=schema):
        logger.warning("schema_table_missing", table=table, schema=schema)
        return {}
    columns = {
        col["name"]: bool(col["nullable"])
        for col in inspector.get_columns(table, schema=schema)
    }
    logger.debug("schema_reflected", table=table, schema=schema, columns=len(columns))
    return columns


def clear_cache() -> None:
    """Forget every reflected table."""
    _reflect_columns.cache_clear()


class ReflectedSchemaProbe:
    """Probe backed by the live database schema."""

    def __init__(self, engine: Engine, *, schema: str | None = None) -> None:
        self._engine = engine
        self._schema = schema

    def column_nullable(self, table: str, column: str) -> bool:
        columns = _reflect_columns(self._engine, table, self._schema)
        if column not in columns:
            raise ColumnNotFoundError(column, table)
        return columns[column]
