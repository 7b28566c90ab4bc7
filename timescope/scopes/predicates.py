"""
timescope/scopes/predicates.py

Predicate builder.

Every operation is assembled from one pair of boundary tests:

    start_ok(col, t):  col <= t            (start is inclusive)
    end_ok(col, t):    col >  t            (end is exclusive)

with ``col IS NULL`` OR-ed in when the column is nullable (NULL means
unbounded on that side).  Adjacent windows [a, b) and [b, c) therefore
partition time with no overlap and no gap.  A disabled boundary drops its
term entirely.

    in_window      = start_ok AND end_ok
    before         = NOT start_ok        -> col > t, NULL excluded
    after          = NOT end_ok          -> col <= t, NULL excluded
    out_of_window  = before OR after     == NOT in_window

SqlPredicates renders these as SQLAlchemy filter fragments against a mapped
class (or an aliased() entity).  InstancePredicates evaluates the same terms
in Python against one object's attribute values.  Both refuse to build
anything for an invalid ScopeDefinition.

Latest / earliest per group (start-only and end-only scopes only) are
correlated NOT EXISTS filters rather than ORDER BY + LIMIT, so they stay
valid inside eager loads:

    in_window(t) AND NOT EXISTS (
        SELECT * FROM tbl AS other
        WHERE other.fk = tbl.fk
          AND <other in_window(t)>
          AND other.col > tbl.col          -- "<" for earliest
          AND other.pk <> tbl.pk
    )

Rows tied on the boundary value within a group all survive; picking one is
left to a unique constraint on (fk, col).
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import ColumnElement, and_, exists, false, inspect, or_, true
from sqlalchemy.orm import Mapper, QueryableAttribute, aliased

from timescope.errors import ColumnNotFoundError, ConfigurationError
from timescope.models.scope import BoundaryConfig, ScopeDefinition


def _attribute_key(mapper: Mapper[Any], column: str) -> str:
    """Map a table column name to the attribute key it is mapped under."""
    for prop in mapper.column_attrs:
        if any(getattr(col, "name", None) == column for col in prop.columns):
            return prop.key
    raise ColumnNotFoundError(column, mapper.local_table.name)


class _Predicates:
    def __init__(self, definition: ScopeDefinition) -> None:
        self.definition = definition

    def _check(self) -> None:
        if not self.definition.valid:
            raise ConfigurationError(self.definition.error)


# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

class SqlPredicates(_Predicates):
    """Filter fragments for a mapped class or aliased entity."""

    def __init__(self, entity: Any, definition: ScopeDefinition) -> None:
        super().__init__(definition)
        self.entity = entity
        insp = inspect(entity)
        self.mapper: Mapper[Any] = insp.mapper

    def _attr(self, column: str) -> QueryableAttribute[Any]:
        return getattr(self.entity, _attribute_key(self.mapper, column))

    def _start_ok(self, t: Any) -> ColumnElement[bool]:
        return self._boundary_ok(self.definition.start, t, inclusive=True)

    def _end_ok(self, t: Any) -> ColumnElement[bool]:
        return self._boundary_ok(self.definition.end, t, inclusive=False)

    def _boundary_ok(self, boundary: BoundaryConfig, t: Any, *, inclusive: bool) -> ColumnElement[bool]:
        if not boundary.enabled:
            return true()
        col = self._attr(boundary.column)
        clause = col <= t if inclusive else col > t
        if boundary.nullable:
            return or_(col.is_(None), clause)
        return clause

    def in_window(self, t: Any) -> ColumnElement[bool]:
        self._check()
        return and_(self._start_ok(t), self._end_ok(t))

    def before(self, t: Any) -> ColumnElement[bool]:
        self._check()
        start = self.definition.start
        if not start.enabled:
            return false()
        return self._attr(start.column) > t

    def after(self, t: Any) -> ColumnElement[bool]:
        self._check()
        end = self.definition.end
        if not end.enabled:
            return false()
        return self._attr(end.column) <= t

    def out_of_window(self, t: Any) -> ColumnElement[bool]:
        return or_(self.before(t), self.after(t))

    def latest(self, foreign_key: Any, t: Any) -> ColumnElement[bool]:
        return self._one_per_group(foreign_key, t, later=True)

    def earliest(self, foreign_key: Any, t: Any) -> ColumnElement[bool]:
        return self._one_per_group(foreign_key, t, later=False)

    def _group_key(self, foreign_key: Any) -> str:
        if isinstance(foreign_key, QueryableAttribute):
            return foreign_key.key
        if foreign_key in self.mapper.attrs:
            return foreign_key
        return _attribute_key(self.mapper, foreign_key)

    def _one_per_group(self, foreign_key: Any, t: Any, *, later: bool) -> ColumnElement[bool]:
        self._check()
        boundary = self.definition.sort_boundary
        if boundary is None:
            raise ConfigurationError(
                f"latest/earliest are only defined for start-only or end-only scopes; "
                f"'{self.definition.name}' is {self.definition.pattern.value}"
            )

        other = aliased(self.entity)
        rival = SqlPredicates(other, self.definition)

        key = self._group_key(foreign_key)
        mine = self._attr(boundary.column)
        theirs = rival._attr(boundary.column)
        ordering = theirs > mine if later else theirs < mine

        pk_keys = [self.mapper.get_property_by_column(col).key for col in self.mapper.primary_key]
        not_self = or_(*(getattr(other, k) != getattr(self.entity, k) for k in pk_keys))

        newer_or_older = exists().where(
            getattr(other, key) == getattr(self.entity, key),
            rival.in_window(t),
            ordering,
            not_self,
        )
        return and_(self.in_window(t), ~newer_or_older)


# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------

class InstancePredicates(_Predicates):
    """The same predicates evaluated against a single object.

    A None attribute is treated as unbounded whatever the declared
    nullability, so unsaved objects never raise on comparison.

    Naive values are taken to be UTC when compared with an aware instant
    (and the reverse), matching what a plain DateTime column holds.
    """

    def _value(self, obj: Any, column: str) -> datetime | None:
        mapper = inspect(type(obj), raiseerr=False)
        key = _attribute_key(mapper, column) if isinstance(mapper, Mapper) else column
        return getattr(obj, key)

    @staticmethod
    def _aligned(value: datetime, t: datetime) -> datetime:
        """Return t with the same awareness as value."""
        if value.tzinfo is None and t.tzinfo is not None:
            return t.astimezone(timezone.utc).replace(tzinfo=None)
        if value.tzinfo is not None and t.tzinfo is None:
            return t.replace(tzinfo=timezone.utc)
        return t

    def _start_ok(self, obj: Any, t: datetime) -> bool:
        start = self.definition.start
        if not start.enabled:
            return True
        value = self._value(obj, start.column)
        return value is None or value <= self._aligned(value, t)

    def _end_ok(self, obj: Any, t: datetime) -> bool:
        end = self.definition.end
        if not end.enabled:
            return True
        value = self._value(obj, end.column)
        return value is None or value > self._aligned(value, t)

    def in_window(self, obj: Any, t: datetime) -> bool:
        self._check()
        return self._start_ok(obj, t) and self._end_ok(obj, t)

    def before(self, obj: Any, t: datetime) -> bool:
        self._check()
        return not self._start_ok(obj, t)

    def after(self, obj: Any, t: datetime) -> bool:
        self._check()
        return not self._end_ok(obj, t)

    def out_of_window(self, obj: Any, t: datetime) -> bool:
        return self.before(obj, t) or self.after(obj, t)
