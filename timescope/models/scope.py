"""
timescope/models/scope.py

Immutable records produced when a scope is declared.

BoundaryConfig   one resolved edge (start or end) of a validity window
Pattern          the shape of a scope: FULL, START_ONLY, END_ONLY, DISABLED
ScopeDefinition  everything the binding layer needs to build operations

A ScopeDefinition is built once per declaration and never re-resolved; the
evaluation instant is supplied per call, never stored here.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass

# Reserved name of the primary scope; also the stem of every operation name.
DEFAULT_SCOPE_NAME = "in_time"
_OUT_OF_WINDOW = "out_of_time"


def _styled(stem: str, scope_name: str, prefix: bool) -> str:
    if scope_name == DEFAULT_SCOPE_NAME:
        return stem
    return f"{scope_name}_{stem}" if prefix else f"{stem}_{scope_name}"


def method_name(scope_name: str, prefix: bool = False) -> str:
    """Name of the in-window operation for a scope.

    >>> method_name("in_time")
    'in_time'
    >>> method_name("published")
    'in_time_published'
    >>> method_name("published", prefix=True)
    'published_in_time'
    """
    return _styled(DEFAULT_SCOPE_NAME, scope_name, prefix)


@dataclass(frozen=True)
class BoundaryConfig:
    """A resolved boundary.  ``column`` None means unbounded on that side."""

    column: str | None = None
    nullable: bool | None = None

    @classmethod
    def disabled(cls) -> BoundaryConfig:
        return cls(column=None, nullable=None)

    @property
    def enabled(self) -> bool:
        return self.column is not None


class Pattern(str, enum.Enum):
    FULL = "full"
    START_ONLY = "start_only"
    END_ONLY = "end_only"
    DISABLED = "disabled"


@dataclass(frozen=True)
class ScopeDefinition:
    """One named time-window scope on a model.

    Attributes:
        name:        Declared scope name ("in_time" for the primary scope).
        method_name: Name of the in-window operation bound on the model.
        table:       Table the boundaries were resolved against.
        start:       Resolved start boundary.
        end:         Resolved end boundary.
        pattern:     Classification of (start, end).
        error:       Message raised on use when the configuration is invalid.
        prefix:      True when named with ``<name>_in_time`` style.
    """

    name: str
    method_name: str
    table: str
    start: BoundaryConfig
    end: BoundaryConfig
    pattern: Pattern
    error: str | None = None
    prefix: bool = False

    @property
    def valid(self) -> bool:
        return self.error is None

    @property
    def supports_latest(self) -> bool:
        return self.pattern in (Pattern.START_ONLY, Pattern.END_ONLY)

    @property
    def sort_boundary(self) -> BoundaryConfig | None:
        """Boundary ordering rows for latest / earliest selection."""
        if self.pattern is Pattern.START_ONLY:
            return self.start
        if self.pattern is Pattern.END_ONLY:
            return self.end
        return None

    @property
    def operation_names(self) -> dict[str, str]:
        """Operation kind -> attribute name bound on the model."""
        base = self.method_name
        names = {
            "in_window": base,
            "before": f"before_{base}",
            "after": f"after_{base}",
            "out_of_window": _styled(_OUT_OF_WINDOW, self.name, self.prefix),
        }
        if self.supports_latest:
            names["latest"] = f"latest_{base}"
            names["earliest"] = f"earliest_{base}"
        return names
