"""
timescope/scopes

Scope engine: resolver -> classifier -> predicate builder -> binding.
"""
from timescope.scopes.binding import (
    GroupSelectMethod,
    InTimeScope,
    TimeWindowMethod,
    declare_scope,
    in_time_scope,
    time_scope_definitions,
)

__all__ = [
    "GroupSelectMethod",
    "InTimeScope",
    "TimeWindowMethod",
    "declare_scope",
    "in_time_scope",
    "time_scope_definitions",
]
