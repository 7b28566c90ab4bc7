"""
timescope/errors.py

Exception hierarchy.

ColumnNotFoundError
    Raised while a scope is being declared, when a boundary column does not
    exist on the model's table.  A broken declaration fails at import time.

ConfigurationError
    Raised every time an operation of an invalid scope is called (both
    boundaries disabled, or a start-only / end-only scope whose sole
    boundary is nullable).  Declaring such a scope is allowed.
"""
from __future__ import annotations


class Error(Exception):
    """Base class for every timescope error."""


class ColumnNotFoundError(Error):
    def __init__(self, column: str, table: str) -> None:
        self.column = column
        self.table = table
        super().__init__(f"Column '{column}' does not exist on table '{table}'")


class ConfigurationError(Error):
    pass
