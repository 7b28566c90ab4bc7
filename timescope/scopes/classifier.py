"""
timescope/scopes/classifier.py

Maps a resolved (start, end) pair to a Pattern.

Start-only and end-only scopes back the latest / earliest per-group
selection, which needs a gap-free ordering on the single boundary; a
nullable sole boundary is therefore reported as an error.  Errors are
returned, not raised: the binding layer defers them to first use.
"""
from __future__ import annotations

from dataclasses import dataclass

from timescope.models.scope import BoundaryConfig, Pattern

BOTH_DISABLED = "At least one of start_at or end_at must be specified"
START_ONLY_NULLABLE = (
    "Start-only pattern requires non-nullable column. "
    "Set `start_at: {null: false}` or add an end_at column"
)
END_ONLY_NULLABLE = (
    "End-only pattern requires non-nullable column. "
    "Set `end_at: {null: false}` or add a start_at column"
)


@dataclass(frozen=True)
class Classification:
    pattern: Pattern
    error: str | None = None


def classify(start: BoundaryConfig, end: BoundaryConfig) -> Classification:
    if not start.enabled and not end.enabled:
        return Classification(Pattern.DISABLED, BOTH_DISABLED)

    if not end.enabled:
        return Classification(
            Pattern.START_ONLY, START_ONLY_NULLABLE if start.nullable else None
        )

    if not start.enabled:
        return Classification(
            Pattern.END_ONLY, END_ONLY_NULLABLE if end.nullable else None
        )

    return Classification(Pattern.FULL)
