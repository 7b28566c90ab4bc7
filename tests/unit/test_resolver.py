"""
tests/unit/test_resolver.py

Configuration resolver and pattern classifier.

A recording probe stands in for the schema so each test can assert exactly
which columns were looked up.

Coverage
--------
  - explicit column None disables the boundary without a lookup
  - omitted column -> conventional default (scope-prefixed for named scopes)
  - explicit null trusted verbatim, no lookup
  - otherwise nullability comes from the probe
  - default column names follow settings
  - options accepted as dicts or BoundaryOptions; unknown keys rejected
  - classify(): every (start, end) shape and its error message
"""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from timescope.config import settings
from timescope.errors import ColumnNotFoundError
from timescope.models.schemas import BoundaryOptions
from timescope.models.scope import BoundaryConfig, Pattern
from timescope.scopes.classifier import (
    BOTH_DISABLED,
    END_ONLY_NULLABLE,
    START_ONLY_NULLABLE,
    classify,
)
from timescope.scopes.resolver import coerce_options, default_columns, resolve_boundary, resolve_scope


class _RecordingProbe:
    def __init__(self, columns: dict[str, bool]) -> None:
        self.columns = columns
        self.calls: list[tuple[str, str]] = []

    def column_nullable(self, table: str, column: str) -> bool:
        self.calls.append((table, column))
        if column not in self.columns:
            raise ColumnNotFoundError(column, table)
        return self.columns[column]


# ---------------------------------------------------------------------------
# BoundaryOptions
# ---------------------------------------------------------------------------

class TestBoundaryOptions:
    def test_omitted_column_is_not_disabled(self) -> None:
        assert coerce_options(None).disabled is False
        assert coerce_options({}).disabled is False
        assert coerce_options({"null": False}).disabled is False

    def test_explicit_none_disables(self) -> None:
        assert coerce_options({"column": None}).disabled is True
        assert BoundaryOptions(column=None).disabled is True

    def test_null_override_only_when_given(self) -> None:
        assert coerce_options({}).nullable_override is None
        assert coerce_options({"null": False}).nullable_override is False
        assert coerce_options({"null": True}).nullable_override is True

    def test_model_instance_passes_through(self) -> None:
        opts = BoundaryOptions(column="available_at")
        assert coerce_options(opts) is opts

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            coerce_options({"colum": "start_at"})


# ---------------------------------------------------------------------------
# resolve_boundary / resolve_scope
# ---------------------------------------------------------------------------

class TestResolveBoundary:
    def test_disabled_skips_probe(self) -> None:
        probe = _RecordingProbe({})
        config = resolve_boundary({"column": None}, default_column="start_at", table="t", probe=probe)
        assert config == BoundaryConfig.disabled()
        assert probe.calls == []

    def test_explicit_null_skips_probe(self) -> None:
        probe = _RecordingProbe({})
        config = resolve_boundary({"null": False}, default_column="start_at", table="t", probe=probe)
        assert config == BoundaryConfig("start_at", False)
        assert probe.calls == []

    def test_probe_decides_nullability(self) -> None:
        probe = _RecordingProbe({"available_at": True})
        config = resolve_boundary({"column": "available_at"}, default_column="start_at", table="t", probe=probe)
        assert config == BoundaryConfig("available_at", True)
        assert probe.calls == [("t", "available_at")]

    def test_missing_column_raises(self) -> None:
        with pytest.raises(ColumnNotFoundError, match="Column 'start_at' does not exist on table 't'"):
            resolve_boundary(None, default_column="start_at", table="t", probe=_RecordingProbe({}))


class TestResolveScope:
    def test_primary_scope_defaults(self) -> None:
        probe = _RecordingProbe({"start_at": True, "end_at": False})
        start, end = resolve_scope("in_time", None, None, table="events", probe=probe)
        assert (start, end) == (BoundaryConfig("start_at", True), BoundaryConfig("end_at", False))
        assert probe.calls == [("events", "start_at"), ("events", "end_at")]

    def test_named_scope_defaults(self) -> None:
        probe = _RecordingProbe({"published_start_at": False, "published_end_at": False})
        start, end = resolve_scope("published", None, None, table="articles", probe=probe)
        assert start.column == "published_start_at"
        assert end.column == "published_end_at"

    def test_default_columns_follow_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "start_column", "valid_from")
        monkeypatch.setattr(settings, "end_column", "valid_to")
        assert default_columns("in_time") == ("valid_from", "valid_to")
        assert default_columns("sale") == ("sale_valid_from", "sale_valid_to")


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------

_ON = BoundaryConfig("col", False)
_NULLABLE = BoundaryConfig("col", True)
_OFF = BoundaryConfig.disabled()


class TestClassify:
    @pytest.mark.parametrize(
        "start, end, pattern, error",
        [
            (_ON, _ON, Pattern.FULL, None),
            (_NULLABLE, _NULLABLE, Pattern.FULL, None),
            (_ON, _OFF, Pattern.START_ONLY, None),
            (_NULLABLE, _OFF, Pattern.START_ONLY, START_ONLY_NULLABLE),
            (_OFF, _ON, Pattern.END_ONLY, None),
            (_OFF, _NULLABLE, Pattern.END_ONLY, END_ONLY_NULLABLE),
            (_OFF, _OFF, Pattern.DISABLED, BOTH_DISABLED),
        ],
    )
    def test_shapes(self, start: BoundaryConfig, end: BoundaryConfig, pattern: Pattern, error: str | None) -> None:
        result = classify(start, end)
        assert result.pattern is pattern
        assert result.error == error
