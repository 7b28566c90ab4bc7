"""
timescope/scopes/binding.py

Binding layer: attaches scope operations to mapped classes.

Declaring a scope resolves its boundaries, classifies the pattern, stores a
ScopeDefinition in the class registry (``__time_scopes__``) and binds one
descriptor per operation name.  Descriptors hold only (scope name, kind) and
look the definition up in the registry on every call.

    class Event(InTimeScope, Base):
        __tablename__ = "events"
        ...

    Event.in_time_scope()
    Event.in_time_scope("published", prefix=True)

    select(Event).where(Event.in_time())          # SQL, t defaults to now
    event.in_time(datetime(2024, 6, 1))           # bool on an instance
    select(Price).where(Price.latest_in_time("user_id"))

TimeWindowMethod behaves like sqlalchemy.ext.hybrid.hybrid_method: on the
class (or an aliased() entity) it builds a filter fragment, on an instance it
evaluates to a bool.  GroupSelectMethod (latest / earliest) is class-level
only.

Re-declaring a scope name replaces the earlier definition (last writer
wins); operation names the new definition no longer provides are unbound.
"""
from __future__ import annotations

import types
from datetime import datetime
from typing import Any, ClassVar

import structlog
from sqlalchemy import ColumnElement, inspect

from timescope import clock
from timescope.database.schema import MetadataSchemaProbe, SchemaProbe
from timescope.errors import ConfigurationError
from timescope.models.scope import DEFAULT_SCOPE_NAME, ScopeDefinition, method_name
from timescope.scopes.classifier import classify
from timescope.scopes.predicates import InstancePredicates, SqlPredicates
from timescope.scopes.resolver import BoundaryInput, resolve_scope

logger = structlog.get_logger(__name__)

_REGISTRY_ATTR = "__time_scopes__"


def _instant(t: Any) -> Any:
    return clock.now() if t is None else t


class _ScopeOperation:
    def __init__(self, scope_name: str, kind: str) -> None:
        self.scope_name = scope_name
        self.kind = kind


class TimeWindowMethod(_ScopeOperation):
    """in_window / before / after / out_of_window for one scope."""

    def __init__(self, scope_name: str, kind: str) -> None:
        super().__init__(scope_name, kind)

        def expression(owner: Any, t: Any = None) -> ColumnElement[bool]:
            predicates = SqlPredicates(owner, _lookup(owner, scope_name))
            return getattr(predicates, kind)(_instant(t))

        def evaluate(instance: Any, t: datetime | None = None) -> bool:
            predicates = InstancePredicates(_lookup(type(instance), scope_name))
            return getattr(predicates, kind)(instance, _instant(t))

        self._expression = expression
        self._evaluate = evaluate

    def __get__(self, instance: Any, owner: Any) -> Any:
        # Bound methods let aliased() entities rebind the owner to the alias.
        if instance is None:
            return types.MethodType(self._expression, owner)
        return types.MethodType(self._evaluate, instance)


class GroupSelectMethod(_ScopeOperation):
    """latest / earliest row per group, for start-only and end-only scopes."""

    def __init__(self, scope_name: str, kind: str) -> None:
        super().__init__(scope_name, kind)

        def expression(owner: Any, foreign_key: Any, t: Any = None) -> ColumnElement[bool]:
            predicates = SqlPredicates(owner, _lookup(owner, scope_name))
            return getattr(predicates, kind)(foreign_key, _instant(t))

        self._expression = expression

    def __get__(self, instance: Any, owner: Any) -> Any:
        return types.MethodType(self._expression, owner)


_DESCRIPTORS = {
    "in_window": TimeWindowMethod,
    "before": TimeWindowMethod,
    "after": TimeWindowMethod,
    "out_of_window": TimeWindowMethod,
    "latest": GroupSelectMethod,
    "earliest": GroupSelectMethod,
}


def _lookup(owner: Any, scope_name: str) -> ScopeDefinition:
    return getattr(owner, _REGISTRY_ATTR)[scope_name]


def _registry_for_write(cls: type) -> dict[str, ScopeDefinition]:
    """Return cls's own registry, copying the inherited one on first write."""
    registry = cls.__dict__.get(_REGISTRY_ATTR)
    if registry is None:
        registry = dict(getattr(cls, _REGISTRY_ATTR, {}))
        setattr(cls, _REGISTRY_ATTR, registry)
    return registry


def _class_attribute(cls: type, name: str) -> Any:
    for klass in cls.__mro__:
        if name in klass.__dict__:
            return klass.__dict__[name]
    return None


def _check_free(cls: type, name: str, scope_name: str) -> None:
    # Must not touch mapper.attrs: that configures all mappers, and related
    # classes may not be declared yet.
    existing = _class_attribute(cls, name)
    if existing is None:
        return
    if not isinstance(existing, _ScopeOperation):
        raise ConfigurationError(
            f"Scope '{scope_name}' would shadow existing attribute '{name}' on {cls.__name__}"
        )
    if existing.scope_name != scope_name:
        raise ConfigurationError(
            f"Scope '{scope_name}' would shadow operation '{name}' of scope "
            f"'{existing.scope_name}' on {cls.__name__}"
        )


def _bind(cls: type, definition: ScopeDefinition, previous: ScopeDefinition | None) -> None:
    names = definition.operation_names
    for name in names.values():
        _check_free(cls, name, definition.name)

    if previous is not None:
        for stale in set(previous.operation_names.values()) - set(names.values()):
            if stale in cls.__dict__:
                delattr(cls, stale)

    for kind, name in names.items():
        setattr(cls, name, _DESCRIPTORS[kind](definition.name, kind))


def declare_scope(
    cls: type,
    scope_name: str = DEFAULT_SCOPE_NAME,
    *,
    start_at: BoundaryInput = None,
    end_at: BoundaryInput = None,
    prefix: bool = False,
    probe: SchemaProbe | None = None,
) -> ScopeDefinition:
    """Declare a time-window scope on a mapped class.

    Args:
        cls:        Mapped class receiving the operations.
        scope_name: "in_time" for the primary scope, any other identifier for
                    a named scope (default columns become
                    ``<scope_name>_start_at`` / ``<scope_name>_end_at``).
        start_at:   Start boundary options: ``{"column": ..., "null": ...}``.
                    ``{"column": None}`` disables the boundary.
        end_at:     End boundary options, same shape.
        prefix:     Name operations ``<scope_name>_in_time`` instead of
                    ``in_time_<scope_name>``.
        probe:      Schema probe for nullability; defaults to the model's
                    table metadata.

    Returns:
        The registered ScopeDefinition.

    Raises:
        ColumnNotFoundError: a boundary column does not exist (eager).
        ConfigurationError:  an operation name collides with an existing
                             attribute.  Invalid boundary combinations do
                             not raise here; their operations raise on use.
    """
    table = inspect(cls).local_table
    probe = probe or MetadataSchemaProbe(table.metadata)

    start, end = resolve_scope(scope_name, start_at, end_at, table=table.key, probe=probe)
    classification = classify(start, end)

    definition = ScopeDefinition(
        name=scope_name,
        method_name=method_name(scope_name, prefix),
        table=table.key,
        start=start,
        end=end,
        pattern=classification.pattern,
        error=classification.error,
        prefix=prefix,
    )

    registry = _registry_for_write(cls)
    previous = registry.get(scope_name)
    if previous is not None:
        logger.warning(
            "time_scope_redeclared",
            model=cls.__name__,
            scope=scope_name,
            previous_pattern=previous.pattern.value,
            pattern=definition.pattern.value,
        )

    _bind(cls, definition, previous)
    registry[scope_name] = definition

    if definition.valid:
        logger.debug(
            "time_scope_declared",
            model=cls.__name__,
            scope=scope_name,
            method=definition.method_name,
            pattern=definition.pattern.value,
        )
    else:
        logger.info(
            "time_scope_invalid",
            model=cls.__name__,
            scope=scope_name,
            pattern=definition.pattern.value,
            error=definition.error,
        )
    return definition


def in_time_scope(
    scope_name: str = DEFAULT_SCOPE_NAME,
    *,
    start_at: BoundaryInput = None,
    end_at: BoundaryInput = None,
    prefix: bool = False,
    probe: SchemaProbe | None = None,
):
    """Class decorator form of declare_scope()."""

    def decorator(cls: type) -> type:
        declare_scope(
            cls, scope_name, start_at=start_at, end_at=end_at, prefix=prefix, probe=probe
        )
        return cls

    return decorator


def time_scope_definitions(cls: type) -> list[ScopeDefinition]:
    """All scopes declared on cls (including inherited ones), in declaration order."""
    return list(getattr(cls, _REGISTRY_ATTR, {}).values())


class InTimeScope:
    """Opt-in mixin for declarative models."""

    __time_scopes__: ClassVar[dict[str, ScopeDefinition]] = {}

    @classmethod
    def in_time_scope(
        cls,
        scope_name: str = DEFAULT_SCOPE_NAME,
        *,
        start_at: BoundaryInput = None,
        end_at: BoundaryInput = None,
        prefix: bool = False,
        probe: SchemaProbe | None = None,
    ) -> ScopeDefinition:
        return declare_scope(
            cls, scope_name, start_at=start_at, end_at=end_at, prefix=prefix, probe=probe
        )

    @classmethod
    def time_scope_definitions(cls) -> list[ScopeDefinition]:
        return time_scope_definitions(cls)
