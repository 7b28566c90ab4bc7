"""
tests/conftest.py

Shared fixtures.

Every test gets a fresh in-memory SQLite database with the schema from
tests/models.py, so no running database server is required.  Timestamps
are naive (SQLite stores DateTime without a zone), so `frozen_now` also
pins timescope.clock.now() to a naive instant.
"""
from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from tests.models import Base

NOW = datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture()
def engine() -> Iterator[Engine]:
    eng = create_engine("sqlite://", echo=False)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session(engine: Engine) -> Iterator[Session]:
    """Session bound to the per-test database; rolled back afterwards."""
    SessionFactory = sessionmaker(bind=engine, expire_on_commit=False)
    session = SessionFactory()

    yield session

    session.rollback()
    session.close()


@pytest.fixture()
def frozen_now(monkeypatch: pytest.MonkeyPatch) -> datetime:
    """Pin the default evaluation instant to NOW."""
    monkeypatch.setattr("timescope.clock.now", lambda: NOW)
    return NOW
