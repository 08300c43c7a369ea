from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from fieldrecon.adapters.sqlalchemy import start_mappers
from fieldrecon.adapters.sqlalchemy.migrations import upgrade_head
from fieldrecon.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyFieldUnitOfWork,
    shutdown,
    startup,
)
from fieldrecon.domain.fields import FieldReconciliationEngine

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def engine() -> FieldReconciliationEngine:
    return FieldReconciliationEngine()


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyFieldUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyFieldUnitOfWork:
        return SqlAlchemyFieldUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
