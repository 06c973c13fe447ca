from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from iapsync.adapters.sqlalchemy import create_all_tables
from iapsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemySubscriptionUnitOfWork,
    shutdown,
    startup,
)
from tests.helpers.fakes import (
    FakeJobQueue,
    FakeNecessityChecker,
    FakePaymentPlatform,
    FakeRegistrar,
    FakeSync,
    InMemoryDatabase,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_all_tables(engine)
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
) -> Iterator[Callable[[], SqlAlchemySubscriptionUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemySubscriptionUnitOfWork:
        return SqlAlchemySubscriptionUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def platform() -> FakePaymentPlatform:
    return FakePaymentPlatform()


@pytest.fixture
def registrar() -> FakeRegistrar:
    return FakeRegistrar()


@pytest.fixture
def sync() -> FakeSync:
    return FakeSync()


@pytest.fixture
def job_queue() -> FakeJobQueue:
    return FakeJobQueue()


@pytest.fixture
def necessity_checker() -> FakeNecessityChecker:
    return FakeNecessityChecker()
