"""SQLAlchemy-backed unit of work for subscription state."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from iapsync.adapters.sqlalchemy.mappings import create_all_tables
from iapsync.adapters.sqlalchemy.repositories import SqlAlchemyKeyValueRepository
from iapsync.config.storage import get_database_config
from iapsync.domain.errors import TransientEnvironmentFailure
from iapsync.domain.ports.unit_of_work import SubscriptionRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine
    from sqlalchemy.pool import ConnectionPoolEntry

log = getLogger(__name__)

# The host app and the CLI may hold the same database file open.
SQLITE_BUSY_TIMEOUT_MS = 5_000


class StartupError(RuntimeError):
    """Raised when a unit of work is used before ``startup()`` or outside its block."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None


_STATE = _AdapterState()


def _set_sqlite_busy_timeout(dbapi_connection: object, _record: ConnectionPoolEntry) -> None:
    cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
    try:
        cursor.execute(f"PRAGMA busy_timeout = {SQLITE_BUSY_TIMEOUT_MS}")
    finally:
        cursor.close()


def _create_engine(database_uri: str) -> Engine:
    engine = create_engine(database_uri, future=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _set_sqlite_busy_timeout)
    return engine


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to an engine and create the key-value table if needed.

    Without an explicit engine or URI the database comes from
    ``get_database_config()``. Engines passed in are used as they are.
    """

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or _create_engine(database_uri or get_database_config().uri)
    create_all_tables(resolved_engine)
    _STATE.engine = resolved_engine
    _STATE.session_factory = sessionmaker(bind=resolved_engine, expire_on_commit=False)
    log.debug("SQLAlchemy adapter started on %s", resolved_engine.url)


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE.session_factory = None


class SqlAlchemySubscriptionUnitOfWork:
    """One session per ``with`` block over the key-value table.

    Leaving the block without ``commit()`` discards pending writes, so a read
    transaction is simply a unit of work that is never committed.
    """

    def __init__(self) -> None:
        if _STATE.session_factory is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call iapsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        self._session_factory = _STATE.session_factory
        self._session: Session | None = None
        self._repositories: SubscriptionRepositories | None = None

    def __enter__(self) -> SqlAlchemySubscriptionUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = self._session_factory()
        self._repositories = SubscriptionRepositories(
            key_values=SqlAlchemyKeyValueRepository(self._session)
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session, self._session, self._repositories = self._session, None, None
        if session is not None:
            session.rollback()
            session.close()
        if isinstance(exc_value, OperationalError):
            log.warning("Database operation failed: %s", type(exc_value.orig).__name__)
            raise TransientEnvironmentFailure("Database unavailable") from exc_value
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @property
    def repositories(self) -> SubscriptionRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from iapsync.domain.ports.unit_of_work import SubscriptionUnitOfWork

    _uow_check: SubscriptionUnitOfWork = SqlAlchemySubscriptionUnitOfWork()
