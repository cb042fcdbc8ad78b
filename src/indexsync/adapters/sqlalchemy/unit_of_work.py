"""SQLAlchemy unit of work that keeps the search index in sync on commit."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from indexsync.config.storage import get_database_config

from .events import attach_coordinator, detach_coordinator, install_mapper_listeners

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from indexsync.domain.coordinator import ChangeBatchCoordinator

type CoordinatorFactory = Callable[[], ChangeBatchCoordinator]


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None
    coordinator_factory: CoordinatorFactory | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call indexsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    coordinator_factory: CoordinatorFactory,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the engine, the session factory and the search index listeners."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    install_mapper_listeners()

    _STATE.engine = resolved_engine
    _STATE.coordinator_factory = coordinator_factory


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE.coordinator_factory = None


class SqlAlchemyUnitOfWork:
    """Session scope with its own search index coordinator.

    Changes flushed inside the scope are buffered by the coordinator and
    written to the search backend once ``commit`` succeeds. A rollback
    discards them.
    """

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        if _STATE.coordinator_factory is None:
            raise StartupError("No search index coordinator factory configured")
        self._coordinator_factory = _STATE.coordinator_factory
        self._session: Session | None = None
        self._indexer: ChangeBatchCoordinator | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session = self.session_factory()
        self._indexer = self._coordinator_factory()
        attach_coordinator(self.session, self._indexer)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            detach_coordinator(session)
            session.close()
            self.session = None
            self._indexer = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def indexer(self) -> ChangeBatchCoordinator:
        if self._indexer is None:
            raise StartupError("Unit of work session not initialised")
        return self._indexer

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


if TYPE_CHECKING:
    from indexsync.domain.ports import IndexedUnitOfWork

    _uow_check: IndexedUnitOfWork = SqlAlchemyUnitOfWork()
