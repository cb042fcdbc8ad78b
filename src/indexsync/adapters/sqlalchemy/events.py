"""Route SQLAlchemy lifecycle events to the change-batching coordinator.

Mapper events are installed once for every mapped class. Each handler looks up
the coordinator bound to the object's session in ``Session.info``; sessions
without one are ignored. Transaction boundaries come from session
events registered per session in :func:`attach_coordinator`.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from sqlalchemy import event, inspect
from sqlalchemy.orm import Mapper, object_session

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Connection
    from sqlalchemy.orm import Session, SessionTransaction

    from indexsync.domain.batch import PendingBatch
    from indexsync.domain.coordinator import ChangeBatchCoordinator

log = getLogger(__name__)

COORDINATOR_KEY: Final[str] = "indexsync.coordinator"
COMMITTED_KEY: Final[str] = "indexsync.committed"
SAVEPOINTS_KEY: Final[str] = "indexsync.savepoints"


def mapped_class(entity: object) -> type:
    """Return the mapped class of ``entity``, or its plain type when unmapped."""

    state = inspect(entity, raiseerr=False)
    if state is None:
        return type(entity)
    return state.mapper.class_


def coordinator_for(session: Session | None) -> ChangeBatchCoordinator | None:
    if session is None:
        return None
    return session.info.get(COORDINATOR_KEY)


def _dispatch(
    action: Callable[[ChangeBatchCoordinator, object], None],
) -> Callable[[Mapper[object], Connection, object], None]:
    def handler(_mapper: Mapper[object], _connection: Connection, target: object) -> None:
        coordinator = coordinator_for(object_session(target))
        if coordinator is not None:
            action(coordinator, target)

    return handler


def _on_updated(coordinator: ChangeBatchCoordinator, target: object) -> None:
    # after_update also fires for dirty instances without net column changes.
    session = object_session(target)
    if session is not None and session.is_modified(target, include_collections=False):
        coordinator.on_updated(target)


_after_insert = _dispatch(lambda coordinator, target: coordinator.on_created(target))
_after_update = _dispatch(_on_updated)
_before_delete = _dispatch(lambda coordinator, target: coordinator.on_before_removed(target))
_after_delete = _dispatch(lambda coordinator, target: coordinator.on_removed(target))

_MAPPER_EVENTS: Final = (
    ("after_insert", _after_insert),
    ("after_update", _after_update),
    ("before_delete", _before_delete),
    ("after_delete", _after_delete),
)


def install_mapper_listeners() -> None:
    """Register the mapper-level handlers for all mapped classes (idempotent)."""

    for identifier, handler in _MAPPER_EVENTS:
        if not event.contains(Mapper, identifier, handler):
            event.listen(Mapper, identifier, handler)


def remove_mapper_listeners() -> None:
    for identifier, handler in _MAPPER_EVENTS:
        if event.contains(Mapper, identifier, handler):
            event.remove(Mapper, identifier, handler)


def _savepoints(session: Session) -> dict[SessionTransaction, PendingBatch]:
    return session.info.setdefault(SAVEPOINTS_KEY, {})


def _after_transaction_create(session: Session, transaction: SessionTransaction) -> None:
    coordinator = coordinator_for(session)
    if coordinator is not None and transaction.nested:
        _savepoints(session)[transaction] = coordinator.savepoint()


def _after_commit(session: Session) -> None:
    # Released savepoints keep their changes for the outer transaction.
    if session.in_nested_transaction():
        return
    if coordinator_for(session) is not None:
        session.info[COMMITTED_KEY] = True


def _after_rollback(session: Session) -> None:
    coordinator = coordinator_for(session)
    if coordinator is None:
        return
    if session.in_nested_transaction():
        snapshot = _savepoints(session).get(session.get_nested_transaction())
        if snapshot is not None:
            coordinator.rollback_to(snapshot)
        return
    session.info.pop(COMMITTED_KEY, None)
    coordinator.discard()


def _after_transaction_end(session: Session, transaction: SessionTransaction) -> None:
    if transaction.nested:
        _savepoints(session).pop(transaction, None)
        return
    if transaction.parent is not None:
        return
    # The root transaction is closed here, so a backend error leaves the session usable.
    coordinator = coordinator_for(session)
    if session.info.pop(COMMITTED_KEY, False) and coordinator is not None:
        coordinator.on_cycle_complete()


_SESSION_EVENTS: Final = (
    ("after_transaction_create", _after_transaction_create),
    ("after_commit", _after_commit),
    ("after_rollback", _after_rollback),
    ("after_transaction_end", _after_transaction_end),
)


def attach_coordinator(session: Session, coordinator: ChangeBatchCoordinator) -> None:
    """Bind ``coordinator`` to ``session`` until :func:`detach_coordinator` is called.

    The coordinator flushes once the outermost transaction has committed and
    closed. Rolling back a savepoint drops only the changes made inside it;
    rolling back the outer transaction drops everything.
    """

    existing = coordinator_for(session)
    if existing is not None and existing is not coordinator:
        raise ValueError("Session already has a search index coordinator attached")
    session.info[COORDINATOR_KEY] = coordinator
    for identifier, handler in _SESSION_EVENTS:
        if not event.contains(session, identifier, handler):
            event.listen(session, identifier, handler)
    log.debug("Attached search index coordinator to session %s", id(session))


def detach_coordinator(session: Session) -> ChangeBatchCoordinator | None:
    coordinator = session.info.pop(COORDINATOR_KEY, None)
    session.info.pop(COMMITTED_KEY, None)
    session.info.pop(SAVEPOINTS_KEY, None)
    for identifier, handler in _SESSION_EVENTS:
        if event.contains(session, identifier, handler):
            event.remove(session, identifier, handler)
    return coordinator
