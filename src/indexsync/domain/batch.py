"""Per-cycle buffers of pending search index writes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from indexsync.domain.ports import ChangeRecord


@dataclass(slots=True)
class PendingDelete:
    """Identifier captured before removal.

    The entity is held so that its ``id()`` cannot be recycled while the entry
    is pending.
    """

    entity: object
    document_id: str


@dataclass(slots=True)
class PendingBatch:
    """Changes collected during one unit of work, grouped by target collection."""

    to_index: dict[str, list[ChangeRecord]] = field(default_factory=dict)
    to_update: dict[str, list[ChangeRecord]] = field(default_factory=dict)
    to_delete: list[tuple[str, str]] = field(default_factory=list)
    pending_deletes: dict[int, PendingDelete] = field(default_factory=dict)

    def add_index(self, collection: str, record: ChangeRecord) -> None:
        self.to_index.setdefault(collection, []).append(record)

    def add_update(self, collection: str, record: ChangeRecord) -> None:
        self.to_update.setdefault(collection, []).append(record)

    def capture_delete(self, entity: object, document_id: str) -> bool:
        """Remember ``document_id`` for ``entity``; the first capture in a cycle wins."""

        token = id(entity)
        if token in self.pending_deletes:
            return False
        self.pending_deletes[token] = PendingDelete(entity=entity, document_id=document_id)
        return True

    def consume_delete(self, entity: object) -> str | None:
        pending = self.pending_deletes.get(id(entity))
        if pending is None or pending.entity is not entity:
            return None
        del self.pending_deletes[id(entity)]
        return pending.document_id

    def add_delete(self, collection: str, document_id: str) -> None:
        self.to_delete.append((collection, document_id))

    def is_empty(self) -> bool:
        return not (self.to_index or self.to_update or self.to_delete or self.pending_deletes)

    def reset(self) -> None:
        self.to_index = {}
        self.to_update = {}
        self.to_delete = []
        self.pending_deletes = {}

    def copy(self) -> PendingBatch:
        return PendingBatch(
            to_index={key: list(records) for key, records in self.to_index.items()},
            to_update={key: list(records) for key, records in self.to_update.items()},
            to_delete=list(self.to_delete),
            pending_deletes=dict(self.pending_deletes),
        )

    def restore(self, snapshot: PendingBatch) -> None:
        """Replace the contents with those of ``snapshot`` (taken by :meth:`copy`)."""

        restored = snapshot.copy()
        self.to_index = restored.to_index
        self.to_update = restored.to_update
        self.to_delete = restored.to_delete
        self.pending_deletes = restored.pending_deletes


@dataclass(slots=True, frozen=True)
class FlushResult:
    """Outcome of one coordinated flush."""

    indexed: int = 0
    updated: int = 0
    deleted: int = 0

    @property
    def total(self) -> int:
        return self.indexed + self.updated + self.deleted
