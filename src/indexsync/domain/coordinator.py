"""Batch lifecycle notifications and flush them to the search backend once per cycle."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from indexsync.domain.batch import FlushResult, PendingBatch
from indexsync.domain.ports import ConversionError

if TYPE_CHECKING:
    from indexsync.domain.collections import CollectionDefinition, CollectionRegistry
    from indexsync.domain.ports import (
        ChangeRecord,
        DocumentTransformer,
        SearchBackend,
        TypeResolver,
    )

log = getLogger(__name__)


def resolve_type(entity: object) -> type:
    return type(entity)


class ChangeBatchCoordinator:
    """Collects creates, updates and deletes of managed objects during a unit of work.

    The host calls ``on_created``/``on_updated``/``on_before_removed``/``on_removed``
    while the unit of work runs and ``on_cycle_complete`` exactly once after it
    finished. Objects whose type is not registered are ignored.

    One instance serves one unit of work at a time.
    """

    def __init__(
        self,
        *,
        registry: CollectionRegistry,
        transformer: DocumentTransformer,
        backend: SearchBackend,
        type_resolver: TypeResolver | None = None,
    ) -> None:
        self._registry = registry
        self._transformer = transformer
        self._backend = backend
        self._resolve_type = type_resolver or resolve_type
        self._batch = PendingBatch()

    @property
    def pending(self) -> PendingBatch:
        return self._batch

    def on_created(self, entity: object) -> None:
        definition = self._definition_for(entity)
        if definition is None:
            return
        self._batch.add_index(definition.target_name, self._transformer.convert(entity))

    def on_updated(self, entity: object) -> None:
        definition = self._definition_for(entity)
        if definition is None:
            return
        definition.ensure_well_formed()
        self._batch.add_update(definition.target_name, self._transformer.convert(entity))

    def on_before_removed(self, entity: object) -> None:
        definition = self._definition_for(entity)
        if definition is None:
            return
        document_id = _document_id(self._transformer.convert(entity))
        if not self._batch.capture_delete(entity, document_id):
            log.debug("Identifier of %r already captured in this cycle", entity)

    def on_removed(self, entity: object) -> None:
        document_id = self._batch.consume_delete(entity)
        if document_id is None:
            return
        definition = self._definition_for(entity)
        if definition is None:
            return
        self._batch.add_delete(definition.target_name, document_id)

    def on_cycle_complete(self) -> FlushResult:
        """Write all buffered changes: creates, then updates, then deletes.

        The first backend error stops the flush and propagates. The batch is
        reset either way, so changes that were not written are dropped.
        """

        batch = self._batch
        indexed = updated = deleted = 0
        try:
            for collection, documents in batch.to_index.items():
                self._backend.import_documents(collection, documents, "create")
                indexed += len(documents)
            for collection, documents in batch.to_update.items():
                self._backend.import_documents(collection, documents, "upsert")
                updated += len(documents)
            for collection, document_id in batch.to_delete:
                self._backend.delete_document(collection, document_id)
                deleted += 1
        finally:
            batch.reset()

        result = FlushResult(indexed=indexed, updated=updated, deleted=deleted)
        if result.total:
            log.info(
                "Flushed search index changes: indexed=%s, updated=%s, deleted=%s",
                result.indexed,
                result.updated,
                result.deleted,
            )
        return result

    def discard(self) -> None:
        """Drop all buffered changes without writing them."""

        if not self._batch.is_empty():
            log.debug("Discarding pending search index changes")
        self._batch.reset()

    def savepoint(self) -> PendingBatch:
        """Return a snapshot of the buffered changes for :meth:`rollback_to`."""

        return self._batch.copy()

    def rollback_to(self, savepoint: PendingBatch) -> None:
        """Drop the changes buffered since ``savepoint`` was taken."""

        self._batch.restore(savepoint)

    def _definition_for(self, entity: object) -> CollectionDefinition | None:
        return self._registry.definition_for(self._resolve_type(entity))


def _document_id(record: ChangeRecord) -> str:
    if "id" not in record:
        raise ConversionError("Converted document has no 'id' field")
    return str(record["id"])
