"""Ports consumed by the change-batching coordinator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from indexsync.domain.coordinator import ChangeBatchCoordinator

type ChangeRecord = dict[str, object]
type ImportAction = Literal["create", "upsert"]


@runtime_checkable
class DocumentTransformer(Protocol):
    """Converts a persisted object into a flat search document."""

    def convert(self, entity: object) -> ChangeRecord: ...


@runtime_checkable
class SearchBackend(Protocol):
    """Bulk write contract of the search engine."""

    def import_documents(
        self,
        collection: str,
        documents: list[ChangeRecord],
        action: ImportAction = "create",
    ) -> None: ...

    def delete_document(self, collection: str, document_id: str) -> None: ...


class TypeResolver(Protocol):
    """Returns the real (unproxied) type of a persisted object."""

    def __call__(self, entity: object) -> type: ...


@runtime_checkable
class IndexedUnitOfWork(Protocol):
    """Unit-of-work boundary whose commit flushes buffered search index changes."""

    @property
    def indexer(self) -> ChangeBatchCoordinator: ...

    def __enter__(self) -> IndexedUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class BackendError(RuntimeError):
    """Raised by search backends when a write could not be applied."""


class ConversionError(ValueError):
    """Raised when an object cannot be converted into a search document."""
