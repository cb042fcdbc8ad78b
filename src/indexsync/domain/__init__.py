"""Domain layer: collection registry, change batching and document conversion."""

from __future__ import annotations

from .batch import FlushResult, PendingBatch, PendingDelete
from .collections import (
    PRIMARY_FIELD_TYPE,
    CollectionDefinition,
    CollectionRegistry,
    FieldDefinition,
)
from .coordinator import ChangeBatchCoordinator, resolve_type
from .ports import (
    BackendError,
    ChangeRecord,
    ConversionError,
    DocumentTransformer,
    ImportAction,
    IndexedUnitOfWork,
    SearchBackend,
    TypeResolver,
)
from .transform import DefinitionTransformer

__all__ = [
    "PRIMARY_FIELD_TYPE",
    "BackendError",
    "ChangeBatchCoordinator",
    "ChangeRecord",
    "CollectionDefinition",
    "CollectionRegistry",
    "ConversionError",
    "DefinitionTransformer",
    "DocumentTransformer",
    "FieldDefinition",
    "FlushResult",
    "ImportAction",
    "IndexedUnitOfWork",
    "PendingBatch",
    "PendingDelete",
    "SearchBackend",
    "TypeResolver",
    "resolve_type",
]
