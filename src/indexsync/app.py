"""Application wiring entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from indexsync.adapters.sqlalchemy import SqlAlchemyUnitOfWork, mapped_class, startup
from indexsync.adapters.typesense import TypesenseClient
from indexsync.config.typesense import get_typesense_config
from indexsync.domain.coordinator import ChangeBatchCoordinator
from indexsync.domain.transform import DefinitionTransformer

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine

    from indexsync.domain.collections import CollectionRegistry
    from indexsync.domain.ports import DocumentTransformer, IndexedUnitOfWork, SearchBackend

type UnitOfWorkFactory = Callable[[], IndexedUnitOfWork]

log = getLogger(__name__)


def build_coordinator(
    registry: CollectionRegistry,
    *,
    backend: SearchBackend | None = None,
    transformer: DocumentTransformer | None = None,
) -> ChangeBatchCoordinator:
    """Create a coordinator for SQLAlchemy-mapped objects."""

    return ChangeBatchCoordinator(
        registry=registry,
        transformer=transformer or DefinitionTransformer(registry, type_resolver=mapped_class),
        backend=backend or TypesenseClient(config=get_typesense_config()),
        type_resolver=mapped_class,
    )


def start_index_sync(
    registry: CollectionRegistry,
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    backend: SearchBackend | None = None,
    transformer: DocumentTransformer | None = None,
    force: bool = False,
) -> UnitOfWorkFactory:
    """Initialise the SQLAlchemy adapter and return a unit-of-work factory.

    Every unit of work gets its own coordinator; the backend is shared.
    """

    effective_backend = backend or TypesenseClient(config=get_typesense_config())
    for key, definition in registry.definitions().items():
        if not definition.is_well_formed:
            log.warning("Collection %s has no unique primary field; updates will fail", key)

    startup(
        coordinator_factory=lambda: build_coordinator(
            registry, backend=effective_backend, transformer=transformer
        ),
        engine=engine,
        database_uri=database_uri,
        force=force,
    )
    log.info(
        "Search index sync started for collections: %s",
        ", ".join(sorted(registry.definitions())) or "<none>",
    )
    return SqlAlchemyUnitOfWork
