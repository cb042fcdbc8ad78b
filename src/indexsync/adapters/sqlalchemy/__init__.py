"""SQLAlchemy adapter package for indexsync."""

from __future__ import annotations

from .events import (
    COORDINATOR_KEY,
    attach_coordinator,
    coordinator_for,
    detach_coordinator,
    install_mapper_listeners,
    mapped_class,
    remove_mapper_listeners,
)
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "COORDINATOR_KEY",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "attach_coordinator",
    "configured_engine",
    "coordinator_for",
    "detach_coordinator",
    "install_mapper_listeners",
    "is_started",
    "mapped_class",
    "remove_mapper_listeners",
    "shutdown",
    "startup",
]
