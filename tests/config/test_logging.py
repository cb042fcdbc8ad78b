from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from indexsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    try:
        yield
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
def test_configure_logging_sets_level_and_format() -> None:
    configure_logging(level=logging.DEBUG, force=True)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    formatter = root.handlers[0].formatter
    assert formatter is not None
    assert formatter._fmt == "%(asctime)s %(levelname)s [%(name)s] %(message)s"  # noqa: SLF001
