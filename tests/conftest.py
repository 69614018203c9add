from __future__ import annotations

import logging
from typing import Iterator

import pytest

from tests._fixtures.program_builder import ProgramBuilder


@pytest.fixture
def program_builder() -> ProgramBuilder:
    """Provide a fresh builder for a resolved program."""
    return ProgramBuilder()


@pytest.fixture(autouse=True)
def restore_protomigrate_logger() -> Iterator[None]:
    """Undo handler changes made by configure_logging during a test."""
    logger = logging.getLogger("protomigrate")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate
