from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.docs_builder import ProjectBuilder


@pytest.fixture
def project(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_funcdocs_logging():
    """CLI runs install handlers on the package logger; undo that between tests."""
    yield
    logger = logging.getLogger("funcdocs")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
