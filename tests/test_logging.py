from __future__ import annotations

import logging
from pathlib import Path

from funcdocs.logging import configure_logging, get_logger


def test_get_logger_uses_package_hierarchy() -> None:
    assert get_logger("generator").name == "funcdocs.generator"
    assert get_logger().name == "funcdocs"


def test_configure_logging_levels() -> None:
    assert configure_logging(verbose=True).level == logging.DEBUG
    assert configure_logging(quiet=True).level == logging.WARNING
    logger = configure_logging()
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1


def test_log_file_receives_debug_lines(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "funcdocs.log"
    logger = configure_logging(quiet=True, log_file=log_file)

    get_logger("tests").debug("resolving %s", "app.Svc")
    for handler in logger.handlers:
        handler.flush()

    assert "funcdocs.tests: resolving app.Svc" in log_file.read_text(encoding="utf-8")
