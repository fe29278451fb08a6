"""
Tests for logging setup.
"""

import logging

import pytest

from ops.logging import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers = handlers
    root.setLevel(level)


def test_creates_log_dir_and_writes_records(tmp_path, restore_root_logger):
    log_path = tmp_path / "logs" / "nested" / "service.log"
    setup_logging(str(log_path), "INFO")

    logging.info("scheduler started")
    logging.debug("hidden at INFO")
    for handler in restore_root_logger.handlers:
        handler.flush()

    text = log_path.read_text()
    assert "INFO - scheduler started" in text
    assert "hidden at INFO" not in text


def test_repeated_setup_replaces_handlers(tmp_path, restore_root_logger):
    setup_logging(str(tmp_path / "a.log"), "INFO")
    setup_logging(str(tmp_path / "b.log"), "DEBUG")

    file_handlers = [h for h in restore_root_logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].baseFilename.endswith("b.log")
    assert restore_root_logger.level == logging.DEBUG
