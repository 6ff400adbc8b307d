"""
Tests for logging setup.
"""

import logging

import pytest

from ops.logging import setup_logging


@pytest.fixture
def clean_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    for h in root.handlers:
        if h not in saved_handlers:
            h.close()
    root.handlers = saved_handlers
    root.setLevel(saved_level)
    logging.getLogger("ultralytics").setLevel(logging.NOTSET)


def test_creates_log_directory(tmp_path, clean_root_logger):
    log_path = tmp_path / "logs" / "nested" / "monitor.log"

    setup_logging(str(log_path), "INFO")
    logging.info("session started")

    assert log_path.exists()
    assert clean_root_logger.level == logging.INFO


def test_quiets_noisy_loggers(tmp_path, clean_root_logger):
    setup_logging(str(tmp_path / "monitor.log"), "INFO")
    assert logging.getLogger("ultralytics").level == logging.WARNING


def test_invalid_level(tmp_path, clean_root_logger):
    with pytest.raises(ValueError):
        setup_logging(str(tmp_path / "monitor.log"), "CHATTY")
