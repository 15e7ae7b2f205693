import logging

import pytest

from logging_config import setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    for h in root.handlers:
        h.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_console_handler_only(root_logger):
    setup_logging(logging.DEBUG)
    assert root_logger.level == logging.DEBUG
    assert len(root_logger.handlers) == 1
    assert isinstance(root_logger.handlers[0], logging.StreamHandler)


def test_repeat_setup_does_not_duplicate(root_logger):
    setup_logging()
    setup_logging()
    assert len(root_logger.handlers) == 1


def test_file_handler(root_logger, tmp_path):
    log_file = tmp_path / "trickle.log"
    setup_logging(logging.INFO, str(log_file))
    assert len(root_logger.handlers) == 2
    logging.getLogger("fluid.flow").info("hello tank")
    for h in root_logger.handlers:
        h.flush()
    text = log_file.read_text(encoding="utf-8")
    assert "fluid.flow - INFO - hello tank" in text
