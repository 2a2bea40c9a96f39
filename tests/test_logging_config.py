import logging

import pytest

from skyscatter.logging_config import LOGGER_NAME, setup_logging


@pytest.fixture
def restore_logger():
    logger = logging.getLogger(LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    handlers, level, propagate = saved
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


def test_repeated_setup_keeps_one_console_handler(restore_logger):
    setup_logging(logging.INFO)
    logger = setup_logging(logging.DEBUG)
    assert logger is restore_logger
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert not logger.propagate


def test_child_loggers_write_to_log_file(restore_logger, tmp_path):
    path = tmp_path / "logs" / "sky.log"
    setup_logging(logging.INFO, log_file=path)
    logging.getLogger("skyscatter.scheduler").info("render loop started")
    logging.getLogger("skyscatter.scheduler").debug("hidden")
    for handler in restore_logger.handlers:
        handler.flush()
    text = path.read_text(encoding="utf-8")
    assert "INFO    skyscatter.scheduler: render loop started" in text
    assert "hidden" not in text
