"""
Tests for launcher logging setup.
"""

import logging

from train_invoke.log_setup import LOGGER_NAME, setup_logging


class TestSetupLogging:
    def test_no_duplicate_handlers(self):
        setup_logging()
        logger = setup_logging()
        assert logger.name == LOGGER_NAME
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_level(self):
        assert setup_logging(logging.DEBUG).level == logging.DEBUG

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "nested" / "invoke.log"
        logger = setup_logging(log_file=str(log_file))
        logging.getLogger(f"{LOGGER_NAME}.test").info("hello from child")
        for handler in logger.handlers:
            handler.flush()
        assert "INFO - hello from child" in log_file.read_text()
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
