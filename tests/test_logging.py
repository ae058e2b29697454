"""
Tests for logging configuration
"""
import logging

import sys
sys.path.insert(0, '.')

from disasteralert.core.logging import NOISY_LOGGERS, get_logger, setup_logging


class TestLogging:
    """Test suite for setup_logging."""

    def test_repeated_setup_keeps_one_handler(self):
        setup_logging(level="DEBUG")
        logger = setup_logging(level="INFO")

        assert logger.name == "disasteralert"
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1

    def test_log_file(self, tmp_path):
        path = tmp_path / "disasteralert.log"
        logger = setup_logging(level="INFO", log_file=str(path))

        get_logger("disasteralert.tests").info("incident stored")
        for handler in logger.handlers:
            handler.flush()

        assert "incident stored" in path.read_text(encoding="utf-8")
        assert "disasteralert.tests" in path.read_text(encoding="utf-8")

        for handler in logger.handlers:
            handler.close()
        setup_logging(level="INFO")

    def test_third_party_loggers_quieted(self):
        setup_logging(level="DEBUG")
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
