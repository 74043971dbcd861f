"""
Unit tests for CLI logging setup
"""

import logging

import pytest

from sifbuild_cli.utils.logging_utils import LOGGER_NAMES, setup_logging


@pytest.fixture(autouse=True)
def restore_loggers():
    saved = {name: (logging.getLogger(name).level, list(logging.getLogger(name).handlers)) for name in LOGGER_NAMES}
    yield
    for name, (level, handlers) in saved.items():
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers = handlers


class TestSetupLogging:
    """Tests for setup_logging"""

    def test_default_level(self):
        setup_logging()
        for name in LOGGER_NAMES:
            assert logging.getLogger(name).level == logging.WARNING

    def test_verbose_level(self):
        setup_logging(verbose=True)
        assert logging.getLogger("sifbuild_core").level == logging.DEBUG

    def test_repeated_setup_keeps_one_handler(self):
        setup_logging()
        setup_logging(verbose=True)
        handlers = [h for h in logging.getLogger("sifbuild_core").handlers if h.get_name() == "sifbuild"]
        assert len(handlers) == 1

    def test_root_untouched(self):
        root_handlers = list(logging.getLogger().handlers)
        setup_logging(verbose=True)
        assert logging.getLogger().handlers == root_handlers
