"""Tests for shared/logging_config.py."""

import logging

from shared.config import Settings
from shared.logging_config import configure_logging


class TestConfigureLogging:
    def teardown_method(self):
        logging.getLogger().setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.NOTSET)

    def test_sets_root_level(self):
        configure_logging(Settings(_env_file=None, log_level="debug"))
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(Settings(_env_file=None, log_level="chatty"))
        assert logging.getLogger().level == logging.INFO

    def test_quiets_httpx(self):
        configure_logging(Settings(_env_file=None, log_level="INFO"))
        assert logging.getLogger("httpx").level == logging.WARNING
