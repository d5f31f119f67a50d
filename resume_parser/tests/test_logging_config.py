"""Tests for logging setup."""
import logging

from resume_parser.app.core.logging_config import PROVIDER_CLIENT_LOGGERS, get_logger, setup_logging


def test_setup_logging_quiets_provider_clients():
    for name in PROVIDER_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG)
    setup_logging("DEBUG")
    for name in PROVIDER_CLIENT_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


def test_get_logger_namespaced():
    assert get_logger("services.retry").name == "resume_parser.services.retry"
