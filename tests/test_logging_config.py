"""Tests for the process logging setup."""

import logging

import pytest

from app import logging_config


@pytest.fixture
def app_logger():
    logger = logging.getLogger("app")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


def _own_handlers(logger):
    return [h for h in logger.handlers if h is logging_config._handler]


def test_repeated_calls_attach_one_handler(app_logger):
    logging_config.configure_logging("INFO")
    logging_config.configure_logging("INFO")

    assert len(_own_handlers(app_logger)) == 1


def test_level_is_updated_on_every_call(app_logger):
    logging_config.configure_logging("INFO")
    logging_config.configure_logging("debug")

    assert app_logger.level == logging.DEBUG
    assert len(_own_handlers(app_logger)) == 1
