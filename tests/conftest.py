"""Shared fixtures for the banking ledger test suite"""

import logging

import pytest

from banking_ledger.logging_config import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_ledger_logger():
    """Undo setup_logging so records keep propagating to caplog"""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
