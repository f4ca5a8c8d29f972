"""Shared fixtures for roulette analytics tests."""

import logging

import pytest

from roulette_analytics.config import Settings

from .helpers import FakeClock


@pytest.fixture(autouse=True)
def reset_package_logger():
    """CLI tests attach handlers to the package logger; drop them afterwards."""
    yield
    logger = logging.getLogger('roulette_analytics')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def clock():
    return FakeClock()
