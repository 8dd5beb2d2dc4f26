"""
Unit tests for wasteml.core.logger.
"""

import logging

import pytest

from wasteml.core.logger import PACKAGE_NAME, get_logger, set_level


@pytest.fixture(autouse=True)
def restore_level():
    yield
    set_level(logging.WARNING)


def test_module_loggers_are_children_of_package():
    logger = get_logger("wasteml.core.datasets")

    assert logger.name.startswith(PACKAGE_NAME)
    assert logging.getLogger(PACKAGE_NAME).handlers


def test_set_level_by_name():
    set_level("debug")

    assert logging.getLogger(PACKAGE_NAME).level == logging.DEBUG


def test_set_level_by_number():
    set_level(logging.ERROR)

    assert logging.getLogger(PACKAGE_NAME).level == logging.ERROR


def test_unknown_level_raises():
    with pytest.raises(ValueError, match="LOUD"):
        set_level("LOUD")
