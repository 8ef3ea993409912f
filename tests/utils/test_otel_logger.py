"""Tests for the shared JSON logger."""

import pytest
from pythonjsonlogger import jsonlogger

from src.utils.logging.otel_logger import get_logger, logger


@pytest.mark.unit
def test_get_logger_is_cached_per_name():
    first = get_logger("santari.tests.cached")

    assert get_logger("santari.tests.cached") is first
    assert len(first.handlers) == 1


@pytest.mark.unit
def test_get_logger_writes_json_without_propagating():
    service_logger = get_logger("santari.tests.json")

    assert service_logger.propagate is False
    assert isinstance(service_logger.handlers[0].formatter, jsonlogger.JsonFormatter)


@pytest.mark.unit
def test_module_logger_is_the_service_logger():
    assert logger.name == "santari"
    assert get_logger("santari") is logger
