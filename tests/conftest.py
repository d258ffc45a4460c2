"""Shared test fixtures."""

from collections.abc import Iterator

import pytest
from pydantic_ai import models

from ccdash.diagnostics import LogLevel, LogManager, MemorySink


@pytest.fixture(autouse=True)
def _prevent_real_api_calls() -> Iterator[None]:
    """Safety: block real API calls in all tests."""
    original = models.ALLOW_MODEL_REQUESTS
    models.ALLOW_MODEL_REQUESTS = False
    yield
    models.ALLOW_MODEL_REQUESTS = original


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink(max_entries=500)


@pytest.fixture
def log(memory_sink: MemorySink) -> LogManager:
    """LogManager that records everything (debug and up) in memory."""
    return LogManager(sinks=[memory_sink], min_level=LogLevel.DEBUG)
