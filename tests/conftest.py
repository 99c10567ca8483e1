"""
Test configuration and fixtures for the IndexSmith project.

This file is the root pytest configuration file that sets up pytest
markers and imports fixtures from the fixtures modules to make them
available to all tests.
"""

import logging

import pytest

# Import entity and configuration fixtures
from tests.fixtures.entities import (
    default_config,
    order_entity,
    tenant_entity,
)

# Import database fixtures
from tests.fixtures.database import (
    order_metadata,
    sqlite_memory_engine,
    sqlite_file_url,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line("markers", "integration: mark a test as an integration test")
    config.addinivalue_line("markers", "db: mark a test that requires database access")
    config.addinivalue_line("markers", "cli: mark a test that tests CLI functionality")


@pytest.fixture(autouse=True)
def reset_indexsmith_logger():
    """Let records from the indexsmith loggers reach caplog between tests."""
    package_logger = logging.getLogger("indexsmith")
    handlers = list(package_logger.handlers)
    propagate = package_logger.propagate
    level = package_logger.level
    yield
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    for handler in handlers:
        package_logger.addHandler(handler)
    package_logger.propagate = propagate
    package_logger.setLevel(level)
