"""
Fixtures package for the IndexSmith test suite.

This package provides reusable fixtures and descriptor factories
to standardize the approach to testing throughout the project.
"""

from tests.fixtures.database import order_metadata, sqlite_file_url, sqlite_memory_engine
from tests.fixtures.entities import (
    default_config,
    make_entity,
    make_property,
    order_entity,
    tenant_entity,
)

__all__ = [
    "default_config",
    "make_entity",
    "make_property",
    "order_entity",
    "order_metadata",
    "sqlite_file_url",
    "sqlite_memory_engine",
    "tenant_entity",
]
