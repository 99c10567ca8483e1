"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""Exceptions raised by IndexSmith."""


class IndexSmithError(Exception):
    """Base exception for IndexSmith errors."""


class ConfigurationError(IndexSmithError):
    """Raised when a required configuration object is missing or invalid."""


class InvalidCompositeDeclarationError(IndexSmithError, ValueError):
    """Raised when a composite index declaration names fewer than two properties."""


class SchemaReflectionError(IndexSmithError):
    """Raised when a database schema cannot be reflected into descriptors."""
