"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Configuration management for IndexSmith.

Settings are pydantic models. Each model can be built directly, or from
``INDEXSMITH_*`` environment variables through ``from_env``, where keyword
arguments take precedence over the environment. Lists are read from the
environment as comma-separated values.
"""

import logging
import os
from typing import Any, ClassVar, Never

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_SOFT_DELETE_PATTERNS = (
    "IsDeleted",
    "Deleted",
    "IsActive",
    "Active",
    "DeletedAt",
    "DeletedOn",
)

DEFAULT_TENANT_ID_PATTERNS = (
    "TenantId",
    "OrganizationId",
    "CompanyId",
    "AccountId",
)

DEFAULT_EXCLUDED_PATTERNS = (
    "CreatedAt",
    "CreatedOn",
    "UpdatedAt",
    "UpdatedOn",
    "ModifiedAt",
    "ModifiedOn",
    "CreatedBy",
    "UpdatedBy",
    "ModifiedBy",
)


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_list(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


class BaseConfig(BaseModel):
    """Shared environment handling for IndexSmith settings."""

    ENV_PREFIX: ClassVar[str] = "INDEXSMITH_"

    @classmethod
    def from_env(cls, **overrides) -> Never:
        """
        Build the settings from the environment.

        Args:
        ----
            **overrides: Values that win over the environment

        """
        raise NotImplementedError(f"{cls.__name__} does not support from_env")

    @classmethod
    def get_env_var(cls, key: str, default: Any = None) -> Any:
        """Read ``<ENV_PREFIX><KEY>`` from the environment."""
        return os.environ.get(cls.ENV_PREFIX + key.upper(), default)


class LoggingConfig(BaseConfig):
    """Where and how IndexSmith writes its log records."""

    level: str = Field(
        default_factory=lambda: os.environ.get("INDEXSMITH_LOG_LEVEL", "INFO"),
        description="Level name: DEBUG, INFO, WARNING, ERROR or CRITICAL",
    )
    use_rich: bool = Field(
        default=True,
        description="Render console records with rich",
    )
    log_file: str | None = Field(
        default=None,
        description="Also write records to this file",
    )
    json_format: bool = Field(
        default=False,
        description="Emit records as JSON lines",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, value):
        """Normalize the level name; unknown names fall back to INFO."""
        normalized = value.upper()
        if normalized in LOG_LEVELS:
            return normalized
        logger.warning(f"Unknown log level '{value}', using INFO")
        return "INFO"

    @classmethod
    def from_env(cls, **overrides) -> "LoggingConfig":
        """Read INDEXSMITH_LOG_LEVEL, _LOG_USE_RICH, _LOG_FILE and _LOG_JSON."""
        values = {
            "level": cls.get_env_var("LOG_LEVEL", "INFO"),
            "use_rich": _parse_bool(cls.get_env_var("LOG_USE_RICH"), True),
            "log_file": cls.get_env_var("LOG_FILE"),
            "json_format": _parse_bool(cls.get_env_var("LOG_JSON"), False),
            **overrides,
        }
        return cls(**values)

    def get_log_level_int(self) -> int:
        return logging.getLevelName(self.level)

    def configure_logging(self, debug: bool = False) -> None:
        """
        Apply these settings to the ``indexsmith`` loggers.

        Args:
        ----
            debug: Log at DEBUG regardless of ``level``

        """
        from indexsmith.core.logging import configure_logging as apply_logging

        apply_logging(
            level=logging.DEBUG if debug else self.get_log_level_int(),
            log_file=self.log_file,
            json_format=self.json_format,
            use_rich=self.use_rich,
            debug=debug,
        )


class AutoIndexConfig(BaseConfig):
    """
    Settings that control heuristic index scoring.

    Instances are frozen so a single configuration can be shared by engines
    analyzing entities on different threads.
    """

    model_config = ConfigDict(frozen=True)

    score_threshold: int = Field(
        default=50,
        description="Minimum score for a heuristic candidate to be created",
    )
    enable_foreign_key_indexes: bool = Field(
        default=True,
        description="Score foreign key properties",
    )
    enable_soft_delete_indexes: bool = Field(
        default=True,
        description="Score soft delete columns (IsDeleted, DeletedAt, ...)",
    )
    enable_enum_indexes: bool = Field(
        default=True,
        description="Score enum and state columns",
    )
    enable_tenant_indexes: bool = Field(
        default=True,
        description="Score tenant identifier columns",
    )
    enable_composite_indexes: bool = Field(
        default=True,
        description="Propose composite indexes for common patterns (TenantId + IsDeleted)",
    )
    enable_diagnostics: bool = Field(
        default=False,
        description="Log every index decision with its score breakdown",
    )
    max_indexable_string_length: int = Field(
        default=256,
        description="Strings longer than this (or unbounded) are never indexed heuristically",
    )
    soft_delete_property_patterns: tuple[str, ...] = Field(
        default=DEFAULT_SOFT_DELETE_PATTERNS,
        description="Property names that indicate soft delete columns",
    )
    tenant_id_property_patterns: tuple[str, ...] = Field(
        default=DEFAULT_TENANT_ID_PATTERNS,
        description="Property names that indicate tenant identifier columns",
    )
    excluded_property_patterns: tuple[str, ...] = Field(
        default=DEFAULT_EXCLUDED_PATTERNS,
        description="Property names that are never indexed heuristically",
    )

    @field_validator("max_indexable_string_length")
    @classmethod
    def validate_max_indexable_string_length(cls, value):
        """Validate that the string length ceiling is positive."""
        if value <= 0:
            raise ValueError("max_indexable_string_length must be greater than zero")
        return value

    @field_validator(
        "soft_delete_property_patterns",
        "tenant_id_property_patterns",
        "excluded_property_patterns",
    )
    @classmethod
    def validate_patterns(cls, value):
        """Drop blank patterns."""
        return tuple(pattern.strip() for pattern in value if pattern and pattern.strip())

    @classmethod
    def from_env(cls, **overrides) -> "AutoIndexConfig":
        """Create an auto-index configuration from environment variables."""
        values = {
            "score_threshold": int(cls.get_env_var("SCORE_THRESHOLD", "50")),
            "enable_foreign_key_indexes": _parse_bool(cls.get_env_var("ENABLE_FOREIGN_KEY_INDEXES"), True),
            "enable_soft_delete_indexes": _parse_bool(cls.get_env_var("ENABLE_SOFT_DELETE_INDEXES"), True),
            "enable_enum_indexes": _parse_bool(cls.get_env_var("ENABLE_ENUM_INDEXES"), True),
            "enable_tenant_indexes": _parse_bool(cls.get_env_var("ENABLE_TENANT_INDEXES"), True),
            "enable_composite_indexes": _parse_bool(cls.get_env_var("ENABLE_COMPOSITE_INDEXES"), True),
            "enable_diagnostics": _parse_bool(cls.get_env_var("ENABLE_DIAGNOSTICS"), False),
            "max_indexable_string_length": int(cls.get_env_var("MAX_INDEXABLE_STRING_LENGTH", "256")),
            "soft_delete_property_patterns": _parse_list(
                cls.get_env_var("SOFT_DELETE_PATTERNS"), DEFAULT_SOFT_DELETE_PATTERNS,
            ),
            "tenant_id_property_patterns": _parse_list(
                cls.get_env_var("TENANT_ID_PATTERNS"), DEFAULT_TENANT_ID_PATTERNS,
            ),
            "excluded_property_patterns": _parse_list(
                cls.get_env_var("EXCLUDED_PATTERNS"), DEFAULT_EXCLUDED_PATTERNS,
            ),
            **overrides,
        }
        return cls(**values)

    def is_soft_delete_name(self, name: str) -> bool:
        return _matches_any(name, self.soft_delete_property_patterns)

    def is_tenant_id_name(self, name: str) -> bool:
        return _matches_any(name, self.tenant_id_property_patterns)

    def is_excluded_name(self, name: str) -> bool:
        return _matches_any(name, self.excluded_property_patterns)


def _matches_any(name: str, patterns: tuple[str, ...]) -> bool:
    # Patterns are exact names compared case-insensitively, not globs
    lowered = name.casefold()
    return any(lowered == pattern.casefold() for pattern in patterns)
