"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Unit tests for configuration management module.

These tests verify that the configuration module correctly handles environment variables,
validation, and default values for logging and index scoring.
"""

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from indexsmith.core.config import (
    DEFAULT_EXCLUDED_PATTERNS,
    DEFAULT_SOFT_DELETE_PATTERNS,
    DEFAULT_TENANT_ID_PATTERNS,
    AutoIndexConfig,
    BaseConfig,
    LoggingConfig,
)


@pytest.mark.unit
class TestLoggingConfig:
    """Tests for the logging configuration."""

    def test_logging_config_defaults(self):
        """Test that logging config has sensible defaults."""
        with patch.dict(os.environ, {}, clear=True):
            config = LoggingConfig()
        assert config.level == "INFO"
        assert config.use_rich is True
        assert config.log_file is None
        assert config.json_format is False

    def test_logging_config_validation(self):
        """Test that log level validation works."""
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            assert LoggingConfig(level=level).level == level

        assert LoggingConfig(level="debug").level == "DEBUG"
        # Invalid log level should default to INFO
        assert LoggingConfig(level="INVALID").level == "INFO"

    def test_get_log_level_int(self):
        """Test converting log level to int."""
        assert LoggingConfig(level="DEBUG").get_log_level_int() == logging.DEBUG
        assert LoggingConfig(level="ERROR").get_log_level_int() == logging.ERROR

    @patch("indexsmith.core.logging.configure_logging")
    def test_configure_logging(self, mock_configure):
        """Test that logging configuration is applied correctly."""
        config = LoggingConfig(level="WARNING", json_format=True, log_file="/tmp/indexsmith.log")
        config.configure_logging()

        kwargs = mock_configure.call_args.kwargs
        assert kwargs["level"] == logging.WARNING
        assert kwargs["json_format"] is True
        assert kwargs["log_file"] == "/tmp/indexsmith.log"

        # Debug mode overrides level
        config.configure_logging(debug=True)
        assert mock_configure.call_args.kwargs["level"] == logging.DEBUG

    @patch.dict(os.environ, {"INDEXSMITH_LOG_LEVEL": "DEBUG", "INDEXSMITH_LOG_JSON": "true"})
    def test_from_env(self):
        """Test creating config from environment variables."""
        config = LoggingConfig.from_env()
        assert config.level == "DEBUG"
        assert config.json_format is True

        # Override with direct values
        config = LoggingConfig.from_env(level="ERROR")
        assert config.level == "ERROR"
        assert config.json_format is True


@pytest.mark.unit
class TestAutoIndexConfig:
    """Tests for the index scoring configuration."""

    def test_defaults(self):
        """Test the documented defaults."""
        config = AutoIndexConfig()
        assert config.score_threshold == 50
        assert config.enable_foreign_key_indexes
        assert config.enable_soft_delete_indexes
        assert config.enable_enum_indexes
        assert config.enable_tenant_indexes
        assert config.enable_composite_indexes
        assert config.enable_diagnostics is False
        assert config.max_indexable_string_length == 256
        assert config.soft_delete_property_patterns == DEFAULT_SOFT_DELETE_PATTERNS
        assert config.tenant_id_property_patterns == DEFAULT_TENANT_ID_PATTERNS
        assert config.excluded_property_patterns == DEFAULT_EXCLUDED_PATTERNS

    def test_config_is_frozen(self):
        """Test that a config cannot be changed once built."""
        config = AutoIndexConfig()
        with pytest.raises(ValidationError):
            config.score_threshold = 10

    def test_negative_threshold_is_allowed(self):
        """Test that any integer threshold is accepted."""
        assert AutoIndexConfig(score_threshold=-20).score_threshold == -20

    @pytest.mark.parametrize("length", [0, -1])
    def test_string_length_must_be_positive(self, length):
        """Test that the string length ceiling is validated."""
        with pytest.raises(ValidationError):
            AutoIndexConfig(max_indexable_string_length=length)

    def test_patterns_are_normalized(self):
        """Test that lists become tuples and blank patterns are dropped."""
        config = AutoIndexConfig(tenant_id_property_patterns=["TenantId", " ", " ShopId "])
        assert config.tenant_id_property_patterns == ("TenantId", "ShopId")

    def test_name_matching_is_case_insensitive(self):
        """Test case-insensitive exact name matching."""
        config = AutoIndexConfig()
        assert config.is_soft_delete_name("isdeleted")
        assert config.is_tenant_id_name("TENANTID")
        assert config.is_excluded_name("createdAt")
        assert not config.is_tenant_id_name("ParentTenantId")

    @patch.dict(
        os.environ,
        {
            "INDEXSMITH_SCORE_THRESHOLD": "30",
            "INDEXSMITH_ENABLE_ENUM_INDEXES": "false",
            "INDEXSMITH_ENABLE_DIAGNOSTICS": "yes",
            "INDEXSMITH_MAX_INDEXABLE_STRING_LENGTH": "128",
            "INDEXSMITH_TENANT_ID_PATTERNS": "ShopId, StoreId",
        },
    )
    def test_from_env(self):
        """Test creating config from environment variables."""
        config = AutoIndexConfig.from_env()
        assert config.score_threshold == 30
        assert config.enable_enum_indexes is False
        assert config.enable_diagnostics is True
        assert config.max_indexable_string_length == 128
        assert config.tenant_id_property_patterns == ("ShopId", "StoreId")
        assert config.soft_delete_property_patterns == DEFAULT_SOFT_DELETE_PATTERNS

        # Override with direct values
        config = AutoIndexConfig.from_env(score_threshold=70)
        assert config.score_threshold == 70
        assert config.enable_diagnostics is True

    def test_base_config_requires_from_env(self):
        """Test that the base class does not build itself from the environment."""
        with pytest.raises(NotImplementedError):
            BaseConfig.from_env()

    @patch.dict(os.environ, {"INDEXSMITH_SCORE_THRESHOLD": "42"})
    def test_get_env_var(self):
        """Test prefixed environment lookup."""
        assert AutoIndexConfig.get_env_var("score_threshold") == "42"
        assert AutoIndexConfig.get_env_var("missing", "fallback") == "fallback"
