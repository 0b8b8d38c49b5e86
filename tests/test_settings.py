"""
Unit tests for environment variable parsing and configuration defaults.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import importlib
import os
from datetime import timedelta
from unittest.mock import patch

from nodedrain import settings


class TestDurationParsing:
    """Test duration parsing functionality."""

    def test_parse_duration_seconds(self):
        """Test parsing seconds."""
        assert settings._parse_duration("30s") == timedelta(seconds=30)

    def test_parse_duration_minutes(self):
        """Test parsing minutes."""
        assert settings._parse_duration("15m") == timedelta(minutes=15)

    def test_parse_duration_hours(self):
        """Test parsing hours."""
        assert settings._parse_duration("2h") == timedelta(hours=2)

    def test_parse_duration_days(self):
        """Test parsing days."""
        assert settings._parse_duration("3d") == timedelta(days=3)

    def test_parse_duration_invalid_format(self):
        """Test invalid duration format returns the default."""
        assert settings._parse_duration("invalid") == timedelta(minutes=1)

    def test_parse_duration_custom_default(self):
        """Test invalid duration format returns a caller supplied default."""
        result = settings._parse_duration("", default=timedelta(seconds=5))
        assert result == timedelta(seconds=5)

    def test_parse_duration_case_insensitive(self):
        """Test case insensitive parsing."""
        assert settings._parse_duration("30M") == timedelta(minutes=30)


class TestListParsing:
    """Test list parsing functionality."""

    def test_parse_list_with_spaces(self):
        """Test parsing list with spaces."""
        result = settings._parse_list("item1, item2 , item3")
        assert result == ["item1", "item2", "item3"]

    def test_parse_list_empty_string(self):
        """Test parsing empty string."""
        assert settings._parse_list("") == []

    def test_parse_list_empty_items(self):
        """Test parsing list with empty items."""
        assert settings._parse_list("item1,,item2,") == ["item1", "item2"]


class TestBooleanParsing:
    """Test boolean environment variable parsing."""

    def test_get_bool_env_true_values(self):
        """Test various true values."""
        for value in ["true", "True", "1", "yes", "on"]:
            with patch.dict(os.environ, {"TEST_BOOL": value}):
                assert settings._get_bool_env("TEST_BOOL", False) is True, value

    def test_get_bool_env_false_values(self):
        """Test various false values."""
        for value in ["false", "0", "no", "off", "invalid"]:
            with patch.dict(os.environ, {"TEST_BOOL": value}):
                assert settings._get_bool_env("TEST_BOOL", True) is False, value

    def test_get_bool_env_default_when_missing(self):
        """Test default value when environment variable is missing."""
        with patch.dict(os.environ, {}, clear=True):
            assert settings._get_bool_env("MISSING_VAR", True) is True
            assert settings._get_bool_env("MISSING_VAR", False) is False


class TestSettingsIntegration:
    """Test settings module integration."""

    def teardown_method(self):
        """Reload settings to restore original state."""
        importlib.reload(settings)

    def test_default_settings(self):
        """Test default settings values."""
        with patch.dict(os.environ, {}, clear=True):
            importlib.reload(settings)

            assert settings.LOG_LEVEL == "INFO"
            assert settings.ENABLE_JSON_LOGS is True
            assert settings.CLUSTER_NAME == "unknown"
            assert settings.SLACK_WEBHOOK_URL is None
            assert settings.DISRUPTION_TAINT_KEY == "nodedrain.io/disruption"
            assert settings.DISRUPTION_TAINT_VALUE == "disrupting"
            assert settings.DISRUPTION_TAINT_EFFECT == "NoSchedule"
            assert settings.EXCLUDE_BALANCERS_LABEL_VALUE == "nodedrain"
            assert settings.RESTART_ANNOTATION_KEY == "kubectl.kubernetes.io/restartedNode"
            assert settings.CRITICAL_PRIORITY_CLASSES == [
                "system-cluster-critical",
                "system-node-critical",
            ]
            assert settings.STUCK_TERMINATING_TIMEOUT == timedelta(minutes=1)
            assert settings.ENABLE_DEPLOYMENT_RESTART is True
            assert settings.SLACK_EVENT_TYPES == ["Normal", "Warning"]

    def test_environment_variable_override(self):
        """Test environment variable overrides."""
        env_vars = {
            "LOG_LEVEL": "debug",
            "ENABLE_JSON_LOGS": "false",
            "CLUSTER_NAME": "test-cluster",
            "SLACK_WEBHOOK_URL": "https://hooks.slack.com/test",
            "TEST_KUBE_CONTEXT_NAME": "kind-test",
            "DISRUPTION_TAINT_KEY": "example.com/drain",
            "DISRUPTION_TAINT_EFFECT": "NoExecute",
            "CRITICAL_PRIORITY_CLASSES": "platform-critical",
            "STUCK_TERMINATING_TIMEOUT": "5m",
            "ENABLE_DEPLOYMENT_RESTART": "false",
            "SLACK_EVENT_TYPES": "Warning",
        }

        with patch.dict(os.environ, env_vars):
            importlib.reload(settings)

            assert settings.LOG_LEVEL == "DEBUG"
            assert settings.ENABLE_JSON_LOGS is False
            assert settings.CLUSTER_NAME == "test-cluster"
            assert settings.SLACK_WEBHOOK_URL == "https://hooks.slack.com/test"
            assert settings.TEST_KUBE_CONTEXT_NAME == "kind-test"
            assert settings.DISRUPTION_TAINT_KEY == "example.com/drain"
            assert settings.DISRUPTION_TAINT_EFFECT == "NoExecute"
            assert settings.CRITICAL_PRIORITY_CLASSES == ["platform-critical"]
            assert settings.STUCK_TERMINATING_TIMEOUT == timedelta(minutes=5)
            assert settings.ENABLE_DEPLOYMENT_RESTART is False
            assert settings.SLACK_EVENT_TYPES == ["Warning"]
