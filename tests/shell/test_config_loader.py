"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import os
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from quakewatch.core.config import DEFAULT_FEED_URL, Config, validate_config
from quakewatch.core.filters import DEFAULT_CRITERIA, SortKey
from quakewatch.core.geo import GeoPoint
from quakewatch.core.rules import AlertRule
from quakewatch.shell.config_loader import (
    _get_secret_manager_client,
    _parse_alert_rule,
    _parse_bool,
    _parse_location,
    _resolve_value,
    load_config,
    load_config_from_dict,
    load_config_from_env,
)


NO_SECRETS = "quakewatch.shell.config_loader._get_secret_manager_client"


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        """Non-string values are returned unchanged."""
        assert _resolve_value(123) == 123
        assert _resolve_value(None) is None
        assert _resolve_value(True) is True

    def test_returns_plain_string_unchanged(self):
        assert _resolve_value("https://example.com") == "https://example.com"

    def test_resolves_env_var_placeholder(self):
        """Resolves ${VAR} placeholders from environment."""
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert _resolve_value("${TEST_VAR}") == "test_value"

    def test_returns_placeholder_if_env_var_not_set(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _resolve_value("${UNDEFINED_VAR}") == "${UNDEFINED_VAR}"

    def test_uses_secret_client_when_provided(self):
        mock_client = Mock()
        mock_client.resolve.return_value = "secret_value"

        result = _resolve_value("${secret:webhook}", mock_client)

        assert result == "secret_value"
        mock_client.resolve.assert_called_once_with("${secret:webhook}")

    def test_ignores_secret_placeholder_without_client(self):
        assert _resolve_value("${secret:webhook}") == "${secret:webhook}"


class TestGetSecretManagerClient:
    """Tests for _get_secret_manager_client function."""

    def test_none_without_project(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _get_secret_manager_client() is None

    def test_client_with_project(self):
        with patch.dict(os.environ, {"GCP_PROJECT": "my-project"}):
            client = _get_secret_manager_client()
        assert client.config.project_id == "my-project"


class TestParseHelpers:
    """Tests for the small parsing helpers."""

    @pytest.mark.parametrize("value,expected", [
        ("true", True), ("Yes", True), ("1", True), ("on", True),
        ("false", False), ("no", False), ("", False),
        (True, True), (False, False), (0, False),
    ])
    def test_parse_bool(self, value, expected):
        assert _parse_bool(value) is expected

    def test_parse_location_mapping(self):
        assert _parse_location({"latitude": "38.4", "longitude": 27.1}) == GeoPoint(38.4, 27.1)

    def test_parse_location_string(self):
        assert _parse_location("38.4, 27.1") == GeoPoint(38.4, 27.1)

    def test_parse_location_none(self):
        assert _parse_location(None) is None

    def test_parse_location_bad_string(self):
        with pytest.raises(ValueError):
            _parse_location("38.4")


class TestParseAlertRule:
    """Tests for _parse_alert_rule function."""

    def test_parses_minimal_rule(self):
        assert _parse_alert_rule({}, None) == AlertRule()

    def test_inherits_reference_location(self):
        home = GeoPoint(38.4, 27.1)

        rule = _parse_alert_rule({"min_magnitude": 4, "max_distance_km": 200}, home)

        assert rule.min_magnitude == 4.0
        assert rule.max_distance_km == 200.0
        assert rule.reference_location == home

    def test_own_location_overrides(self):
        rule = _parse_alert_rule(
            {"reference_location": {"latitude": 41.0, "longitude": 29.0}},
            GeoPoint(38.4, 27.1),
        )
        assert rule.reference_location == GeoPoint(41.0, 29.0)

    def test_parses_flags(self):
        rule = _parse_alert_rule(
            {"sound_enabled": "false", "desktop_notification_enabled": False}, None
        )
        assert rule.sound_enabled is False
        assert rule.desktop_notification_enabled is False


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict function."""

    def test_loads_minimal_config(self):
        with patch(NO_SECRETS, return_value=None):
            config = load_config_from_dict({})

        assert config.feed_url == DEFAULT_FEED_URL
        assert config.polling_interval_seconds == 300
        assert config.default_filters == DEFAULT_CRITERIA
        assert config.notification_webhook_url is None
        assert config.display_timezone == "Europe/Istanbul"

    def test_loads_full_config(self):
        data = {
            "feed_url": "https://feed.example.com/live",
            "polling_interval_seconds": 60,
            "request_timeout_seconds": 10,
            "reference_location": {"latitude": 38.4237, "longitude": 27.1428},
            "alert_on_first_snapshot": True,
            "alert_rule": {"min_magnitude": 4.5, "max_distance_km": 300},
            "default_filters": {"magnitude_range": [2, 10], "sort_key": "magnitude"},
            "notification_webhook_url": "https://hooks.slack.com/test",
            "seen_store": {"enabled": True, "database": "quakes", "collection": "state"},
            "display_timezone": "UTC",
        }

        with patch(NO_SECRETS, return_value=None):
            config = load_config_from_dict(data)

        assert config.feed_url == "https://feed.example.com/live"
        assert config.polling_interval_seconds == 60
        assert config.request_timeout_seconds == 10
        assert config.reference_location == GeoPoint(38.4237, 27.1428)
        assert config.alert_on_first_snapshot is True
        assert config.alert_rule.min_magnitude == 4.5
        assert config.alert_rule.reference_location == GeoPoint(38.4237, 27.1428)
        assert config.default_filters.magnitude_range == (2.0, 10.0)
        assert config.default_filters.sort_key is SortKey.MAGNITUDE
        assert config.notification_webhook_url == "https://hooks.slack.com/test"
        assert config.seen_store.enabled is True
        assert config.seen_store.database == "quakes"
        assert config.seen_store.collection == "state"
        assert config.seen_store.document == "seen_ids"
        assert config.display_timezone == "UTC"

    def test_resolves_webhook_from_env(self):
        data = {"notification_webhook_url": "${SLACK_WEBHOOK_URL}"}

        with patch(NO_SECRETS, return_value=None), \
                patch.dict(os.environ, {"SLACK_WEBHOOK_URL": "https://hooks.slack.com/env"}):
            config = load_config_from_dict(data)

        assert config.notification_webhook_url == "https://hooks.slack.com/env"

    def test_resolves_webhook_secret(self):
        secret_client = Mock()
        secret_client.resolve.return_value = "https://hooks.slack.com/secret"

        with patch(NO_SECRETS, return_value=secret_client):
            config = load_config_from_dict(
                {"notification_webhook_url": "${secret:slack-webhook}"}
            )

        assert config.notification_webhook_url == "https://hooks.slack.com/secret"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_missing_file_returns_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml")
        assert config == Config()

    def test_empty_file_returns_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(path) == Config()

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "polling_interval_seconds: 120\n"
            "alert_rule:\n"
            "  min_magnitude: 5.0\n"
        )

        with patch(NO_SECRETS, return_value=None):
            config = load_config(path)

        assert config.polling_interval_seconds == 120
        assert config.alert_rule.min_magnitude == 5.0

    def test_uses_config_path_env(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("polling_interval_seconds: 45\n")

        with patch(NO_SECRETS, return_value=None), \
                patch.dict(os.environ, {"CONFIG_PATH": str(path)}):
            config = load_config()

        assert config.polling_interval_seconds == 45

    def test_shipped_config_is_valid(self):
        path = Path(__file__).resolve().parents[2] / "config" / "config.yaml"

        with patch(NO_SECRETS, return_value=None):
            config = load_config(path)

        assert config.alert_rule.max_distance_km == 300
        assert config.alert_rule.reference_location == config.reference_location
        assert validate_config(config).valid is True


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config_from_env()

        assert config.alert_rule == AlertRule()
        assert config.seen_store.enabled is False
        assert config.alert_on_first_snapshot is False
        assert config.display_timezone == "Europe/Istanbul"

    def test_reads_environment(self):
        env = {
            "QUAKEWATCH_FEED_URL": "https://feed.example.com",
            "QUAKEWATCH_POLL_INTERVAL": "90",
            "QUAKEWATCH_MIN_MAGNITUDE": "4.2",
            "QUAKEWATCH_MAX_DISTANCE_KM": "150",
            "QUAKEWATCH_LOCATION": "38.4,27.1",
            "QUAKEWATCH_ALERT_ON_FIRST_SNAPSHOT": "yes",
            "QUAKEWATCH_SOUND": "false",
            "QUAKEWATCH_WEBHOOK_URL": "https://hooks.slack.com/x",
            "FIRESTORE_DATABASE": "quakes",
            "QUAKEWATCH_TIMEZONE": "Asia/Tokyo",
        }

        with patch.dict(os.environ, env, clear=True):
            config = load_config_from_env()

        assert config.feed_url == "https://feed.example.com"
        assert config.polling_interval_seconds == 90
        assert config.alert_rule.min_magnitude == 4.2
        assert config.alert_rule.max_distance_km == 150.0
        assert config.alert_rule.reference_location == GeoPoint(38.4, 27.1)
        assert config.alert_rule.sound_enabled is False
        assert config.alert_rule.desktop_notification_enabled is True
        assert config.reference_location == GeoPoint(38.4, 27.1)
        assert config.alert_on_first_snapshot is True
        assert config.notification_webhook_url == "https://hooks.slack.com/x"
        assert config.seen_store.enabled is True
        assert config.seen_store.database == "quakes"
        assert config.display_timezone == "Asia/Tokyo"
