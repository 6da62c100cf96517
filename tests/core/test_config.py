"""Unit tests for configuration validation."""

from quakewatch.core.config import (
    Config,
    SeenStoreConfig,
    validate_config,
    validate_coordinates,
    validate_range,
)
from quakewatch.core.filters import FilterCriteria
from quakewatch.core.geo import GeoPoint
from quakewatch.core.rules import AlertRule


class TestValidateCoordinates:
    """Tests for validate_coordinates()."""

    def test_valid(self):
        assert validate_coordinates(GeoPoint(38.4, 27.1), "loc") == []

    def test_bad_latitude(self):
        errors = validate_coordinates(GeoPoint(91, 0), "loc")
        assert len(errors) == 1
        assert "Latitude" in errors[0].message

    def test_bad_longitude(self):
        errors = validate_coordinates(GeoPoint(0, -181), "loc")
        assert len(errors) == 1
        assert "Longitude" in errors[0].message


class TestValidateRange:
    """Tests for validate_range()."""

    def test_ordered(self):
        assert validate_range((0, 10), "r") == []

    def test_inverted_is_warning(self):
        errors = validate_range((8, 2), "r")
        assert errors[0].severity == "warning"


class TestValidateConfig:
    """Tests for validate_config()."""

    def test_defaults_are_valid(self):
        result = validate_config(Config())

        assert result.valid is True
        assert result.errors == []

    def test_non_positive_interval(self):
        result = validate_config(Config(polling_interval_seconds=0))

        assert result.valid is False
        assert result.critical_errors[0].field == "polling_interval_seconds"

    def test_distance_rule_without_location(self):
        config = Config(alert_rule=AlertRule(max_distance_km=100))

        result = validate_config(config)

        assert result.valid is False
        assert result.critical_errors[0].field == "alert_rule.max_distance_km"

    def test_zero_radius(self):
        config = Config(alert_rule=AlertRule(
            max_distance_km=0, reference_location=GeoPoint(38, 27)
        ))
        assert validate_config(config).valid is False

    def test_bad_reference_location(self):
        config = Config(reference_location=GeoPoint(100, 27))
        assert validate_config(config).valid is False

    def test_inverted_filter_is_only_a_warning(self):
        config = Config(default_filters=FilterCriteria(magnitude_range=(9, 1)))

        result = validate_config(config)

        assert result.valid is True
        assert len(result.warnings) == 1

    def test_silent_rule_warns(self):
        config = Config(alert_rule=AlertRule(
            sound_enabled=False, desktop_notification_enabled=False
        ))

        result = validate_config(config)

        assert result.valid is True
        assert result.warnings[0].field == "alert_rule"

    def test_unresolved_webhook_warns(self):
        config = Config(notification_webhook_url="${SLACK_WEBHOOK_URL}")

        result = validate_config(config)

        assert result.valid is True
        assert result.warnings[0].field == "notification_webhook_url"

    def test_seen_store_disabled_by_default(self):
        assert Config().seen_store == SeenStoreConfig()
        assert Config().seen_store.enabled is False

    def test_display_timezone_defaults_to_feed_zone(self):
        assert Config().display_timezone == "Europe/Istanbul"

    def test_unknown_display_timezone(self):
        result = validate_config(Config(display_timezone="Mars/Olympus"))

        assert result.valid is False
        assert result.critical_errors[0].field == "display_timezone"
