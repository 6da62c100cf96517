"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, SeenStoreConfig) are defined in quakewatch/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from quakewatch.core.config import (
    DEFAULT_DISPLAY_TIMEZONE,
    DEFAULT_FEED_URL,
    Config,
    SeenStoreConfig,
)
from quakewatch.core.filters import DEFAULT_CRITERIA, criteria_from_dict
from quakewatch.core.geo import GeoPoint
from quakewatch.core.rules import AlertRule
from quakewatch.shell.secret_manager_client import (
    SecretManagerClient,
    SecretManagerConfig,
)


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_secret_manager_client() -> Optional[SecretManagerClient]:
    """Get a Secret Manager client.

    Returns None if GCP_PROJECT is not set (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT")
    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: Optional[SecretManagerClient] = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        var_spec = value[2:-1]
        if not var_spec.startswith("secret:"):
            env_value = os.environ.get(var_spec)
            if env_value:
                return env_value
            logger.warning("Environment variable %s not set", var_spec)

    return value


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def _parse_location(data: Any) -> GeoPoint | None:
    """Parse a location from a mapping or a "lat,lng" string."""
    if data is None:
        return None

    if isinstance(data, str):
        parts = [float(p.strip()) for p in data.split(",")]
        if len(parts) != 2:
            raise ValueError(f"Expected 'lat,lng', got {data!r}")
        return GeoPoint(latitude=parts[0], longitude=parts[1])

    return GeoPoint(
        latitude=float(data["latitude"]),
        longitude=float(data["longitude"]),
    )


def _parse_alert_rule(
    data: dict[str, Any],
    default_location: GeoPoint | None,
) -> AlertRule:
    """Parse an alert rule from config data.

    The rule inherits the top-level reference_location unless it sets
    its own.
    """
    location = default_location
    if "reference_location" in data:
        location = _parse_location(data["reference_location"])

    max_distance = data.get("max_distance_km")

    return AlertRule(
        min_magnitude=float(data.get("min_magnitude", 0.0)),
        max_distance_km=float(max_distance) if max_distance is not None else None,
        reference_location=location,
        sound_enabled=_parse_bool(data.get("sound_enabled", True)),
        desktop_notification_enabled=_parse_bool(
            data.get("desktop_notification_enabled", True)
        ),
    )


def _parse_seen_store(data: dict[str, Any]) -> SeenStoreConfig:
    """Parse seen-ID checkpoint settings from config data."""
    defaults = SeenStoreConfig()
    return SeenStoreConfig(
        enabled=_parse_bool(data.get("enabled", defaults.enabled)),
        project_id=data.get("project_id"),
        database=data.get("database"),
        collection=data.get("collection", defaults.collection),
        document=data.get("document", defaults.document),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only placeholder expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    secret_client = _get_secret_manager_client()

    reference_location = _parse_location(data.get("reference_location"))

    default_filters = DEFAULT_CRITERIA
    if data.get("default_filters"):
        default_filters = criteria_from_dict(data["default_filters"])

    webhook_url = data.get("notification_webhook_url")
    if webhook_url:
        webhook_url = _resolve_value(webhook_url, secret_client)

    return Config(
        feed_url=_resolve_value(data.get("feed_url", DEFAULT_FEED_URL), secret_client),
        polling_interval_seconds=int(data.get("polling_interval_seconds", 300)),
        request_timeout_seconds=int(data.get("request_timeout_seconds", 30)),
        alert_rule=_parse_alert_rule(data.get("alert_rule") or {}, reference_location),
        alert_on_first_snapshot=_parse_bool(data.get("alert_on_first_snapshot", False)),
        reference_location=reference_location,
        default_filters=default_filters,
        notification_webhook_url=webhook_url or None,
        seen_store=_parse_seen_store(data.get("seen_store") or {}),
        display_timezone=data.get("display_timezone") or DEFAULT_DISPLAY_TIMEZONE,
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: min magnitude %.1f, distance limit %s, polling every %ds",
        config.alert_rule.min_magnitude,
        config.alert_rule.max_distance_km,
        config.polling_interval_seconds,
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        QUAKEWATCH_FEED_URL: Feed endpoint
        QUAKEWATCH_POLL_INTERVAL: Refresh interval in seconds
        QUAKEWATCH_MIN_MAGNITUDE: Minimum magnitude to alert on
        QUAKEWATCH_MAX_DISTANCE_KM: Distance limit for alerts
        QUAKEWATCH_LOCATION: Reference location as "lat,lng"
        QUAKEWATCH_ALERT_ON_FIRST_SNAPSHOT: Alert on the initial feed
        QUAKEWATCH_SOUND: Request alert sounds (default true)
        QUAKEWATCH_NOTIFICATIONS: Request notifications (default true)
        QUAKEWATCH_WEBHOOK_URL: Slack webhook for notifications
        QUAKEWATCH_TIMEZONE: Zone for hourly and daily statistics
        FIRESTORE_DATABASE: Enables seen-ID checkpointing in this database

    Returns:
        Config object from environment
    """
    secret_client = _get_secret_manager_client()

    location = _parse_location(os.environ.get("QUAKEWATCH_LOCATION"))

    max_distance = os.environ.get("QUAKEWATCH_MAX_DISTANCE_KM")

    rule = AlertRule(
        min_magnitude=float(os.environ.get("QUAKEWATCH_MIN_MAGNITUDE", "0")),
        max_distance_km=float(max_distance) if max_distance else None,
        reference_location=location,
        sound_enabled=_parse_bool(os.environ.get("QUAKEWATCH_SOUND", "true")),
        desktop_notification_enabled=_parse_bool(
            os.environ.get("QUAKEWATCH_NOTIFICATIONS", "true")
        ),
    )

    webhook_url = os.environ.get("QUAKEWATCH_WEBHOOK_URL")
    if webhook_url:
        webhook_url = _resolve_value(webhook_url, secret_client)

    firestore_database = os.environ.get("FIRESTORE_DATABASE")
    seen_store = SeenStoreConfig(
        enabled=firestore_database is not None,
        database=firestore_database,
    )

    return Config(
        feed_url=os.environ.get("QUAKEWATCH_FEED_URL", DEFAULT_FEED_URL),
        polling_interval_seconds=int(os.environ.get("QUAKEWATCH_POLL_INTERVAL", "300")),
        alert_rule=rule,
        alert_on_first_snapshot=_parse_bool(
            os.environ.get("QUAKEWATCH_ALERT_ON_FIRST_SNAPSHOT", "false")
        ),
        reference_location=location,
        notification_webhook_url=webhook_url or None,
        seen_store=seen_store,
        display_timezone=os.environ.get("QUAKEWATCH_TIMEZONE", DEFAULT_DISPLAY_TIMEZONE),
    )
