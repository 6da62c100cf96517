"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from quakewatch.core.filters import DEFAULT_CRITERIA, FilterCriteria
from quakewatch.core.geo import GeoPoint
from quakewatch.core.rules import AlertRule


DEFAULT_FEED_URL = "https://api.orhanaydogdu.com.tr/deprem/kandilli/live"

# Kandilli publishes local Turkish time
DEFAULT_DISPLAY_TIMEZONE = "Europe/Istanbul"


@dataclass
class SeenStoreConfig:
    """Where the engine's seen IDs are checkpointed between restarts.

    Attributes:
        enabled: Checkpoint seen IDs to Firestore
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        collection: Firestore collection name
        document: Document ID holding the seen IDs
    """
    enabled: bool = False
    project_id: str | None = None
    database: str | None = None
    collection: str = "quakewatch"
    document: str = "seen_ids"


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        feed_url: Live feed endpoint
        polling_interval_seconds: How often to refresh the snapshot
        request_timeout_seconds: Feed request timeout
        alert_rule: Rule new events are evaluated against
        alert_on_first_snapshot: Alert on the first snapshot instead of
            using it as a baseline
        reference_location: Location used for risk assessment
        default_filters: Filter criteria used when none are given
        notification_webhook_url: Slack webhook that receives notifications
        seen_store: Seen-ID checkpoint settings
        display_timezone: IANA zone used for hour-of-day and per-day
            statistics
    """
    feed_url: str = DEFAULT_FEED_URL
    polling_interval_seconds: int = 300
    request_timeout_seconds: int = 30
    alert_rule: AlertRule = field(default_factory=AlertRule)
    alert_on_first_snapshot: bool = False
    reference_location: GeoPoint | None = None
    default_filters: FilterCriteria = DEFAULT_CRITERIA
    notification_webhook_url: str | None = None
    seen_store: SeenStoreConfig = field(default_factory=SeenStoreConfig)
    display_timezone: str = DEFAULT_DISPLAY_TIMEZONE


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(point: GeoPoint, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        point: Point to validate
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= point.latitude <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {point.latitude} out of range [-90, 90]",
        ))

    if not -180 <= point.longitude <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {point.longitude} out of range [-180, 180]",
        ))

    return errors


def validate_range(
    value: tuple[float, float],
    field_name: str,
) -> list[ValidationError]:
    """Warn about an inverted (min > max) range.

    Pure function. Inverted ranges are legal but match nothing.
    """
    low, high = value
    if low > high:
        return [ValidationError(
            field=field_name,
            message=f"min ({low}) > max ({high}); no events will match",
            severity="warning",
        )]
    return []


def validate_alert_rule(rule: AlertRule, field_name: str) -> list[ValidationError]:
    """Validate an alert rule.

    Pure function.
    """
    errors = []

    if rule.max_distance_km is not None:
        if rule.reference_location is None:
            errors.append(ValidationError(
                field=f"{field_name}.max_distance_km",
                message="max_distance_km requires a reference_location",
            ))
        if rule.max_distance_km <= 0:
            errors.append(ValidationError(
                field=f"{field_name}.max_distance_km",
                message=f"Alert radius must be positive, got {rule.max_distance_km}",
            ))

    if rule.reference_location is not None:
        errors.extend(validate_coordinates(
            rule.reference_location,
            f"{field_name}.reference_location",
        ))

    if not rule.sound_enabled and not rule.desktop_notification_enabled:
        errors.append(ValidationError(
            field=field_name,
            message="Both sound and notifications are disabled; alerts will only be logged",
            severity="warning",
        ))

    return errors


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if config.polling_interval_seconds <= 0:
        errors.append(ValidationError(
            field="polling_interval_seconds",
            message=f"Polling interval must be positive, got {config.polling_interval_seconds}",
        ))

    errors.extend(validate_alert_rule(config.alert_rule, "alert_rule"))

    if config.reference_location is not None:
        errors.extend(validate_coordinates(
            config.reference_location,
            "reference_location",
        ))

    errors.extend(validate_range(
        config.default_filters.magnitude_range,
        "default_filters.magnitude_range",
    ))
    errors.extend(validate_range(
        config.default_filters.depth_range,
        "default_filters.depth_range",
    ))

    try:
        ZoneInfo(config.display_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(ValidationError(
            field="display_timezone",
            message=f"Unknown time zone: {config.display_timezone}",
        ))

    webhook_url = config.notification_webhook_url
    if webhook_url is not None and webhook_url.startswith("${"):
        errors.append(ValidationError(
            field="notification_webhook_url",
            message="Webhook URL not resolved (still contains placeholder)",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
