"""Alert rule evaluation - Pure functions.

This module decides which newly-arrived events should trigger an alert
based on a user-configured rule. All functions are pure with no side
effects: they return AlertDecisions, they never play sounds or show
notifications themselves.
"""

from dataclasses import dataclass
from typing import Iterable

from quakewatch.core.event import SeismicEvent
from quakewatch.core.geo import GeoPoint, distance_to_event, is_within_radius


class ConfigurationError(ValueError):
    """Raised when an alert rule is internally inconsistent."""


@dataclass(frozen=True)
class AlertRule:
    """Configuration for when to trigger alerts.

    Attributes:
        min_magnitude: Minimum magnitude to alert on (inclusive)
        max_distance_km: Only alert within this distance of reference_location,
            None to ignore distance
        reference_location: Point distances are measured from; required
            when max_distance_km is set
        sound_enabled: Request an alert sound for matching events
        desktop_notification_enabled: Request a notification for matching events
    """
    min_magnitude: float = 0.0
    max_distance_km: float | None = None
    reference_location: GeoPoint | None = None
    sound_enabled: bool = True
    desktop_notification_enabled: bool = True


@dataclass(frozen=True)
class AlertDecision:
    """Verdict that a new event should be surfaced to the user.

    Attributes:
        event: The event that qualified
        play_sound: Whether the caller should play the alert sound
        show_notification: Whether the caller should show a notification
        distance_km: Distance from the rule's reference location, if one is set
    """
    event: SeismicEvent
    play_sound: bool
    show_notification: bool
    distance_km: float | None = None


def validate_rule(rule: AlertRule) -> None:
    """Check rule preconditions.

    Raises:
        ConfigurationError: If max_distance_km is set without a
            reference_location, or is negative
    """
    if rule.max_distance_km is None:
        return

    if rule.reference_location is None:
        raise ConfigurationError(
            "max_distance_km is set but no reference_location was provided"
        )

    if rule.max_distance_km < 0:
        raise ConfigurationError(
            f"max_distance_km must not be negative, got {rule.max_distance_km}"
        )


def matches_magnitude_rule(event: SeismicEvent, rule: AlertRule) -> bool:
    """Check if event magnitude reaches the rule threshold.

    Pure function.
    """
    return event.magnitude >= rule.min_magnitude


def matches_distance_rule(event: SeismicEvent, rule: AlertRule) -> bool:
    """Check if event is close enough to the reference location.

    Pure function. Always True when the rule has no distance limit.
    """
    if rule.max_distance_km is None or rule.reference_location is None:
        return True

    return is_within_radius(event, rule.reference_location, rule.max_distance_km)


def evaluate_rule(event: SeismicEvent, rule: AlertRule) -> AlertDecision | None:
    """Evaluate a single event against an alert rule.

    Pure function.

    Args:
        event: Event to evaluate
        rule: Alert rule to check against

    Returns:
        AlertDecision if the event qualifies, None otherwise
    """
    if not matches_magnitude_rule(event, rule):
        return None

    if not matches_distance_rule(event, rule):
        return None

    distance = None
    if rule.reference_location is not None:
        distance = distance_to_event(rule.reference_location, event)

    return AlertDecision(
        event=event,
        play_sound=rule.sound_enabled,
        show_notification=rule.desktop_notification_enabled,
        distance_km=distance,
    )


def make_alert_decisions(
    events: Iterable[SeismicEvent],
    rule: AlertRule,
) -> list[AlertDecision]:
    """Make alert decisions for a batch of events.

    Pure function.

    Args:
        events: Events to evaluate, in snapshot order
        rule: Alert rule

    Returns:
        Decisions for qualifying events, in the same order
    """
    decisions = []

    for event in events:
        decision = evaluate_rule(event, rule)
        if decision is not None:
            decisions.append(decision)

    return decisions
