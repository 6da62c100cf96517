"""Message formatting - Pure functions.

This module formats alert decisions into notification content.
All functions are pure with no side effects.
"""

from dataclasses import dataclass
from typing import Any

from quakewatch.core.event import SeismicEvent
from quakewatch.core.rules import AlertDecision


NOTIFICATION_TITLE = "Earthquake Alert!"


@dataclass(frozen=True)
class Notification:
    """Content of a desktop-style notification.

    Attributes:
        title: Notification title
        body: Notification body text
        tag: Identifier used to collapse repeated notifications
    """
    title: str
    body: str
    tag: str


def get_magnitude_emoji(magnitude: float) -> str:
    """Get an emoji representing earthquake severity.

    Pure function.
    """
    if magnitude >= 7.0:
        return "🚨"  # Major
    elif magnitude >= 6.0:
        return "⚠️"  # Strong
    elif magnitude >= 5.0:
        return "🔶"  # Moderate
    elif magnitude >= 4.0:
        return "🔸"  # Light
    else:
        return "🔹"  # Minor


def get_severity_label(magnitude: float) -> str:
    """Get a human-readable severity label.

    Pure function.
    """
    if magnitude >= 8.0:
        return "Great"
    elif magnitude >= 7.0:
        return "Major"
    elif magnitude >= 6.0:
        return "Strong"
    elif magnitude >= 5.0:
        return "Moderate"
    elif magnitude >= 4.0:
        return "Light"
    elif magnitude >= 3.0:
        return "Minor"
    else:
        return "Micro"


def format_event_summary(event: SeismicEvent) -> str:
    """Format a one-line summary of an event.

    Pure function.

    Args:
        event: Event to summarize

    Returns:
        One-line summary string
    """
    time_str = event.occurred_at.strftime("%Y-%m-%d %H:%M:%S UTC")
    return (
        f"M{event.magnitude:.1f} - {event.title} "
        f"at {time_str} (depth: {event.depth_km:.1f}km)"
    )


def format_notification(decision: AlertDecision) -> Notification:
    """Format the notification shown for an alert decision.

    Pure function.
    """
    event = decision.event
    place = event.closest_city_name or event.title
    return Notification(
        title=NOTIFICATION_TITLE,
        body=f"Magnitude {event.magnitude:.1f} earthquake detected near {place}",
        tag=event.id,
    )


def format_slack_message(decision: AlertDecision) -> dict[str, Any]:
    """Format an alert decision as a Slack webhook payload.

    Pure function.

    Args:
        decision: Alert decision to format

    Returns:
        Slack message payload dict
    """
    event = decision.event
    timestamp = int(event.occurred_at.timestamp())
    maps_url = f"https://www.google.com/maps?q={event.latitude},{event.longitude}"
    emoji = get_magnitude_emoji(event.magnitude)

    text = f"{emoji} *{event.magnitude:.1f}* - {event.title}"

    blocks: list[dict[str, Any]] = [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": f"{event.magnitude:.1f} {get_severity_label(event.magnitude)}",
            },
        },
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": (
                    f"<{maps_url}|{event.title}> at "
                    f"<!date^{timestamp}^{{time}}|{event.occurred_at.strftime('%H:%M')}>"
                ),
            },
        },
    ]

    details = [f"Depth: {event.depth_km:.1f} km"]
    if event.closest_city_name:
        details.append(
            f"Closest city: {event.closest_city_name} "
            f"({event.closest_city_distance_m / 1000:.1f} km)"
        )
    if decision.distance_km is not None:
        details.append(f"{decision.distance_km:.1f} km from your location")

    blocks.append({
        "type": "section",
        "text": {
            "type": "mrkdwn",
            "text": "\n".join(details),
        },
    })

    blocks.append({"type": "divider"})

    return {
        "text": text,
        "blocks": blocks,
    }
