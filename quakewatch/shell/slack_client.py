"""Slack Webhook Client - Imperative Shell.

Posts alert decisions to one Slack incoming webhook. The payload is
built by the core formatter; only the HTTP call lives here.
"""

import logging
from dataclasses import dataclass

import requests

from quakewatch.core.formatter import format_slack_message
from quakewatch.core.rules import AlertDecision


logger = logging.getLogger(__name__)


# Default timeout for webhook requests (seconds)
DEFAULT_TIMEOUT = 10


@dataclass
class SlackResponse:
    """Outcome of one webhook post.

    Attributes:
        success: Whether Slack accepted the message
        status_code: HTTP status code (0 if no response was received)
        error: Error message if failed
    """
    success: bool
    status_code: int
    error: str | None = None


class SlackClient:
    """Delivers alert notifications to a Slack webhook."""

    def __init__(self, webhook_url: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        self.webhook_url = webhook_url
        self.timeout = timeout

    def send_alert(self, decision: AlertDecision) -> SlackResponse:
        """Post the notification for one alert decision.

        Network and HTTP errors are reported in the returned SlackResponse
        rather than raised, so one failed delivery never aborts a refresh.
        """
        event_id = decision.event.id

        try:
            response = requests.post(
                self.webhook_url,
                json=format_slack_message(decision),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.Timeout:
            logger.error("Slack webhook timed out for event %s", event_id)
            return SlackResponse(success=False, status_code=0, error="Request timed out")
        except requests.HTTPError as e:
            logger.warning(
                "Slack rejected event %s: %d - %s",
                event_id,
                e.response.status_code,
                e.response.text,
            )
            return SlackResponse(
                success=False,
                status_code=e.response.status_code,
                error=e.response.text,
            )
        except requests.RequestException as e:
            logger.error("Slack webhook failed for event %s: %s", event_id, e)
            return SlackResponse(success=False, status_code=0, error=str(e))

        logger.info("Slack notified for event %s", event_id)
        return SlackResponse(success=True, status_code=response.status_code)
