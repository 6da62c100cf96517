"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components. Each refresh tick pulls a
fresh snapshot, runs change detection, executes the resulting alert
decisions and checkpoints the engine state. The display views (filtered
list, risk assessment, statistics) are pulled on demand from the latest
snapshot.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

import requests

from quakewatch.core.config import Config
from quakewatch.core.dedup import get_new_event_ids
from quakewatch.core.engine import AlertEngine
from quakewatch.core.event import EventSet, SeismicEvent
from quakewatch.core.filters import FilterCriteria, apply_filters, list_cities
from quakewatch.core.formatter import format_notification
from quakewatch.core.geo import GeoPoint
from quakewatch.core.risk import RiskAssessment, assess_risk
from quakewatch.core.rules import AlertDecision, validate_rule
from quakewatch.core.stats import (
    ActivityAnalysis,
    EventStatistics,
    analyze,
    summarize,
)
from quakewatch.shell.feed_client import FeedClient
from quakewatch.shell.seen_store import SeenIdStore
from quakewatch.shell.slack_client import SlackClient


logger = logging.getLogger(__name__)


SoundPlayer = Callable[[AlertDecision], None]
AlertListener = Callable[[AlertDecision], None]


@dataclass
class AlertResult:
    """Result of executing a single alert decision.

    Attributes:
        decision: The decision that was executed
        sound_played: Whether the alert sound was played
        notified: Whether the notification was delivered
        error: Error message if any side effect failed
    """
    decision: AlertDecision
    sound_played: bool = False
    notified: bool = False
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class RefreshResult:
    """Result of one refresh cycle.

    Attributes:
        events_fetched: Events in the new snapshot
        events_new: Events not present in the previous snapshot
        alerts: Executed alert decisions
        errors: Any errors that occurred
    """
    events_fetched: int = 0
    events_new: int = 0
    alerts: list[AlertResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Returns True if no errors occurred."""
        return len(self.errors) == 0

    @property
    def alerts_failed(self) -> list[AlertResult]:
        return [a for a in self.alerts if not a.success]

    @property
    def summary(self) -> str:
        """Human-readable summary of the refresh result."""
        return (
            f"Fetched {self.events_fetched} events, "
            f"{self.events_new} new, "
            f"{len(self.alerts)} alerts, "
            f"{len(self.alerts_failed)} failed"
        )


class Monitor:
    """Drives periodic refreshes and serves the derived views.

    This class wires together:
    - Feed client (fetches the snapshot)
    - Alert engine (change detection and rule evaluation)
    - Slack client (delivers notifications)
    - Seen-ID store (checkpoints engine state, optional)
    - Core functions (filtering, risk scoring, statistics)

    Refreshes are serialized: one cycle, including the seen-ID update,
    completes before the next one starts.
    """

    def __init__(
        self,
        config: Config,
        feed_client: FeedClient | None = None,
        engine: AlertEngine | None = None,
        slack_client: SlackClient | None = None,
        seen_store: SeenIdStore | None = None,
        sound_player: SoundPlayer | None = None,
        listeners: list[AlertListener] | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            config: Application configuration
            feed_client: Feed client (created if not provided)
            engine: Alert engine (created if not provided)
            slack_client: Slack client (created from the configured webhook
                if not provided)
            seen_store: Checkpoint store (created if enabled in config)
            sound_player: Callable that plays the alert sound
            listeners: Callables notified of every executed decision

        Raises:
            ConfigurationError: If the configured alert rule is inconsistent
            ZoneInfoNotFoundError: If display_timezone is not a known zone
        """
        validate_rule(config.alert_rule)

        self.config = config
        self.feed_client = feed_client or FeedClient(
            base_url=config.feed_url,
            timeout=config.request_timeout_seconds,
        )
        self.engine = engine or AlertEngine(
            alert_on_first_snapshot=config.alert_on_first_snapshot,
        )
        self.slack_client = slack_client
        if self.slack_client is None and config.notification_webhook_url:
            self.slack_client = SlackClient(
                config.notification_webhook_url,
                timeout=config.request_timeout_seconds,
            )
        self.seen_store = seen_store
        if self.seen_store is None and config.seen_store.enabled:
            self.seen_store = SeenIdStore(config.seen_store)
        self.sound_player = sound_player
        self.listeners = list(listeners or [])
        self.display_tz = ZoneInfo(config.display_timezone)

        self._snapshot = EventSet()
        self._refreshed_at: datetime | None = None
        self._refresh_lock = threading.Lock()

        self._restore_seen_ids()

    def _restore_seen_ids(self) -> None:
        """Seed the engine from the last checkpoint, if there is one."""
        if self.seen_store is None:
            return

        seen_ids = self.seen_store.load()
        if seen_ids is not None:
            self.engine.seed(seen_ids)
            logger.info("Restored %d seen IDs from checkpoint", len(seen_ids))

    @property
    def snapshot(self) -> EventSet:
        """The most recent successfully fetched snapshot."""
        return self._snapshot

    @property
    def refreshed_at(self) -> datetime | None:
        return self._refreshed_at

    def _play_sound(self, decision: AlertDecision) -> None:
        if self.sound_player is None:
            logger.info("Alert sound requested for %s", decision.event.id)
            return
        self.sound_player(decision)

    def _notify(self, decision: AlertDecision) -> str | None:
        """Deliver the notification for a decision.

        Without a webhook the notification is only logged.

        Returns:
            Error message if delivery failed, None otherwise
        """
        notification = format_notification(decision)

        if self.slack_client is None:
            logger.warning("%s %s", notification.title, notification.body)
            return None

        response = self.slack_client.send_alert(decision)
        if response.success:
            return None
        return response.error or f"HTTP {response.status_code}"

    def _execute_decision(self, decision: AlertDecision) -> AlertResult:
        """Perform the side effects requested by a decision."""
        result = AlertResult(decision=decision)
        errors = []

        if decision.play_sound:
            try:
                self._play_sound(decision)
                result.sound_played = True
            except Exception as e:
                errors.append(f"sound: {e}")

        if decision.show_notification:
            error = self._notify(decision)
            if error is None:
                result.notified = True
            else:
                errors.append(f"notification: {error}")

        for listener in self.listeners:
            try:
                listener(decision)
            except Exception as e:
                errors.append(f"listener: {e}")

        if errors:
            result.error = "; ".join(errors)
            logger.error(
                "Failed to execute alert for M%.1f %s: %s",
                decision.event.magnitude,
                decision.event.title,
                result.error,
            )
        else:
            logger.info(
                "Alerted for M%.1f %s",
                decision.event.magnitude,
                decision.event.title,
            )

        return result

    def refresh(self) -> RefreshResult:
        """Run a complete refresh cycle.

        This is the main entry point that:
        1. Fetches the full snapshot from the feed
        2. Replaces the current snapshot
        3. Evaluates new events against the alert rule
        4. Executes the alert decisions
        5. Checkpoints the engine's seen IDs

        A failed fetch keeps the previous snapshot and leaves the engine
        untouched.

        Returns:
            RefreshResult with details of what happened
        """
        with self._refresh_lock:
            try:
                snapshot = self.feed_client.fetch_snapshot()
            except requests.RequestException as e:
                error_msg = f"Failed to fetch feed: {e}"
                logger.error(error_msg)
                return RefreshResult(errors=[error_msg])

            self._snapshot = snapshot
            self._refreshed_at = datetime.now(timezone.utc)

            events_new = 0
            if self.engine.primed:
                events_new = len(get_new_event_ids(snapshot.ids(), self.engine.seen_ids))

            decisions = self.engine.evaluate(snapshot, self.config.alert_rule)

            logger.info(
                "%d new events (of %d total), %d match the alert rule",
                events_new,
                len(snapshot),
                len(decisions),
            )

            result = RefreshResult(
                events_fetched=len(snapshot),
                events_new=events_new,
                alerts=[self._execute_decision(d) for d in decisions],
            )

            if self.seen_store is not None:
                if not self.seen_store.save(self.engine.seen_ids):
                    result.errors.append("Failed to checkpoint seen IDs")

            return result

    def filtered_events(
        self,
        criteria: FilterCriteria | None = None,
    ) -> list[SeismicEvent]:
        """Events from the current snapshot matching the criteria."""
        return apply_filters(self._snapshot, criteria or self.config.default_filters)

    def cities(self) -> list[str]:
        """Closest-city names available in the current snapshot."""
        return list_cities(self._snapshot)

    def assess(
        self,
        reference_location: GeoPoint | None = None,
        now: datetime | None = None,
    ) -> RiskAssessment | None:
        """Risk assessment for a location (the configured one by default).

        Returns:
            RiskAssessment, or None when no location is known
        """
        return assess_risk(
            self._snapshot,
            reference_location or self.config.reference_location,
            now or datetime.now(timezone.utc),
        )

    def statistics(self, now: datetime | None = None) -> EventStatistics:
        """Dashboard statistics for the current snapshot."""
        return summarize(
            self._snapshot,
            now or datetime.now(timezone.utc),
            self.display_tz,
        )

    def analytics(self, days: int = 7, now: datetime | None = None) -> ActivityAnalysis:
        """Activity over the trailing ``days`` of the current snapshot."""
        return analyze(
            self._snapshot,
            now or datetime.now(timezone.utc),
            days,
            self.display_tz,
        )
