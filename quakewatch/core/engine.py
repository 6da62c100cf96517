"""Alert engine - the one stateful piece of the functional core.

The engine remembers which event IDs it saw on the previous evaluation,
diffs each new snapshot against them, and runs the new events through
the alert rule. It performs no I/O: decisions are returned for the
caller to execute.
"""

import logging
import threading
from typing import Iterable

from quakewatch.core.dedup import filter_already_seen
from quakewatch.core.event import EventSet
from quakewatch.core.rules import (
    AlertDecision,
    AlertRule,
    make_alert_decisions,
    validate_rule,
)


logger = logging.getLogger(__name__)


class AlertEngine:
    """Detects new events between snapshots and decides which to alert on.

    One engine instance corresponds to one alerting session. Its seen-ID
    set starts empty and is replaced (not merged) with the snapshot's IDs
    after every evaluation, so an event that drops out of the feed and
    later reappears alerts again.

    First-snapshot policy: an engine that has never evaluated and was not
    seeded treats its first snapshot as a baseline and returns no
    decisions, unless ``alert_on_first_snapshot`` is True. Seeding with
    ``seen_ids`` (even an empty set) marks the engine as primed.
    """

    def __init__(
        self,
        alert_on_first_snapshot: bool = False,
        seen_ids: Iterable[str] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            alert_on_first_snapshot: Alert on every qualifying event in the
                first snapshot instead of using it as a baseline
            seen_ids: Previously-seen IDs, e.g. restored from a checkpoint
        """
        self.alert_on_first_snapshot = alert_on_first_snapshot
        self._lock = threading.Lock()
        self._seen_ids: frozenset[str] = frozenset()
        self._primed = False

        if seen_ids is not None:
            self.seed(seen_ids)

    @property
    def seen_ids(self) -> frozenset[str]:
        """IDs observed as of the last evaluation (read-only copy)."""
        return self._seen_ids

    @property
    def primed(self) -> bool:
        """True once the engine has a baseline to diff against."""
        return self._primed

    def seed(self, seen_ids: Iterable[str]) -> None:
        """Replace the seen-ID set, e.g. from a persisted checkpoint."""
        with self._lock:
            self._seen_ids = frozenset(seen_ids)
            self._primed = True

    def evaluate(
        self,
        snapshot: EventSet,
        rule: AlertRule,
    ) -> list[AlertDecision]:
        """Evaluate a new snapshot and update the seen-ID set.

        Args:
            snapshot: Complete current feed snapshot
            rule: Alert rule to evaluate new events against

        Returns:
            Decisions for new qualifying events, in snapshot order

        Raises:
            ConfigurationError: If the rule is inconsistent
        """
        validate_rule(rule)

        with self._lock:
            if not self._primed and not self.alert_on_first_snapshot:
                decisions: list[AlertDecision] = []
                logger.debug(
                    "Using first snapshot of %d events as baseline", len(snapshot)
                )
            else:
                new_events = filter_already_seen(snapshot, self._seen_ids)
                decisions = make_alert_decisions(new_events, rule)
                logger.debug(
                    "%d new events, %d qualify for alerts",
                    len(new_events),
                    len(decisions),
                )

            self._seen_ids = snapshot.ids()
            self._primed = True

        return decisions
