"""Functional Core - Pure functions with no side effects.

This module contains all business logic:
- Feed parsing into event snapshots
- Great-circle distance calculations
- Filtering and sorting
- Change detection and alert rule evaluation
- Risk scoring and dashboard statistics
- Notification formatting

Everything here is deterministic and performs no I/O. The AlertEngine is
the only stateful object: it owns the set of previously-seen event IDs.
"""

from quakewatch.core.event import EventSet, SeismicEvent, parse_events
from quakewatch.core.geo import GeoPoint, calculate_distance, distance_km
from quakewatch.core.filters import (
    FilterCriteria,
    SortDirection,
    SortKey,
    apply_filters,
)
from quakewatch.core.rules import (
    AlertDecision,
    AlertRule,
    ConfigurationError,
    make_alert_decisions,
)
from quakewatch.core.engine import AlertEngine
from quakewatch.core.risk import RiskAssessment, RiskLevel, assess_risk

__all__ = [
    # Events
    "EventSet",
    "SeismicEvent",
    "parse_events",
    # Geo
    "GeoPoint",
    "calculate_distance",
    "distance_km",
    # Filters
    "FilterCriteria",
    "SortDirection",
    "SortKey",
    "apply_filters",
    # Rules
    "AlertDecision",
    "AlertRule",
    "ConfigurationError",
    "make_alert_decisions",
    # Engine
    "AlertEngine",
    # Risk
    "RiskAssessment",
    "RiskLevel",
    "assess_risk",
]
