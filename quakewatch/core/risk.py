"""Seismic risk scoring for a reference location - Pure functions.

Aggregates recent activity, magnitude trend, depth, proximity and
historical signals about events around a point into a composite score
and a categorical risk level. All functions are pure with no side
effects and are deterministic given ``now``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable

from quakewatch.core.event import SeismicEvent
from quakewatch.core.geo import GeoPoint, distance_to_event


NEARBY_RADIUS_KM = 500.0
VERY_NEAR_RADIUS_KM = 100.0

WINDOW_24H = timedelta(hours=24)
WINDOW_7D = timedelta(days=7)
WINDOW_30D = timedelta(days=30)

FACTOR_WEIGHTS: dict[str, float] = {
    "recent_activity": 0.25,
    "magnitude_trend": 0.20,
    "depth_factor": 0.15,
    "proximity_factor": 0.25,
    "historical_risk": 0.15,
}


class RiskLevel(str, Enum):
    """Categorical bucket for the overall risk score."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very-high"


@dataclass(frozen=True)
class RiskFactors:
    """Individual risk signals, each nominally in [0, 100].

    ``historical_risk`` is not clamped and events of magnitude 6 or more
    count toward both of its buckets, so it can exceed 100.
    """
    recent_activity: float
    magnitude_trend: float
    depth_factor: float
    proximity_factor: float
    historical_risk: float


@dataclass(frozen=True)
class RiskStatistics:
    """Event counts behind the risk factors.

    Attributes:
        last_24h: Events in the last 24 hours
        last_7d: Events in the last 7 days
        last_30d: Events in the last 30 days
        nearby: Events within 500 km of the reference location
        very_near: Events within 100 km of the reference location
        average_nearby_magnitude: Mean magnitude of nearby events (0 if none)
    """
    last_24h: int
    last_7d: int
    last_30d: int
    nearby: int
    very_near: int
    average_nearby_magnitude: float


@dataclass(frozen=True)
class Recommendation:
    """A safety recommendation shown alongside the score."""
    priority: str
    text: str


@dataclass(frozen=True)
class RiskAssessment:
    """Complete risk assessment for one reference location."""
    factors: RiskFactors
    overall_risk: float
    risk_level: RiskLevel
    reference_location: GeoPoint
    assessed_at: datetime
    statistics: RiskStatistics
    recommendations: list[Recommendation] = field(default_factory=list)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _average(values: list[float]) -> float:
    """Mean of values, 0 for an empty list."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def events_in_window(
    events: Iterable[SeismicEvent],
    now: datetime,
    window: timedelta,
) -> list[SeismicEvent]:
    """Events with ``now - window <= occurred_at <= now``.

    Pure function.
    """
    start = now - window
    return [e for e in events if start <= e.occurred_at <= now]


def events_within(
    events: Iterable[SeismicEvent],
    center: GeoPoint,
    radius_km: float,
) -> list[SeismicEvent]:
    """Events strictly closer than ``radius_km`` to ``center``.

    Pure function.
    """
    return [e for e in events if distance_to_event(center, e) < radius_km]


def calculate_overall_risk(factors: RiskFactors) -> float:
    """Weighted combination of the factors, scaled to nominally [0, 1].

    Pure function.
    """
    weighted = (
        factors.recent_activity * FACTOR_WEIGHTS["recent_activity"]
        + factors.magnitude_trend * FACTOR_WEIGHTS["magnitude_trend"]
        + factors.depth_factor * FACTOR_WEIGHTS["depth_factor"]
        + factors.proximity_factor * FACTOR_WEIGHTS["proximity_factor"]
        + factors.historical_risk * FACTOR_WEIGHTS["historical_risk"]
    )
    return weighted / 100


def get_risk_level(overall_risk: float) -> RiskLevel:
    """Map an overall risk score to its level.

    Pure function.
    """
    if overall_risk < 0.25:
        return RiskLevel.LOW
    elif overall_risk < 0.50:
        return RiskLevel.MODERATE
    elif overall_risk < 0.75:
        return RiskLevel.HIGH
    else:
        return RiskLevel.VERY_HIGH


def build_recommendations(
    factors: RiskFactors,
    overall_risk: float,
    very_near_count: int,
) -> list[Recommendation]:
    """Select safety recommendations from the factor thresholds.

    Pure function.
    """
    recommendations = []

    if very_near_count > 0:
        recommendations.append(Recommendation(
            priority="high",
            text=(
                "Recent earthquakes detected within 100km. "
                "Stay alert and review emergency procedures."
            ),
        ))

    if factors.magnitude_trend > 50:
        recommendations.append(Recommendation(
            priority="medium",
            text=(
                "Increasing earthquake magnitude trend detected. "
                "Consider preparing emergency supplies."
            ),
        ))

    if factors.depth_factor > 70:
        recommendations.append(Recommendation(
            priority="medium",
            text=(
                "Shallow earthquakes detected nearby. "
                "These can cause more surface damage."
            ),
        ))

    if overall_risk < 0.25:
        recommendations.append(Recommendation(
            priority="low",
            text=(
                "Low seismic activity in your area. "
                "Maintain basic earthquake preparedness."
            ),
        ))

    return recommendations


def calculate_factors(
    events: list[SeismicEvent],
    reference_location: GeoPoint,
    now: datetime,
) -> tuple[RiskFactors, RiskStatistics]:
    """Compute the five risk factors and the counts behind them.

    Pure function.
    """
    last_24h = events_in_window(events, now, WINDOW_24H)
    last_7d = events_in_window(events, now, WINDOW_7D)
    last_30d = events_in_window(events, now, WINDOW_30D)

    nearby = events_within(events, reference_location, NEARBY_RADIUS_KM)
    very_near = events_within(nearby, reference_location, VERY_NEAR_RADIUS_KM)

    recent_activity = min(
        100.0,
        len(last_24h) * 10 + len(last_7d) * 2 + len(last_30d) * 0.5,
    )

    magnitude_trend = 0.0
    if last_7d:
        magnitude_trend = min(100.0, _average([e.magnitude for e in last_7d]) * 20)

    depth_factor = 0.0
    if nearby:
        depth_factor = _clamp(100 - _average([e.depth_km for e in nearby]))

    proximity_factor = min(100.0, len(very_near) * 15.0)

    historical_risk = (
        sum(1 for e in nearby if e.magnitude >= 6) * 20.0
        + sum(1 for e in nearby if e.magnitude >= 5) * 10.0
    )

    factors = RiskFactors(
        recent_activity=recent_activity,
        magnitude_trend=magnitude_trend,
        depth_factor=depth_factor,
        proximity_factor=proximity_factor,
        historical_risk=historical_risk,
    )

    statistics = RiskStatistics(
        last_24h=len(last_24h),
        last_7d=len(last_7d),
        last_30d=len(last_30d),
        nearby=len(nearby),
        very_near=len(very_near),
        average_nearby_magnitude=_average([e.magnitude for e in nearby]),
    )

    return factors, statistics


def assess_risk(
    events: Iterable[SeismicEvent],
    reference_location: GeoPoint | None,
    now: datetime,
) -> RiskAssessment | None:
    """Assess seismic risk around a reference location.

    Pure function.

    Args:
        events: Current snapshot
        reference_location: Point to assess, None if not yet known
        now: Evaluation time; windows are measured back from it

    Returns:
        RiskAssessment, or None when no reference location is available
    """
    if reference_location is None:
        return None

    factors, statistics = calculate_factors(list(events), reference_location, now)
    overall_risk = calculate_overall_risk(factors)

    return RiskAssessment(
        factors=factors,
        overall_risk=overall_risk,
        risk_level=get_risk_level(overall_risk),
        reference_location=reference_location,
        assessed_at=now,
        statistics=statistics,
        recommendations=build_recommendations(
            factors, overall_risk, statistics.very_near
        ),
    )
