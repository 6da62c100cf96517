"""Snapshot statistics for the dashboard - Pure functions.

Computes the counts and distributions the statistics dashboard and the
activity analytics panel chart.
Rendering is not done here; every function returns plain numbers.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable

from quakewatch.core.event import SeismicEvent


@dataclass(frozen=True)
class Bucket:
    """One bar/slice of a distribution.

    Attributes:
        name: Bucket label
        count: Number of events in the bucket
        percentage: Share of all events, 0-100
    """
    name: str
    count: int
    percentage: float


@dataclass(frozen=True)
class EventStatistics:
    """Summary of a snapshot for the statistics dashboard."""
    total: int
    average_magnitude: float
    max_magnitude: float
    average_depth_km: float
    last_24h: int
    by_magnitude: list[Bucket] = field(default_factory=list)
    by_depth: list[Bucket] = field(default_factory=list)
    by_severity: list[Bucket] = field(default_factory=list)
    top_cities: list[Bucket] = field(default_factory=list)
    hourly: list[int] = field(default_factory=lambda: [0] * 24)


def _percentage(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(count / total * 100, 1)


def _to_buckets(counts: dict[str, int], total: int) -> list[Bucket]:
    return [
        Bucket(name=name, count=count, percentage=_percentage(count, total))
        for name, count in counts.items()
    ]


def magnitude_distribution(events: Iterable[SeismicEvent]) -> list[Bucket]:
    """Count events per magnitude class. Pure function."""
    counts = {
        "Minor (< 4.0)": 0,
        "Light (4.0-4.9)": 0,
        "Moderate (5.0-5.9)": 0,
        "Strong (6.0-6.9)": 0,
        "Major (>= 7.0)": 0,
    }
    total = 0

    for event in events:
        total += 1
        if event.magnitude < 4.0:
            counts["Minor (< 4.0)"] += 1
        elif event.magnitude < 5.0:
            counts["Light (4.0-4.9)"] += 1
        elif event.magnitude < 6.0:
            counts["Moderate (5.0-5.9)"] += 1
        elif event.magnitude < 7.0:
            counts["Strong (6.0-6.9)"] += 1
        else:
            counts["Major (>= 7.0)"] += 1

    return _to_buckets(counts, total)


def depth_distribution(events: Iterable[SeismicEvent]) -> list[Bucket]:
    """Count events per depth class. Pure function."""
    counts = {
        "Shallow (0-70km)": 0,
        "Intermediate (70-300km)": 0,
        "Deep (> 300km)": 0,
    }
    total = 0

    for event in events:
        total += 1
        if event.depth_km <= 70:
            counts["Shallow (0-70km)"] += 1
        elif event.depth_km <= 300:
            counts["Intermediate (70-300km)"] += 1
        else:
            counts["Deep (> 300km)"] += 1

    return _to_buckets(counts, total)


def severity_distribution(events: Iterable[SeismicEvent]) -> list[Bucket]:
    """Split events into low/medium/high severity. Pure function."""
    counts = {"Low Risk": 0, "Medium Risk": 0, "High Risk": 0}
    total = 0

    for event in events:
        total += 1
        if event.magnitude < 4.5:
            counts["Low Risk"] += 1
        elif event.magnitude < 6:
            counts["Medium Risk"] += 1
        else:
            counts["High Risk"] += 1

    return _to_buckets(counts, total)


def hourly_distribution(
    events: Iterable[SeismicEvent],
    tz: tzinfo = timezone.utc,
) -> list[int]:
    """Count events per hour of day in ``tz`` (24 entries). Pure function."""
    hourly = [0] * 24
    for event in events:
        hourly[event.occurred_at.astimezone(tz).hour] += 1
    return hourly


def top_cities(events: Iterable[SeismicEvent], limit: int = 10) -> list[Bucket]:
    """Most frequent closest cities.

    Pure function. Ties keep first-seen order.
    """
    events = list(events)
    counter = Counter(e.closest_city_name for e in events if e.closest_city_name)
    return [
        Bucket(name=city, count=count, percentage=_percentage(count, len(events)))
        for city, count in counter.most_common(limit)
    ]


def summarize(
    events: Iterable[SeismicEvent],
    now: datetime,
    tz: tzinfo = timezone.utc,
) -> EventStatistics:
    """Build the full dashboard summary for a snapshot.

    Pure function.

    Args:
        events: Snapshot (or filtered subset)
        now: Reference time for the last-24h count
        tz: Zone the hour-of-day distribution is bucketed in

    Returns:
        EventStatistics; all averages are 0 for an empty snapshot
    """
    events = list(events)
    total = len(events)
    magnitudes = [e.magnitude for e in events]
    day_ago = now - timedelta(hours=24)

    return EventStatistics(
        total=total,
        average_magnitude=sum(magnitudes) / total if total else 0.0,
        max_magnitude=max(magnitudes, default=0.0),
        average_depth_km=sum(e.depth_km for e in events) / total if total else 0.0,
        last_24h=sum(1 for e in events if day_ago <= e.occurred_at <= now),
        by_magnitude=magnitude_distribution(events),
        by_depth=depth_distribution(events),
        by_severity=severity_distribution(events),
        top_cities=top_cities(events),
        hourly=hourly_distribution(events, tz),
    )


# ===== Activity analytics =====

# Time ranges offered by the analytics panel
ANALYTICS_RANGES_DAYS = (1, 7, 30)

SIGNIFICANT_MAGNITUDE = 4.5
RECENT_SIGNIFICANT_LIMIT = 5


@dataclass(frozen=True)
class DailyActivity:
    """Events on one calendar day.

    Attributes:
        day: Calendar day in the display zone
        count: Number of events that day
        average_magnitude: Mean magnitude, rounded to 2 places
        max_magnitude: Largest magnitude
    """
    day: date
    count: int
    average_magnitude: float
    max_magnitude: float


@dataclass(frozen=True)
class ActivityAnalysis:
    """Activity over a trailing window compared with the window before it.

    Attributes:
        days: Window length in days
        total: Events inside the window
        previous_total: Events in the equal-length window before it
        trend_percent: Change versus the previous window, 0 when it was empty
        daily_average: total / days
        average_magnitude: Mean magnitude in the window (0 when empty)
        max_magnitude: Largest magnitude in the window (0 when empty)
        last_24h: Window events less than 24 hours old
        by_level: Low/medium/high split
        magnitude_ranges: Two-magnitude-unit histogram
        daily: Per-day series, oldest first
        recent_significant: Newest M4.5+ events, newest first
    """
    days: int
    total: int
    previous_total: int
    trend_percent: float
    daily_average: float
    average_magnitude: float
    max_magnitude: float
    last_24h: int
    by_level: list[Bucket] = field(default_factory=list)
    magnitude_ranges: list[Bucket] = field(default_factory=list)
    daily: list[DailyActivity] = field(default_factory=list)
    recent_significant: list[SeismicEvent] = field(default_factory=list)


def events_since(
    events: Iterable[SeismicEvent],
    start: datetime,
    end: datetime | None = None,
) -> list[SeismicEvent]:
    """Events with start <= occurred_at (< end, when given). Pure function."""
    return [
        e for e in events
        if e.occurred_at >= start and (end is None or e.occurred_at < end)
    ]


def trend_percent(current: int, previous: int) -> float:
    """Percent change from previous to current; 0 when previous is 0."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def level_distribution(events: Iterable[SeismicEvent]) -> list[Bucket]:
    """Split events at M4 and M6. Pure function."""
    counts = {"Low (< 4.0)": 0, "Medium (4.0-5.9)": 0, "High (>= 6.0)": 0}
    total = 0

    for event in events:
        total += 1
        if event.magnitude < 4:
            counts["Low (< 4.0)"] += 1
        elif event.magnitude < 6:
            counts["Medium (4.0-5.9)"] += 1
        else:
            counts["High (>= 6.0)"] += 1

    return _to_buckets(counts, total)


def magnitude_histogram(events: Iterable[SeismicEvent]) -> list[Bucket]:
    """Histogram with bins 0-2, 2-4, 4-6, 6-8 and 8+. Pure function."""
    counts = {"0-2": 0, "2-4": 0, "4-6": 0, "6-8": 0, "8+": 0}
    total = 0

    for event in events:
        total += 1
        if event.magnitude < 2:
            counts["0-2"] += 1
        elif event.magnitude < 4:
            counts["2-4"] += 1
        elif event.magnitude < 6:
            counts["4-6"] += 1
        elif event.magnitude < 8:
            counts["6-8"] += 1
        else:
            counts["8+"] += 1

    return _to_buckets(counts, total)


def daily_series(
    events: Iterable[SeismicEvent],
    tz: tzinfo = timezone.utc,
) -> list[DailyActivity]:
    """Count and magnitudes per calendar day, oldest day first.

    Pure function. Days without events are omitted.
    """
    by_day: dict[date, list[float]] = {}
    for event in events:
        day = event.occurred_at.astimezone(tz).date()
        by_day.setdefault(day, []).append(event.magnitude)

    return [
        DailyActivity(
            day=day,
            count=len(magnitudes),
            average_magnitude=round(sum(magnitudes) / len(magnitudes), 2),
            max_magnitude=max(magnitudes),
        )
        for day, magnitudes in sorted(by_day.items())
    ]


def recent_significant(
    events: Iterable[SeismicEvent],
    limit: int = RECENT_SIGNIFICANT_LIMIT,
) -> list[SeismicEvent]:
    """Newest events of at least SIGNIFICANT_MAGNITUDE. Pure function."""
    significant = [e for e in events if e.magnitude >= SIGNIFICANT_MAGNITUDE]
    return sorted(significant, key=lambda e: e.occurred_at, reverse=True)[:limit]


def analyze(
    events: Iterable[SeismicEvent],
    now: datetime,
    days: int = 7,
    tz: tzinfo = timezone.utc,
) -> ActivityAnalysis:
    """Analyze the trailing ``days`` of activity.

    Pure function. The window is [now - days, ...); the previous period
    is the equal-length window immediately before it.

    Args:
        events: Snapshot
        now: End of the analysis window
        days: Window length, one of ANALYTICS_RANGES_DAYS in the UI
        tz: Zone calendar days are taken in

    Returns:
        ActivityAnalysis for the window

    Raises:
        ValueError: If days is not positive
    """
    if days <= 0:
        raise ValueError(f"days must be positive, got {days}")

    events = list(events)
    start = now - timedelta(days=days)
    window = events_since(events, start)
    previous = events_since(events, start - timedelta(days=days), start)

    total = len(window)
    magnitudes = [e.magnitude for e in window]

    return ActivityAnalysis(
        days=days,
        total=total,
        previous_total=len(previous),
        trend_percent=trend_percent(total, len(previous)),
        daily_average=total / days,
        average_magnitude=sum(magnitudes) / total if total else 0.0,
        max_magnitude=max(magnitudes, default=0.0),
        last_24h=sum(1 for e in window if now - e.occurred_at < timedelta(hours=24)),
        by_level=level_distribution(window),
        magnitude_ranges=magnitude_histogram(window),
        daily=daily_series(window, tz),
        recent_significant=recent_significant(window),
    )
