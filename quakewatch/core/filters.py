"""Event filtering and sorting - Pure functions.

This module applies the user's filter criteria to a feed snapshot and
returns the matching events in display order. All functions are pure
with no side effects.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable

from quakewatch.core.event import SeismicEvent


class SortKey(str, Enum):
    """Field to sort filtered events by."""
    OCCURRED_AT = "occurred_at"
    MAGNITUDE = "magnitude"
    DEPTH_KM = "depth_km"
    CLOSEST_CITY_DISTANCE_M = "closest_city_distance_m"


class SortDirection(str, Enum):
    """Sort direction."""
    ASCENDING = "asc"
    DESCENDING = "desc"


@dataclass(frozen=True)
class FilterCriteria:
    """User-chosen filter and sort settings.

    Attributes:
        magnitude_range: (min, max) magnitude, inclusive
        depth_range: (min, max) depth in km, inclusive
        date_range: (start, end) origin time bounds, None for unbounded
        text_query: Case-insensitive substring to search for
        cities: Closest-city names to keep, empty for no restriction
        sort_key: Field to sort by
        sort_direction: Ascending or descending
    """
    magnitude_range: tuple[float, float] = (0.0, 10.0)
    depth_range: tuple[float, float] = (0.0, 700.0)
    date_range: tuple[datetime | None, datetime | None] = (None, None)
    text_query: str = ""
    cities: frozenset[str] = field(default_factory=frozenset)
    sort_key: SortKey = SortKey.OCCURRED_AT
    sort_direction: SortDirection = SortDirection.DESCENDING


DEFAULT_CRITERIA = FilterCriteria()


_SORT_KEYS: dict[SortKey, Callable[[SeismicEvent], Any]] = {
    SortKey.OCCURRED_AT: lambda e: e.occurred_at,
    SortKey.MAGNITUDE: lambda e: e.magnitude,
    SortKey.DEPTH_KM: lambda e: e.depth_km,
    SortKey.CLOSEST_CITY_DISTANCE_M: lambda e: e.closest_city_distance_m,
}


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with event times."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def filter_by_magnitude(
    events: Iterable[SeismicEvent],
    magnitude_range: tuple[float, float],
) -> list[SeismicEvent]:
    """Keep events whose magnitude is within the range (inclusive).

    Pure function. An inverted range matches nothing.
    """
    low, high = magnitude_range
    return [e for e in events if low <= e.magnitude <= high]


def filter_by_depth(
    events: Iterable[SeismicEvent],
    depth_range: tuple[float, float],
) -> list[SeismicEvent]:
    """Keep events whose depth is within the range (inclusive).

    Pure function. An inverted range matches nothing.
    """
    low, high = depth_range
    return [e for e in events if low <= e.depth_km <= high]


def filter_by_time(
    events: Iterable[SeismicEvent],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[SeismicEvent]:
    """Keep events with start <= occurred_at <= end.

    Pure function.

    Args:
        events: Events to filter
        start: Lower bound (inclusive), None for no lower bound
        end: Upper bound (inclusive), None for no upper bound

    Returns:
        Filtered list of events
    """
    result = list(events)

    if start is not None:
        start = _as_utc(start)
        result = [e for e in result if e.occurred_at >= start]

    if end is not None:
        end = _as_utc(end)
        result = [e for e in result if e.occurred_at <= end]

    return result


def matches_text(event: SeismicEvent, query: str) -> bool:
    """Check if the query appears in the title, closest city or epicenter.

    Pure function. Case-insensitive; an empty query matches everything.
    """
    if not query:
        return True

    needle = query.lower()
    return (
        needle in event.title.lower()
        or needle in event.closest_city_name.lower()
        or needle in event.epicenter_name.lower()
    )


def filter_by_text(
    events: Iterable[SeismicEvent],
    query: str,
) -> list[SeismicEvent]:
    """Keep events matching a free-text query. Pure function."""
    return [e for e in events if matches_text(e, query)]


def filter_by_cities(
    events: Iterable[SeismicEvent],
    cities: Iterable[str],
) -> list[SeismicEvent]:
    """Keep events whose closest city is in ``cities``.

    Pure function. An empty collection means no restriction.
    """
    wanted = set(cities)
    if not wanted:
        return list(events)
    return [e for e in events if e.closest_city_name in wanted]


def sort_events(
    events: Iterable[SeismicEvent],
    sort_key: SortKey,
    sort_direction: SortDirection,
) -> list[SeismicEvent]:
    """Sort events by a key.

    Pure function. The sort is stable in both directions, so tied events
    keep their relative input order.
    """
    return sorted(
        events,
        key=_SORT_KEYS[sort_key],
        reverse=sort_direction == SortDirection.DESCENDING,
    )


def apply_filters(
    events: Iterable[SeismicEvent],
    criteria: FilterCriteria,
) -> list[SeismicEvent]:
    """Apply filter criteria to a snapshot and sort the result.

    Pure function. Stages run in order: magnitude, depth, date range,
    text query, cities, then sort.

    Args:
        events: Snapshot to filter (EventSet or any iterable of events)
        criteria: Filter and sort settings

    Returns:
        Matching events in display order
    """
    result = filter_by_magnitude(events, criteria.magnitude_range)
    result = filter_by_depth(result, criteria.depth_range)

    start, end = criteria.date_range
    if start is not None or end is not None:
        result = filter_by_time(result, start, end)

    if criteria.text_query:
        result = filter_by_text(result, criteria.text_query)

    if criteria.cities:
        result = filter_by_cities(result, criteria.cities)

    return sort_events(result, criteria.sort_key, criteria.sort_direction)


def list_cities(events: Iterable[SeismicEvent]) -> list[str]:
    """Distinct closest-city names, sorted, for the city selector.

    Pure function.
    """
    return sorted({e.closest_city_name for e in events if e.closest_city_name})


def _parse_range(value: Any, default: tuple[float, float]) -> tuple[float, float]:
    if value is None:
        return default
    low, high = value
    return (float(low), float(high))


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    return _as_utc(datetime.fromisoformat(str(value)))


def criteria_from_dict(data: dict[str, Any]) -> FilterCriteria:
    """Build FilterCriteria from a plain mapping (YAML, JSON, query params).

    Missing keys fall back to the defaults.

    Raises:
        ValueError: If a range, date or enum value is malformed
    """
    date_range = data.get("date_range") or (None, None)
    start, end = date_range

    return FilterCriteria(
        magnitude_range=_parse_range(
            data.get("magnitude_range"), DEFAULT_CRITERIA.magnitude_range
        ),
        depth_range=_parse_range(
            data.get("depth_range"), DEFAULT_CRITERIA.depth_range
        ),
        date_range=(_parse_datetime(start), _parse_datetime(end)),
        text_query=str(data.get("text_query") or ""),
        cities=frozenset(data.get("cities") or ()),
        sort_key=SortKey(data.get("sort_key", DEFAULT_CRITERIA.sort_key)),
        sort_direction=SortDirection(
            data.get("sort_direction", DEFAULT_CRITERIA.sort_direction)
        ),
    )
