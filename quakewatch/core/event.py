"""Seismic event data models and parsing - Pure functions.

This module handles parsing the live feed JSON into typed SeismicEvent
objects and grouping them into an EventSet snapshot. All functions are
pure with no side effects.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from quakewatch.core.geo import GeoPoint


# Feed timestamps are local wall-clock time in the record's location_tz
FEED_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class SeismicEvent:
    """Immutable seismic event record.

    Attributes:
        id: Unique event ID, stable across refreshes
        magnitude: Event magnitude
        depth_km: Depth in kilometers
        occurred_at: Origin time (UTC)
        latitude: Epicenter latitude
        longitude: Epicenter longitude
        title: Human-readable location description
        closest_city_name: Name of the nearest city
        closest_city_distance_m: Distance to the nearest city in meters
        epicenter_name: Name of the epicenter district
        closest_city_population: Population of the nearest city (optional)
        provider: Feed provider name (e.g., 'kandilli')
    """
    id: str
    magnitude: float
    depth_km: float
    occurred_at: datetime
    latitude: float
    longitude: float
    title: str = ""
    closest_city_name: str = ""
    closest_city_distance_m: float = 0.0
    epicenter_name: str = ""
    closest_city_population: int | None = None
    provider: str = ""

    @property
    def location(self) -> GeoPoint:
        """Return the epicenter as a GeoPoint."""
        return GeoPoint(self.latitude, self.longitude)


class EventSet:
    """One feed snapshot: events keyed by ID, in feed order.

    A snapshot is replaced wholesale on every refresh and never patched.
    When an ID appears more than once, the first occurrence wins.
    """

    def __init__(self, events: Iterable[SeismicEvent] = ()) -> None:
        self._events: dict[str, SeismicEvent] = {}
        for event in events:
            self._events.setdefault(event.id, event)

    @classmethod
    def from_events(cls, events: Iterable[SeismicEvent]) -> "EventSet":
        return cls(events)

    def __iter__(self) -> Iterator[SeismicEvent]:
        return iter(self._events.values())

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    def __bool__(self) -> bool:
        return bool(self._events)

    def __repr__(self) -> str:
        return f"EventSet({len(self._events)} events)"

    def get(self, event_id: str) -> SeismicEvent | None:
        return self._events.get(event_id)

    def ids(self) -> frozenset[str]:
        """Return the set of event IDs in this snapshot."""
        return frozenset(self._events)

    def to_list(self) -> list[SeismicEvent]:
        """Return the events as a list in snapshot order."""
        return list(self._events.values())


def parse_event_time(value: str, tz_name: str | None = None) -> datetime:
    """Parse a feed timestamp into an aware UTC datetime.

    Pure function. Accepts the feed's "YYYY-MM-DD HH:MM:SS" wall-clock
    format (interpreted in ``tz_name``) or an ISO 8601 string.

    Raises:
        ValueError: If the value cannot be parsed
    """
    try:
        parsed = datetime.strptime(value, FEED_DATETIME_FORMAT)
    except ValueError:
        parsed = datetime.fromisoformat(value)

    if parsed.tzinfo is None:
        tz = timezone.utc
        if tz_name:
            try:
                tz = ZoneInfo(tz_name)
            except (ZoneInfoNotFoundError, ValueError):
                tz = timezone.utc
        parsed = parsed.replace(tzinfo=tz)

    return parsed.astimezone(timezone.utc)


def parse_event(record: dict[str, Any]) -> SeismicEvent | None:
    """Parse a single feed record into a SeismicEvent.

    Pure function: takes raw dict, returns typed SeismicEvent or None if
    invalid.

    Args:
        record: Event record from the feed's ``result`` array

    Returns:
        SeismicEvent or None if parsing fails
    """
    try:
        event_id = record.get("earthquake_id") or record.get("_id")
        if not event_id:
            return None

        coords = (record.get("geojson") or {}).get("coordinates", [])
        if len(coords) < 2:
            return None

        magnitude = record.get("mag")
        if magnitude is None:
            return None

        date_time = record.get("date_time")
        if not date_time:
            return None

        props = record.get("location_properties") or {}
        closest_city = props.get("closestCity") or {}
        epicenter = props.get("epiCenter") or {}
        population = closest_city.get("population")

        return SeismicEvent(
            id=str(event_id),
            magnitude=float(magnitude),
            depth_km=float(record.get("depth", 0.0)),
            occurred_at=parse_event_time(date_time, record.get("location_tz")),
            # GeoJSON order is [longitude, latitude]
            longitude=float(coords[0]),
            latitude=float(coords[1]),
            title=record.get("title") or "",
            closest_city_name=closest_city.get("name") or "",
            closest_city_distance_m=float(closest_city.get("distance") or 0.0),
            epicenter_name=epicenter.get("name") or "",
            closest_city_population=int(population) if population is not None else None,
            provider=record.get("provider") or "",
        )
    except (AttributeError, KeyError, TypeError, ValueError):
        return None


def parse_events(payload: dict[str, Any]) -> EventSet:
    """Parse a feed response into an EventSet snapshot.

    Pure function: skips invalid records and keeps feed order.

    Args:
        payload: Full feed response with a ``result`` array

    Returns:
        EventSet of valid events
    """
    events = []

    for record in payload.get("result") or []:
        event = parse_event(record)
        if event is not None:
            events.append(event)

    return EventSet(events)
