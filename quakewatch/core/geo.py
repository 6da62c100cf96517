"""Geographic calculations - Pure functions.

This module provides great-circle distance calculations between event
epicenters and reference locations. All functions are pure with no side
effects.
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quakewatch.core.event import SeismicEvent


# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees.

    Attributes:
        latitude: Point latitude
        longitude: Point longitude
    """
    latitude: float
    longitude: float


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function. Coordinates are not validated.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers
    """
    if lat1 == lat2 and lon1 == lon2:
        return 0.0

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    # Rounding can push a fraction past 1 for antipodal points
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in kilometers.

    Pure function. Symmetric, and exactly zero when ``a == b``.
    """
    return calculate_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def distance_to_event(center: GeoPoint, event: "SeismicEvent") -> float:
    """Distance from a reference point to an event epicenter in kilometers.

    Pure function.
    """
    return calculate_distance(
        center.latitude,
        center.longitude,
        event.latitude,
        event.longitude,
    )


def is_within_radius(
    event: "SeismicEvent",
    center: GeoPoint,
    radius_km: float,
) -> bool:
    """Check if an event epicenter is within a radius of a point.

    Pure function.

    Args:
        event: Event to check
        center: Center point
        radius_km: Radius in kilometers (inclusive)

    Returns:
        True if the event is within the radius
    """
    return distance_to_event(center, event) <= radius_km
