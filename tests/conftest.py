"""Shared test fixtures."""

from datetime import datetime, timezone

import pytest

from quakewatch.core.event import SeismicEvent


FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed evaluation time."""
    return FIXED_NOW


@pytest.fixture
def make_event():
    """Factory for SeismicEvent with sensible defaults near Izmir."""
    def _make(
        id: str = "ev1",
        magnitude: float = 4.0,
        depth_km: float = 10.0,
        occurred_at: datetime = FIXED_NOW,
        latitude: float = 38.0,
        longitude: float = 27.0,
        title: str = "IZMIR (AEGEAN SEA)",
        closest_city_name: str = "Izmir",
        closest_city_distance_m: float = 5000.0,
        epicenter_name: str = "Seferihisar",
    ) -> SeismicEvent:
        return SeismicEvent(
            id=id,
            magnitude=magnitude,
            depth_km=depth_km,
            occurred_at=occurred_at,
            latitude=latitude,
            longitude=longitude,
            title=title,
            closest_city_name=closest_city_name,
            closest_city_distance_m=closest_city_distance_m,
            epicenter_name=epicenter_name,
        )
    return _make
