"""Unit tests for filtering and sorting.

Pure function tests - fast, no mocks needed.
"""

from datetime import datetime, timedelta, timezone

import pytest

from quakewatch.core.event import EventSet
from quakewatch.core.filters import (
    DEFAULT_CRITERIA,
    FilterCriteria,
    SortDirection,
    SortKey,
    apply_filters,
    criteria_from_dict,
    filter_by_cities,
    filter_by_time,
    list_cities,
    matches_text,
    sort_events,
)


T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def snapshot(make_event):
    """A small mixed snapshot in feed order."""
    return EventSet([
        make_event(id="a", magnitude=5.2, depth_km=10.0, occurred_at=T0,
                   title="SEFERIHISAR (IZMIR)", closest_city_name="Izmir",
                   closest_city_distance_m=30000, epicenter_name="Seferihisar"),
        make_event(id="b", magnitude=3.1, depth_km=5.0, occurred_at=T0 - timedelta(hours=2),
                   title="SINDIRGI (BALIKESIR)", closest_city_name="Balikesir",
                   closest_city_distance_m=60000, epicenter_name="Sindirgi"),
        make_event(id="c", magnitude=4.0, depth_km=120.0, occurred_at=T0 - timedelta(days=3),
                   title="EGE DENIZI", closest_city_name="Mugla",
                   closest_city_distance_m=90000, epicenter_name="Datca"),
        make_event(id="d", magnitude=3.1, depth_km=7.0, occurred_at=T0 - timedelta(hours=1),
                   title="KULU (KONYA)", closest_city_name="Konya",
                   closest_city_distance_m=15000, epicenter_name="Kulu"),
    ])


def ids(events):
    return [e.id for e in events]


class TestApplyFilters:
    """Tests for apply_filters() pipeline."""

    def test_single_event_in_range(self, make_event):
        """A magnitude range of [5, 10] keeps a 5.2 event."""
        events = EventSet([make_event(id="a", magnitude=5.2, depth_km=10,
                                      latitude=38, longitude=27)])
        criteria = FilterCriteria(
            magnitude_range=(5, 10),
            depth_range=(0, 700),
            sort_key=SortKey.MAGNITUDE,
            sort_direction=SortDirection.DESCENDING,
        )

        assert ids(apply_filters(events, criteria)) == ["a"]

    def test_single_event_out_of_range(self, make_event):
        """A magnitude range of [6, 10] drops a 5.2 event."""
        events = EventSet([make_event(id="a", magnitude=5.2)])
        criteria = FilterCriteria(magnitude_range=(6, 10))

        assert apply_filters(events, criteria) == []

    def test_default_criteria_sorts_newest_first(self, snapshot):
        assert ids(apply_filters(snapshot, DEFAULT_CRITERIA)) == ["a", "d", "b", "c"]

    def test_magnitude_range_inclusive(self, snapshot):
        criteria = FilterCriteria(magnitude_range=(3.1, 4.0))
        assert set(ids(apply_filters(snapshot, criteria))) == {"b", "c", "d"}

    def test_depth_range_inclusive(self, snapshot):
        criteria = FilterCriteria(depth_range=(5.0, 10.0))
        assert set(ids(apply_filters(snapshot, criteria))) == {"a", "b", "d"}

    def test_inverted_range_matches_nothing(self, snapshot):
        criteria = FilterCriteria(magnitude_range=(8, 2))
        assert apply_filters(snapshot, criteria) == []

    def test_inverted_depth_range_matches_nothing(self, snapshot):
        criteria = FilterCriteria(depth_range=(100, 0))
        assert apply_filters(snapshot, criteria) == []

    def test_date_range_start_only(self, snapshot):
        criteria = FilterCriteria(date_range=(T0 - timedelta(hours=1), None))
        assert set(ids(apply_filters(snapshot, criteria))) == {"a", "d"}

    def test_date_range_end_only(self, snapshot):
        criteria = FilterCriteria(date_range=(None, T0 - timedelta(hours=2)))
        assert set(ids(apply_filters(snapshot, criteria))) == {"b", "c"}

    def test_text_query_case_insensitive(self, snapshot):
        criteria = FilterCriteria(text_query="izMIR")
        assert ids(apply_filters(snapshot, criteria)) == ["a"]

    def test_text_query_matches_epicenter(self, snapshot):
        criteria = FilterCriteria(text_query="datca")
        assert ids(apply_filters(snapshot, criteria)) == ["c"]

    def test_empty_cities_means_no_restriction(self, snapshot):
        criteria = FilterCriteria(cities=frozenset())
        assert len(apply_filters(snapshot, criteria)) == 4

    def test_cities_restrict(self, snapshot):
        criteria = FilterCriteria(cities=frozenset({"Konya", "Mugla"}))
        assert set(ids(apply_filters(snapshot, criteria))) == {"c", "d"}

    def test_filters_combine(self, snapshot):
        criteria = FilterCriteria(
            magnitude_range=(3.0, 4.5),
            depth_range=(0, 50),
            text_query="k",
        )
        # b: BALIKESIR, d: KONYA/KULU
        assert set(ids(apply_filters(snapshot, criteria))) == {"b", "d"}

    def test_empty_snapshot(self):
        assert apply_filters(EventSet(), DEFAULT_CRITERIA) == []

    def test_idempotent(self, snapshot):
        criteria = FilterCriteria(sort_key=SortKey.MAGNITUDE)
        first = apply_filters(snapshot, criteria)
        second = apply_filters(snapshot, criteria)
        assert first == second

    def test_does_not_modify_input(self, snapshot):
        before = snapshot.to_list()
        apply_filters(snapshot, FilterCriteria(sort_key=SortKey.DEPTH_KM))
        assert snapshot.to_list() == before


class TestSortEvents:
    """Tests for sort_events() stability and direction."""

    def test_magnitude_descending(self, snapshot):
        result = sort_events(snapshot, SortKey.MAGNITUDE, SortDirection.DESCENDING)
        assert ids(result) == ["a", "c", "b", "d"]

    def test_magnitude_ascending_ties_keep_input_order(self, snapshot):
        """b and d tie at 3.1; b comes first in the snapshot."""
        result = sort_events(snapshot, SortKey.MAGNITUDE, SortDirection.ASCENDING)
        assert ids(result) == ["b", "d", "c", "a"]

    def test_descending_ties_keep_input_order(self, snapshot):
        result = sort_events(snapshot, SortKey.MAGNITUDE, SortDirection.DESCENDING)
        assert ids(result).index("b") < ids(result).index("d")

    def test_depth_ascending(self, snapshot):
        result = sort_events(snapshot, SortKey.DEPTH_KM, SortDirection.ASCENDING)
        assert ids(result) == ["b", "d", "a", "c"]

    def test_closest_city_distance_ascending(self, snapshot):
        result = sort_events(
            snapshot, SortKey.CLOSEST_CITY_DISTANCE_M, SortDirection.ASCENDING
        )
        assert ids(result) == ["d", "a", "b", "c"]

    def test_occurred_at_ascending(self, snapshot):
        result = sort_events(snapshot, SortKey.OCCURRED_AT, SortDirection.ASCENDING)
        assert ids(result) == ["c", "b", "d", "a"]

    def test_all_ties_preserve_order(self, make_event):
        events = [make_event(id=str(i), magnitude=4.0) for i in range(10)]
        result = sort_events(events, SortKey.MAGNITUDE, SortDirection.ASCENDING)
        assert ids(result) == [str(i) for i in range(10)]


class TestHelpers:
    """Tests for individual filter stages."""

    def test_matches_text_empty_query(self, make_event):
        assert matches_text(make_event(), "") is True

    def test_filter_by_time_naive_bounds_are_utc(self, snapshot):
        naive_start = datetime(2024, 3, 1, 11, 0)
        assert set(ids(filter_by_time(snapshot, start=naive_start))) == {"a", "d"}

    def test_filter_by_cities_empty(self, snapshot):
        assert len(filter_by_cities(snapshot, [])) == 4

    def test_list_cities(self, snapshot, make_event):
        events = snapshot.to_list() + [make_event(id="e", closest_city_name="Izmir"),
                                       make_event(id="f", closest_city_name="")]
        assert list_cities(events) == ["Balikesir", "Izmir", "Konya", "Mugla"]


class TestCriteriaFromDict:
    """Tests for criteria_from_dict() parsing."""

    def test_empty_dict_gives_defaults(self):
        assert criteria_from_dict({}) == DEFAULT_CRITERIA

    def test_parses_all_fields(self):
        criteria = criteria_from_dict({
            "magnitude_range": [2, 7],
            "depth_range": [0, 50],
            "date_range": ["2024-03-01T00:00:00+00:00", None],
            "text_query": "izmir",
            "cities": ["Izmir", "Manisa"],
            "sort_key": "magnitude",
            "sort_direction": "asc",
        })

        assert criteria.magnitude_range == (2.0, 7.0)
        assert criteria.depth_range == (0.0, 50.0)
        assert criteria.date_range == (datetime(2024, 3, 1, tzinfo=timezone.utc), None)
        assert criteria.text_query == "izmir"
        assert criteria.cities == frozenset({"Izmir", "Manisa"})
        assert criteria.sort_key is SortKey.MAGNITUDE
        assert criteria.sort_direction is SortDirection.ASCENDING

    def test_invalid_sort_key_raises(self):
        with pytest.raises(ValueError):
            criteria_from_dict({"sort_key": "population"})
