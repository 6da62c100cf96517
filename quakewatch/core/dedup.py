"""Change detection between snapshots - Pure functions.

This module determines which events in the current snapshot were not
present in the previously-seen ID set. All functions are pure with no
side effects.

Note: Checkpointing the seen IDs between restarts is handled by the
imperative shell (SeenIdStore). This module only contains the pure logic.
"""

from typing import AbstractSet, Iterable

from quakewatch.core.event import SeismicEvent


def get_new_event_ids(
    current_ids: AbstractSet[str],
    seen_ids: AbstractSet[str],
) -> set[str]:
    """Determine which event IDs have not been seen before.

    Pure function.

    Args:
        current_ids: All event IDs in the current snapshot
        seen_ids: IDs observed on the previous evaluation

    Returns:
        Set of new event IDs
    """
    return set(current_ids) - set(seen_ids)


def filter_already_seen(
    events: Iterable[SeismicEvent],
    seen_ids: AbstractSet[str],
) -> list[SeismicEvent]:
    """Filter out events that were already seen.

    Pure function. Snapshot order is preserved.

    Args:
        events: Events in the current snapshot
        seen_ids: IDs observed on the previous evaluation

    Returns:
        Events that are new since the previous evaluation
    """
    return [e for e in events if e.id not in seen_ids]
