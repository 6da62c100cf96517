"""Seismic Feed Client - Imperative Shell.

This module handles HTTP communication with the live earthquake feed.
All I/O is contained here; parsing and business logic are in the core
module.
"""

import logging
from typing import Any

import requests

from quakewatch.core.config import DEFAULT_FEED_URL
from quakewatch.core.event import EventSet, parse_events


logger = logging.getLogger(__name__)


# Default timeout for feed requests (seconds)
DEFAULT_TIMEOUT = 30


class FeedError(requests.RequestException):
    """The feed answered, but reported a failure in its payload."""


class FeedClient:
    """Client for fetching the complete current feed snapshot.

    This is part of the imperative shell - it handles HTTP I/O.
    Every call returns the full current state; there is no paging or
    incremental update.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_FEED_URL,
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize feed client.

        Args:
            base_url: Feed endpoint URL
            timeout: Request timeout in seconds
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_raw(self) -> dict[str, Any]:
        """Fetch the raw feed payload.

        This method performs HTTP I/O.

        Returns:
            Decoded JSON response

        Raises:
            requests.RequestException: If the request fails or the feed
                reports an unsuccessful status
        """
        logger.info("Fetching earthquake feed from %s", self.base_url)

        response = self.session.get(self.base_url, timeout=self.timeout)
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise FeedError(f"Feed returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise FeedError("Feed returned an unexpected payload")

        if data.get("status") is False:
            raise FeedError(f"Feed reported failure: {data.get('desc', 'unknown error')}")

        total = (data.get("metadata") or {}).get("total", len(data.get("result") or []))
        logger.info("Fetched %d records from feed", total)

        return data

    def fetch_snapshot(self) -> EventSet:
        """Fetch and parse the current snapshot.

        Returns:
            EventSet of valid events, in feed order

        Raises:
            requests.RequestException: If the request fails
        """
        snapshot = parse_events(self.fetch_raw())
        logger.info("Parsed %d events from feed", len(snapshot))
        return snapshot
