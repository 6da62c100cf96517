"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Live feed client (HTTP)
- Slack webhook client (HTTP)
- Seen-ID checkpoint store (Firestore)
- Configuration loading (environment/files/Secret Manager)

Keep this layer thin and simple. All business logic should be in core.
"""

from quakewatch.shell.feed_client import FeedClient
from quakewatch.shell.slack_client import SlackClient
from quakewatch.shell.seen_store import SeenIdStore
from quakewatch.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "FeedClient",
    "SlackClient",
    "SeenIdStore",
    "load_config",
    "load_config_from_env",
]
