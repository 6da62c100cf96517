"""Seen-ID Checkpoint Store - Imperative Shell.

This module persists the alert engine's seen event IDs between process
restarts, so a restarted monitor does not treat the whole feed as new.
Uses Google Cloud Firestore.

All I/O is contained here; change-detection logic is in the core module.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from google.cloud import firestore

from quakewatch.core.config import SeenStoreConfig


logger = logging.getLogger(__name__)


class SeenIdStore:
    """Checkpoints the seen-ID set to a single Firestore document.

    This is part of the imperative shell - it handles database I/O.

    Document structure:
    {
        "ids": ["event_id_1", "event_id_2", ...],
        "updated_at": <timestamp>
    }

    Each save replaces the document, mirroring the engine's wholesale
    replacement of its seen-ID set.
    """

    def __init__(self, config: SeenStoreConfig | None = None) -> None:
        """Initialize the store.

        Args:
            config: Checkpoint configuration
        """
        self.config = config or SeenStoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _get_doc_ref(self) -> Any:
        """Get reference to the seen IDs document."""
        return (
            self.client
            .collection(self.config.collection)
            .document(self.config.document)
        )

    def load(self) -> set[str] | None:
        """Load the last checkpointed seen-ID set.

        This method performs database I/O.

        Returns:
            Set of seen IDs, or None if no checkpoint exists or it could
            not be read
        """
        logger.info("Loading seen IDs from Firestore")

        try:
            doc = self._get_doc_ref().get()

            if not doc.exists:
                logger.info("No seen IDs checkpoint found")
                return None

            data = doc.to_dict() or {}
            ids = set(data.get("ids", []))

            logger.info("Loaded %d seen IDs from Firestore", len(ids))
            return ids

        except Exception as e:
            logger.error("Failed to load seen IDs: %s", str(e))
            # Start without a checkpoint - first snapshot becomes the baseline
            return None

    def save(self, ids: Iterable[str]) -> bool:
        """Replace the checkpoint with a new seen-ID set.

        This method performs database I/O.

        Args:
            ids: Seen IDs after the latest evaluation

        Returns:
            True if save was successful
        """
        ids = sorted(ids)
        logger.info("Saving %d seen IDs to Firestore", len(ids))

        try:
            self._get_doc_ref().set({
                "ids": ids,
                "updated_at": datetime.now(timezone.utc),
            })

            logger.info("Successfully saved seen IDs")
            return True

        except Exception as e:
            logger.error("Failed to save seen IDs: %s", str(e))
            return False
