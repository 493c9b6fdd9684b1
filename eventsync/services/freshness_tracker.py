"""Freshness window for the "new" notification flag.

Rules:
1. A latest event id that differs from the persisted marker (or no marker at
   all) is new; the marker is overwritten with the id and the current time
2. The same id stays new while less than the window has elapsed since it was
   first observed
3. The same id past the window is not new; the marker is left untouched

Staleness is only observed on the next call; nothing runs in the background.
"""

import threading
from datetime import datetime, timedelta

from eventsync.config.logging_config import get_logger
from eventsync.domain.exceptions import StorageError
from eventsync.domain.models import SeenMarker
from eventsync.domain.protocols import SeenMarkerStore
from eventsync.domain.sync_constants import FRESHNESS_WINDOW

logger = get_logger(__name__)


class NewEventWindowTracker:
    """Decides whether the latest known event is still flagged as new.

    Holds no marker state of its own; the marker lives in the injected store.
    The lock serializes the read-then-write cycle so a multi-threaded host
    keeps a single writer per store.
    """

    def __init__(self, window: timedelta = FRESHNESS_WINDOW) -> None:
        self._window = window
        self._lock = threading.Lock()

    @property
    def window(self) -> timedelta:
        return self._window

    def evaluate(
        self, latest_event_id: str, now: datetime, store: SeenMarkerStore
    ) -> bool:
        """Return whether latest_event_id is new, updating the marker if it changed.

        Args:
            latest_event_id: Id of the newest known event
            now: Current instant
            store: Seen marker persistence for this viewer/device

        Returns:
            True if the event should be flagged as new
        """
        with self._lock:
            marker = store.get()

            if marker is None or marker.last_seen_event_id != latest_event_id:
                self._persist(
                    store,
                    SeenMarker(last_seen_event_id=latest_event_id, observed_at=now),
                )
                logger.debug(
                    "seen_marker_advanced",
                    event_id=latest_event_id,
                    previous_id=marker.last_seen_event_id if marker else None,
                )
                return True

            elapsed = timedelta(
                seconds=now.timestamp() - marker.observed_at.timestamp()
            )
            is_fresh = elapsed < self._window
            logger.debug(
                "seen_marker_checked",
                event_id=latest_event_id,
                fresh=is_fresh,
            )
            return is_fresh

    @staticmethod
    def _persist(store: SeenMarkerStore, marker: SeenMarker) -> None:
        try:
            store.set(marker)
        except StorageError as exc:
            # Flag stays correct for this call; the next one sees the id as new again.
            logger.warning(
                "seen_marker_persist_failed",
                event_id=marker.last_seen_event_id,
                error=str(exc),
            )
