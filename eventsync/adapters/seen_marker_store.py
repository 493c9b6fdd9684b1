"""Seen marker persistence on top of a key-value store.

Stored value: JSON object `{"id": <event id>, "timestamp": <epoch millis>}`.
A missing key, unreadable JSON, a wrong shape or a backend read error all
read as "no marker".
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from eventsync.config.logging_config import get_logger
from eventsync.domain.exceptions import StorageError
from eventsync.domain.models import SeenMarker
from eventsync.domain.protocols import KeyValueStore
from eventsync.domain.sync_constants import SEEN_MARKER_KEY_DEFAULT

__all__ = ["KeyValueSeenMarkerStore", "InMemorySeenMarkerStore", "marker_key"]

logger = get_logger(__name__)


def marker_key(base_key: str = SEEN_MARKER_KEY_DEFAULT, namespace: str | None = None) -> str:
    """Build the storage key, optionally isolated per viewer."""
    if not namespace:
        return base_key
    return f"{base_key}:{namespace}"


def _decode_marker(raw: str) -> SeenMarker | None:
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError:
        return None

    if not isinstance(payload, dict):
        return None

    event_id = payload.get("id")
    timestamp = payload.get("timestamp")
    if not isinstance(event_id, str):
        return None
    if isinstance(timestamp, bool) or not isinstance(timestamp, int | float):
        return None

    try:
        observed_at = datetime.fromtimestamp(timestamp / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None
    return SeenMarker(last_seen_event_id=event_id, observed_at=observed_at)


class KeyValueSeenMarkerStore:
    """Seen marker stored as JSON under one fixed key."""

    def __init__(self, kv: KeyValueStore, key: str = SEEN_MARKER_KEY_DEFAULT) -> None:
        self._kv = kv
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def get(self) -> SeenMarker | None:
        try:
            raw = self._kv.get_item(self._key)
        except StorageError as exc:
            logger.warning("seen_marker_read_failed", key=self._key, error=str(exc))
            return None

        if raw is None:
            return None

        marker = _decode_marker(raw)
        if marker is None:
            logger.warning("seen_marker_invalid", key=self._key)
        return marker

    def set(self, marker: SeenMarker) -> None:
        serialized = json.dumps(marker.to_storage(), separators=(",", ":"))
        self._kv.set_item(self._key, serialized)


class InMemorySeenMarkerStore:
    """Marker held in memory; for tests and ephemeral sessions."""

    def __init__(self, marker: SeenMarker | None = None) -> None:
        self.marker = marker

    def get(self) -> SeenMarker | None:
        return self.marker

    def set(self, marker: SeenMarker) -> None:
        self.marker = marker
