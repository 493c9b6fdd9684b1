"""Protocol definitions for dependency inversion.

These abstract interfaces define contracts that adapters must implement.
"""

from typing import Any, Protocol

from eventsync.domain.models import MetricSnapshot, NotificationRecord, SeenMarker


class KeyValueStore(Protocol):
    """Durable string key-value store on the client device."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value or None when the key is absent.

        Raises:
            StorageError: On backend read failures
        """
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store a value under key, replacing any previous value.

        Raises:
            StorageError: On backend write failures
        """
        ...


class SeenMarkerStore(Protocol):
    """Persistence for the single seen marker of one viewer on one device."""

    def get(self) -> SeenMarker | None:
        """Load the marker. Never raises; unreadable state reads as None."""
        ...

    def set(self, marker: SeenMarker) -> None:
        """Persist the marker.

        Raises:
            StorageError: On backend write failures
        """
        ...


class DataProviderProtocol(Protocol):
    """Server-side source of truth re-queried after relevant events."""

    def fetch_projects(self, **filters: str) -> list[dict[str, Any]]:
        """Fetch current projects.

        Raises:
            DataProviderError: On HTTP or network failures
        """
        ...

    def fetch_notifications(self, **filters: str) -> list[NotificationRecord]:
        """Fetch notifications, newest first.

        Raises:
            DataProviderError: On HTTP or network failures
        """
        ...

    def fetch_metrics(self, scope: str, *, days: int, **filters: str) -> MetricSnapshot:
        """Fetch daily metric series for `scope` ("leader" or "admin").

        Raises:
            DataProviderError: On HTTP or network failures
        """
        ...
