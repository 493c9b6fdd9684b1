"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import pytest
import pytz

from eventsync.adapters.kv_store import InMemoryKeyValueStore
from eventsync.adapters.seen_marker_store import KeyValueSeenMarkerStore
from eventsync.domain.models import (
    MetricSnapshot,
    NotificationRecord,
    SurfaceConfig,
    ViewerContext,
)

T0 = datetime(2024, 1, 1, 10, 0, tzinfo=pytz.UTC)


def minutes(count: float) -> timedelta:
    return timedelta(minutes=count)


def make_notification(
    notification_id: str, title: str = "Join request", message: str = ""
) -> NotificationRecord:
    return NotificationRecord.model_validate(
        {
            "_id": notification_id,
            "title": title,
            "message": message,
            "createdAt": "2024-01-01T10:00:00Z",
            "read": False,
        }
    )


class FakeDataProvider:
    """In-memory stand-in for the REST provider that records calls."""

    def __init__(
        self,
        notifications: list[NotificationRecord] | None = None,
        projects: list[dict[str, Any]] | None = None,
        metrics: MetricSnapshot | None = None,
    ) -> None:
        self.notifications = notifications or []
        self.projects = projects or []
        self.metrics = metrics or MetricSnapshot()
        self.calls: list[str] = []
        self.error: Exception | None = None

    def fetch_projects(self, **filters: str) -> list[dict[str, Any]]:
        self.calls.append("projects")
        if self.error:
            raise self.error
        return list(self.projects)

    def fetch_notifications(self, **filters: str) -> list[NotificationRecord]:
        self.calls.append("notifications")
        if self.error:
            raise self.error
        return list(self.notifications)

    def fetch_metrics(self, scope: str, *, days: int, **filters: str) -> MetricSnapshot:
        self.calls.append(f"metrics:{scope}:{days}")
        if self.error:
            raise self.error
        return self.metrics


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def viewer() -> ViewerContext:
    return ViewerContext(identity="alice@example.com")


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def marker_store(kv: InMemoryKeyValueStore) -> KeyValueSeenMarkerStore:
    return KeyValueSeenMarkerStore(kv)


@pytest.fixture
def participant_surface() -> SurfaceConfig:
    return SurfaceConfig(
        name="participant",
        interested_titles={
            "Join request",
            "Join request approved",
            "Activity join",
            "Activity schedule updated",
        },
        broadcast_titles={"New project created", "Project approved"},
        recipient_field_titles={"Activity schedule updated"},
    )


@pytest.fixture
def provider() -> FakeDataProvider:
    return FakeDataProvider()
