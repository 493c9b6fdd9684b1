"""Surface synchronization use case.

Flow for one push event:
1. Parse the payload (malformed payloads are dropped)
2. Broadcast titles refresh the project list for everyone
3. Events addressed to the viewer trigger a full refresh from the REST provider
4. The freshness tracker decides whether the newest notification is flagged new

The server stays the source of truth: nothing here mutates fetched state
locally, it only re-queries.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from eventsync.config.logging_config import get_logger
from eventsync.domain.exceptions import DataProviderError
from eventsync.domain.models import (
    InboundEvent,
    MetricSnapshot,
    NotificationRecord,
    PushDecision,
    SurfaceConfig,
    SurfaceSnapshot,
    ViewerContext,
)
from eventsync.domain.protocols import DataProviderProtocol, SeenMarkerStore
from eventsync.domain.sync_constants import METRICS_DAYS_DEFAULT
from eventsync.observability.tracing import correlation_scope
from eventsync.services.freshness_tracker import NewEventWindowTracker
from eventsync.services.relevance_filter import is_relevant, parse_inbound_event
from eventsync.services.trend_generator import SeededTrendGenerator, TrendSeries

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SurfaceSync:
    """Keeps one surface consistent with the server for one viewer."""

    def __init__(
        self,
        *,
        surface: SurfaceConfig,
        viewer: ViewerContext,
        provider: DataProviderProtocol,
        marker_store: SeenMarkerStore,
        tracker: NewEventWindowTracker | None = None,
        trend_generator: SeededTrendGenerator | None = None,
        metrics_scope: str | None = None,
        metrics_days: int = METRICS_DAYS_DEFAULT,
        query_filters: Mapping[str, str] | None = None,
        clock: Clock = _utc_now,
    ) -> None:
        self._surface = surface
        self._viewer = viewer
        self._provider = provider
        self._marker_store = marker_store
        self._tracker = tracker or NewEventWindowTracker()
        self._trends = trend_generator or SeededTrendGenerator()
        self._metrics_scope = metrics_scope
        self._metrics_days = metrics_days
        self._query_filters = dict(query_filters or {})
        self._clock = clock
        # Events are handled one at a time, in arrival order.
        self._lock = threading.RLock()
        self._snapshot: SurfaceSnapshot | None = None

    @property
    def snapshot(self) -> SurfaceSnapshot | None:
        return self._snapshot

    def handle_push_event(self, payload: Any) -> PushDecision:
        """Route one push payload and refresh what it affects.

        Never raises for provider failures; they are logged and reported
        as REFRESH_FAILED.
        """
        with self._lock, correlation_scope():
            event = parse_inbound_event(payload)
            if event is None:
                return PushDecision.DROPPED

            log = logger.bind(surface=self._surface.name, title=event.title)

            try:
                if event.title in self._surface.broadcast_titles:
                    self._refresh_projects()
                    log.info("surface_projects_refreshed")
                    return PushDecision.PROJECTS_REFRESHED

                if self.concerns_viewer(event):
                    self.refresh()
                    log.info("surface_refreshed")
                    return PushDecision.REFRESHED
            except DataProviderError as exc:
                log.warning("surface_refresh_failed", error=str(exc))
                return PushDecision.REFRESH_FAILED

            log.debug("push_event_ignored")
            return PushDecision.IGNORED

    def concerns_viewer(self, event: InboundEvent) -> bool:
        """Whether an event is addressed to this surface's viewer.

        Titles listed in recipient_field_titles are addressed by the
        structured recipient field when the payload carries one; all other
        titles use message-substring relevance.
        """
        interested = self._surface.interested_titles
        if event.title in self._surface.recipient_field_titles and event.title in interested:
            recipient = event.recipient_email
            return recipient is None or recipient == self._viewer.identity
        return is_relevant(event, self._viewer, interested)

    def refresh(self, now: datetime | None = None) -> SurfaceSnapshot:
        """Re-fetch projects, notifications and metrics.

        Raises:
            DataProviderError: On HTTP or network failures
        """
        with self._lock:
            fetched_at = now or self._clock()
            projects = self._provider.fetch_projects(**self._query_filters)
            notifications = self._visible(
                self._provider.fetch_notifications(**self._query_filters)
            )
            metrics = self._fetch_metrics()

            new_notification_id: str | None = None
            if notifications:
                newest_id = notifications[0].notification_id
                if self._tracker.evaluate(newest_id, fetched_at, self._marker_store):
                    new_notification_id = newest_id

            self._snapshot = SurfaceSnapshot(
                projects=projects,
                notifications=notifications,
                metrics=metrics,
                new_notification_id=new_notification_id,
                fetched_at=fetched_at,
            )
            logger.debug(
                "surface_snapshot_built",
                surface=self._surface.name,
                projects=len(projects),
                notifications=len(notifications),
                new_notification_id=new_notification_id,
            )
            return self._snapshot

    def trend_for(
        self, key: str, anchor: float, observed: list[float] | None = None
    ) -> TrendSeries:
        """Series for a metric card, seeded placeholder when nothing was observed.

        When `observed` is omitted, the series named `key` from the last
        fetched metrics is used.
        """
        if observed is None and self._snapshot and self._snapshot.metrics:
            observed = self._snapshot.metrics.get_series(key)
        return self._trends.series_or_placeholder(key, anchor, observed)

    def _refresh_projects(self) -> None:
        projects = self._provider.fetch_projects(**self._query_filters)
        if self._snapshot is None:
            self._snapshot = SurfaceSnapshot(projects=projects, fetched_at=self._clock())
        else:
            self._snapshot = self._snapshot.model_copy(update={"projects": projects})

    def _fetch_metrics(self) -> MetricSnapshot | None:
        if self._metrics_scope is None:
            return None
        return self._provider.fetch_metrics(
            self._metrics_scope, days=self._metrics_days, **self._query_filters
        )

    def _visible(self, notifications: list[NotificationRecord]) -> list[NotificationRecord]:
        suppressed = self._surface.suppressed_titles
        if not suppressed:
            return notifications
        return [n for n in notifications if n.title not in suppressed]
