"""Factories to compose surface sync instances from settings."""

from __future__ import annotations

from typing import Final

from eventsync.adapters.rest_provider import RestDataProvider
from eventsync.adapters.store_factory import create_seen_marker_store
from eventsync.config.settings import Settings, get_settings
from eventsync.domain.models import ViewerContext
from eventsync.domain.protocols import DataProviderProtocol, KeyValueStore
from eventsync.services.trend_generator import SeededTrendGenerator
from eventsync.use_cases.surface_sync import SurfaceSync

_METRICS_SCOPE_BY_SURFACE: Final[dict[str, str]] = {
    "leader": "leader",
    "admin": "admin",
}

_FILTER_KEYS_BY_SURFACE: Final[dict[str, tuple[str, str]]] = {
    "leader": ("leaderId", "leaderEmail"),
}


def create_surface_sync(
    surface_name: str,
    viewer: ViewerContext,
    *,
    settings: Settings | None = None,
    provider: DataProviderProtocol | None = None,
    kv: KeyValueStore | None = None,
) -> SurfaceSync:
    """Wire a SurfaceSync for one viewer on one surface.

    The seen marker key is namespaced by viewer identity so several
    accounts used on the same device do not share a "new" flag.

    Raises:
        KeyError: If the surface is not configured
    """
    settings = settings or get_settings()
    surface = settings.get_surface(surface_name)

    if provider is None:
        provider = RestDataProvider(
            settings.api_base_url, timeout_seconds=settings.api_timeout_seconds
        )

    query_filters: dict[str, str] = {}
    filter_keys = _FILTER_KEYS_BY_SURFACE.get(surface_name)
    if filter_keys:
        id_key, email_key = filter_keys
        query_filters = {id_key: viewer.user_id or "", email_key: viewer.identity}

    return SurfaceSync(
        surface=surface,
        viewer=viewer,
        provider=provider,
        marker_store=create_seen_marker_store(settings, namespace=viewer.identity, kv=kv),
        trend_generator=SeededTrendGenerator(settings.trend_length),
        metrics_scope=_METRICS_SCOPE_BY_SURFACE.get(surface_name),
        metrics_days=settings.metrics_days,
        query_filters=query_filters,
    )
