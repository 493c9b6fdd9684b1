"""Factory for creating seen marker store instances."""

from eventsync.adapters.kv_store import InMemoryKeyValueStore, SqliteKeyValueStore
from eventsync.adapters.seen_marker_store import KeyValueSeenMarkerStore, marker_key
from eventsync.config.logging_config import get_logger
from eventsync.config.settings import Settings
from eventsync.domain.protocols import KeyValueStore

logger = get_logger(__name__)


def create_kv_store(settings: Settings) -> KeyValueStore:
    """Create the key-value backend selected in settings.

    Raises:
        ValueError: If storage_backend is not supported
    """
    if settings.storage_backend == "sqlite":
        logger.info("kv_store_sqlite_selected", path=settings.storage_path)
        return SqliteKeyValueStore.from_path(settings.storage_path)

    if settings.storage_backend == "memory":
        logger.info("kv_store_memory_selected")
        return InMemoryKeyValueStore()

    raise ValueError(f"Unsupported storage backend: {settings.storage_backend}")


def create_seen_marker_store(
    settings: Settings,
    namespace: str | None = None,
    kv: KeyValueStore | None = None,
) -> KeyValueSeenMarkerStore:
    """Create the seen marker store for one viewer on this device.

    Args:
        settings: Application settings
        namespace: Optional per-viewer suffix for the storage key
        kv: Existing backend to share; a new one is created when omitted
    """
    backend = kv if kv is not None else create_kv_store(settings)
    return KeyValueSeenMarkerStore(backend, marker_key(settings.seen_marker_key, namespace))
