"""Client-device key-value storage backends."""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Final, Protocol

from eventsync.domain.exceptions import StorageError


class CursorProtocol(Protocol):
    """Protocol for database cursors used by the key-value store."""

    def execute(self, query: str, params: tuple[Any, ...]) -> Any:
        """Execute a SQL statement with positional parameters."""

    def fetchone(self) -> Any:
        """Fetch a single result row."""

    def close(self) -> None:
        """Release cursor resources."""


class ConnectionProtocol(Protocol):
    """Protocol for connections compatible with the key-value store."""

    def cursor(self) -> CursorProtocol:
        """Create a database cursor."""

    def commit(self) -> None:
        """Commit the active transaction."""


GetConnectionCallable = Callable[[], AbstractContextManager[ConnectionProtocol]]


class InMemoryKeyValueStore:
    """Process-local store; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class SqliteKeyValueStore:
    """Durable key-value store backed by a single SQLite table."""

    _TABLE_NAME: Final[str] = "client_kv_store"

    def __init__(self, get_conn: GetConnectionCallable) -> None:
        """Initialize the store.

        Args:
            get_conn: Callable returning a context manager that yields a database connection.
        """
        self._get_conn = get_conn
        self._schema_ready = False

    @classmethod
    def from_path(cls, db_path: str | Path) -> SqliteKeyValueStore:
        """Create a store on a SQLite file, creating parent directories as needed."""
        path = Path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        connection = sqlite3.connect(str(path), check_same_thread=False)
        lock = threading.Lock()

        @contextmanager
        def _get_conn() -> Iterator[sqlite3.Connection]:
            with lock:
                yield connection

        return cls(_get_conn)

    def get_item(self, key: str) -> str | None:
        try:
            with self._connection_scope() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute(
                        f"SELECT value FROM {self._TABLE_NAME} WHERE key = ?",
                        (key,),
                    )
                    row = cursor.fetchone()
                finally:
                    cursor.close()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read key {key!r}: {exc}") from exc

        if not row:
            return None
        return str(row[0])

    def set_item(self, key: str, value: str) -> None:
        timestamp = datetime.now(UTC).isoformat()
        try:
            with self._connection_scope() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute(
                        f"INSERT INTO {self._TABLE_NAME} (key, value, updated_at) "
                        "VALUES (?, ?, ?) "
                        "ON CONFLICT(key) DO UPDATE SET "
                        "value=excluded.value, updated_at=excluded.updated_at",
                        (key, value, timestamp),
                    )
                    conn.commit()
                finally:
                    cursor.close()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write key {key!r}: {exc}") from exc

    @contextmanager
    def _connection_scope(self) -> Iterator[ConnectionProtocol]:
        with self._get_conn() as conn:
            if not self._schema_ready:
                self._ensure_schema(conn)
            yield conn

    def _ensure_schema(self, conn: ConnectionProtocol) -> None:
        cursor = conn.cursor()
        try:
            cursor.execute(
                f"CREATE TABLE IF NOT EXISTS {self._TABLE_NAME} ("
                "key TEXT PRIMARY KEY, value TEXT NOT NULL, updated_at TEXT)",
                (),
            )
            conn.commit()
        finally:
            cursor.close()
        self._schema_ready = True
