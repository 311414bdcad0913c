"""
Persistence Gateway

Key/value document persistence for the project collection and the user
profile. Values are JSON-compatible Python objects; each key holds one
document that is overwritten as a whole on save.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator, Protocol, runtime_checkable

from seedi.config import get_settings
from seedi.core.exceptions import LoadError, StorageError
from seedi.observability import get_tracer

logger = logging.getLogger(__name__)

PROJECTS_KEY = "seedi_projects"
PROFILE_KEY = "seedi_profile"


@runtime_checkable
class PersistenceGateway(Protocol):
    """Durable store consulted at startup and written after every mutation."""

    async def load(self, key: str) -> Any | None:
        """Stored document for ``key``, or None if nothing was saved."""
        ...

    async def save(self, key: str, value: Any) -> None:
        """Replace the document for ``key``. Raises StorageError on failure."""
        ...

    async def delete(self, key: str) -> None:
        """Remove ``key``; deleting an absent key is not an error."""
        ...


class SqliteGateway:
    """
    SQLite-backed gateway.

    Tables:
        - documents: one JSON document per logical key

    Blocking sqlite calls run in a worker thread so the event loop only
    suspends at the write boundary.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        """
        Initialize the gateway.

        Args:
            db_path: Path to SQLite database. Defaults to config.
        """
        self._db_path = db_path or get_settings().storage.db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._tracer = get_tracer("seedi.storage")
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connection."""
        try:
            conn = sqlite3.connect(self._db_path, timeout=30.0)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open database: {e}", {"db_path": str(self._db_path)}) from e
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA busy_timeout = 30000")
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise StorageError(f"Database error: {e}") from e
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS documents (
                    key TEXT PRIMARY KEY,
                    value_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
            """)

    # ==================== Sync primitives ====================

    def _load_sync(self, key: str) -> Any | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT value_json FROM documents WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row["value_json"])
        except json.JSONDecodeError as e:
            raise LoadError(f"Stored document is not valid JSON: {key}", {"key": key}) from e

    def _save_sync(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON-serializable: {e}", {"key": key}) from e
        now = datetime.now(timezone.utc).isoformat()
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO documents (key, value_json, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value_json = excluded.value_json,
                    updated_at = excluded.updated_at
                """,
                (key, payload, now),
            )

    def _delete_sync(self, key: str) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM documents WHERE key = ?", (key,))

    def updated_at(self, key: str) -> datetime | None:
        """When ``key`` was last written, if ever."""
        with self._connection() as conn:
            row = conn.execute("SELECT updated_at FROM documents WHERE key = ?", (key,)).fetchone()
        return datetime.fromisoformat(row["updated_at"]) if row else None

    # ==================== Async API ====================

    async def load(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._load_sync, key)

    async def save(self, key: str, value: Any) -> None:
        with self._tracer.span("save", attributes={"key": key}):
            await asyncio.to_thread(self._save_sync, key, value)
        logger.debug("Saved document %s", key)

    async def delete(self, key: str) -> None:
        with self._tracer.span("delete", attributes={"key": key}):
            await asyncio.to_thread(self._delete_sync, key)
        logger.debug("Deleted document %s", key)


class InMemoryGateway:
    """
    Process-local gateway.

    Documents are deep-copied in and out so callers never share mutable
    state with the store. ``fail_writes`` makes every save and delete raise
    StorageError until cleared.
    """

    def __init__(self, documents: dict[str, Any] | None = None) -> None:
        self._documents: dict[str, Any] = copy.deepcopy(documents) if documents else {}
        self.fail_writes = False
        self.write_count = 0

    def snapshot(self) -> dict[str, Any]:
        """Copy of everything stored."""
        return copy.deepcopy(self._documents)

    def _check_writable(self, key: str) -> None:
        if self.fail_writes:
            raise StorageError(f"Write rejected for {key}", {"key": key})

    async def load(self, key: str) -> Any | None:
        return copy.deepcopy(self._documents.get(key))

    async def save(self, key: str, value: Any) -> None:
        self._check_writable(key)
        self._documents[key] = copy.deepcopy(value)
        self.write_count += 1

    async def delete(self, key: str) -> None:
        self._check_writable(key)
        self._documents.pop(key, None)
        self.write_count += 1
