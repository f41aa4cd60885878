"""SQLite-backed durable summary store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from history_summarizer.storage.base import DurableStore
from history_summarizer.storage.database import Database, utcnow
from history_summarizer.storage.exceptions import (
    CacheClearError,
    CacheReadError,
    CacheWriteError,
    StorageError,
)
from history_summarizer.storage.migrations import get_all_migrations

LOGGER = logging.getLogger(__name__)


class SqliteStore(DurableStore):
    """Summaries in a single SQLite table keyed by block hash."""

    def __init__(self, db_path: Path | str) -> None:
        """Open (and migrate) the database at `db_path`."""
        self._db = Database(db_path)
        self._db.migrate(get_all_migrations())

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db.db_path

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    def get(self, block_hash: str) -> str | None:
        try:
            with self._db.lock:
                row = self._db.conn.execute(
                    "SELECT summary FROM block_summary WHERE hash = ?",
                    (block_hash,),
                ).fetchone()
        except (sqlite3.Error, StorageError) as e:
            raise CacheReadError(f"Get {block_hash} failed: {e}") from e
        return row["summary"] if row is not None else None

    def put(self, block_hash: str, summary: str) -> None:
        try:
            with self._db.lock:
                self._db.conn.execute(
                    """
                    INSERT INTO block_summary (hash, summary, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(hash) DO UPDATE SET
                        summary = excluded.summary,
                        updated_at = excluded.updated_at
                    """,
                    (block_hash, summary, utcnow()),
                )
        except (sqlite3.Error, StorageError) as e:
            raise CacheWriteError(block_hash, str(e)) from e

    def delete_all(self) -> int:
        try:
            with self._db.transaction() as conn:
                cursor = conn.execute("DELETE FROM block_summary")
                removed = cursor.rowcount
        except (sqlite3.Error, StorageError) as e:
            raise CacheClearError(len(self._safe_keys()), str(e)) from e
        LOGGER.info("Removed %d summaries from %s", removed, self._db.db_path)
        return removed

    def keys(self) -> list[str]:
        try:
            with self._db.lock:
                cursor = self._db.conn.execute(
                    "SELECT hash FROM block_summary ORDER BY updated_at, hash"
                )
                return [row["hash"] for row in cursor]
        except (sqlite3.Error, StorageError) as e:
            raise CacheReadError(f"List keys failed: {e}") from e

    def _safe_keys(self) -> list[str]:
        try:
            return self.keys()
        except CacheReadError:
            return []
