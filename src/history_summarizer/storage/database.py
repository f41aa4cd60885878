"""Shared SQLite connection for the summary store."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Sequence

from history_summarizer.storage.exceptions import DatabaseError, MigrationError
from history_summarizer.storage.migrations import Migration

LOGGER = logging.getLogger(__name__)


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class Database:
    """One lazily opened connection, serialized by `lock` across threads."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.lock = threading.RLock()
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                # Autocommit; multi-statement work goes through transaction()
                conn = sqlite3.connect(self.db_path, isolation_level=None, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA journal_mode = WAL")
            except sqlite3.Error as e:
                raise DatabaseError(f"Cannot open summary database {self.db_path}: {e}") from e
            self._conn = conn
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self.lock:
            conn = self.conn
            conn.execute("BEGIN")
            try:
                yield conn
            except Exception:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def close(self) -> None:
        with self.lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    @property
    def schema_version(self) -> int:
        """Highest applied migration, 0 for a fresh file."""
        try:
            with self.lock:
                row = self.conn.execute(
                    "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'schema_version'"
                ).fetchone()
                if row is None:
                    return 0
                (version,) = self.conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot read schema version of {self.db_path}: {e}") from e
        return version or 0

    def migrate(self, migrations: Sequence[Migration]) -> int:
        """Apply migrations newer than the schema version; return how many ran."""
        pending = [m for m in migrations if m.version > self.schema_version]
        for migration in pending:
            try:
                with self.transaction() as conn:
                    for statement in migration.statements:
                        conn.execute(statement)
                    conn.execute(
                        "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                        (migration.version, utcnow()),
                    )
            except sqlite3.Error as e:
                raise MigrationError(
                    f"Migration {migration.version} ({migration.name}) failed: {e}"
                ) from e
            LOGGER.info("Summary database at migration %d (%s)", migration.version, migration.name)
        return len(pending)
