"""Durable storage layer for block summaries."""

from history_summarizer.storage.base import DurableStore
from history_summarizer.storage.cache import SummaryCache
from history_summarizer.storage.database import Database, utcnow
from history_summarizer.storage.exceptions import (
    CacheClearError,
    CacheReadError,
    CacheWriteError,
    DatabaseError,
    MigrationError,
    StorageError,
)
from history_summarizer.storage.factory import BACKENDS, open_store
from history_summarizer.storage.file_store import FileStore
from history_summarizer.storage.migrations import Migration, get_all_migrations
from history_summarizer.storage.sqlite_store import SqliteStore

__all__ = [
    # Base
    "Database",
    "DurableStore",
    "utcnow",
    # Backends
    "BACKENDS",
    "FileStore",
    "SqliteStore",
    "open_store",
    # Cache
    "SummaryCache",
    # Exceptions
    "CacheClearError",
    "CacheReadError",
    "CacheWriteError",
    "DatabaseError",
    "MigrationError",
    "StorageError",
    # Migrations
    "Migration",
    "get_all_migrations",
]
