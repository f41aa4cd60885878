"""Backend selection by name."""

from __future__ import annotations

from pathlib import Path

from history_summarizer.storage.base import DurableStore
from history_summarizer.storage.file_store import FileStore
from history_summarizer.storage.sqlite_store import SqliteStore

BACKENDS = ("sqlite", "files")


def open_store(kind: str, path: Path | str) -> DurableStore:
    """Open a durable store.

    Args:
        kind: 'sqlite' for a database file, 'files' for a directory of JSON files.
        path: Database file or cache directory.
    """
    if kind == "sqlite":
        return SqliteStore(path)
    if kind == "files":
        return FileStore(path)
    raise ValueError(f"Unknown cache backend '{kind}' (expected one of {', '.join(BACKENDS)})")
