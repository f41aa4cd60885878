"""Two-layer content-addressed summary cache."""

from __future__ import annotations

import logging
import threading
from typing import Iterator

from history_summarizer.errors import ErrorKind, OperationResult
from history_summarizer.storage.base import DurableStore
from history_summarizer.storage.exceptions import (
    CacheClearError,
    CacheReadError,
    CacheWriteError,
)

LOGGER = logging.getLogger(__name__)


class SummaryCache:
    """
    Block hash -> summary cache with an in-memory fast path.

    Reads check memory first, then the durable store, promoting durable hits
    into memory. Writes land in memory unconditionally and are then
    persisted; a failed persist is reported but never rolls back memory, so
    the session keeps the value even when the store does not.

    Durable read failures are treated as misses. Passing `durable=None`
    gives a session-only cache.
    """

    def __init__(self, durable: DurableStore | None = None) -> None:
        self.durable = durable
        self._memory: dict[str, str] = {}
        self._lock = threading.Lock()

    def __contains__(self, block_hash: object) -> bool:
        with self._lock:
            return block_hash in self._memory

    def __len__(self) -> int:
        with self._lock:
            return len(self._memory)

    def get(self, block_hash: str) -> str | None:
        """Return the cached summary or None when never summarized."""
        with self._lock:
            summary = self._memory.get(block_hash)
        if summary is not None:
            return summary
        if self.durable is None:
            return None

        try:
            summary = self.durable.get(block_hash)
        except CacheReadError as e:
            LOGGER.warning("Durable cache read failed, treating as miss: %s", e)
            return None

        if summary is not None:
            with self._lock:
                self._memory[block_hash] = summary
        return summary

    def put(self, block_hash: str, summary: str) -> OperationResult:
        """Store a summary; last writer wins."""
        with self._lock:
            self._memory[block_hash] = summary
        if self.durable is None:
            return OperationResult.ok()

        try:
            self.durable.put(block_hash, summary)
        except CacheWriteError as e:
            LOGGER.warning("Summary kept for this session only: %s", e)
            return OperationResult.fail(ErrorKind.CACHE_WRITE_FAILURE, str(e))
        return OperationResult.ok()

    def clear(self) -> OperationResult:
        """Empty both layers; memory is always emptied."""
        LOGGER.info("Clearing summary cache")
        with self._lock:
            self._memory.clear()
        if self.durable is None:
            return OperationResult.ok()

        try:
            removed = self.durable.delete_all()
        except CacheClearError as e:
            LOGGER.error("Failed to clear durable cache: %s", e)
            return OperationResult.fail(e.kind, str(e))
        LOGGER.debug("Durable cache cleared (%d entries)", removed)
        return OperationResult.ok()

    def keys(self) -> list[str]:
        """Every known hash: durable keys first, then session-only ones."""
        with self._lock:
            memory_keys = list(self._memory)
        durable_keys: list[str] = []
        if self.durable is not None:
            try:
                durable_keys = self.durable.keys()
            except CacheReadError as e:
                LOGGER.warning("Could not enumerate durable cache: %s", e)

        seen = set(durable_keys)
        return durable_keys + [k for k in memory_keys if k not in seen]

    def entries(self) -> Iterator[tuple[str, str]]:
        """Yield (hash, summary) pairs for every readable entry."""
        for block_hash in self.keys():
            summary = self.get(block_hash)
            if summary is not None:
                yield block_hash, summary

    def close(self) -> None:
        """Close the durable store."""
        if self.durable is not None:
            self.durable.close()
