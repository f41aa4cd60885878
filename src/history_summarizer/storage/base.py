"""Durable key/value storage interface for block summaries."""

from __future__ import annotations

from abc import ABC, abstractmethod


class DurableStore(ABC):
    """Persistent hash -> summary mapping that survives restarts."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name used in settings (e.g., 'sqlite', 'files')."""
        ...

    @abstractmethod
    def get(self, block_hash: str) -> str | None:
        """Return the stored summary, or None if absent.

        Raises:
            CacheReadError: The store could not be read.
        """
        ...

    @abstractmethod
    def put(self, block_hash: str, summary: str) -> None:
        """Insert or overwrite the summary for a hash.

        Raises:
            CacheWriteError: The store rejected the write.
        """
        ...

    @abstractmethod
    def delete_all(self) -> int:
        """Remove every entry and return how many were removed.

        Raises:
            CacheClearError: Some entries could not be removed.
        """
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """Enumerate stored hashes.

        Raises:
            CacheReadError: The store could not be read.
        """
        ...

    def close(self) -> None:
        """Release any held resources."""
