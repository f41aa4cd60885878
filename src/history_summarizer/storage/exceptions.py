"""Storage-specific exceptions."""

from history_summarizer.errors import ErrorKind, HistorySummarizerError


class StorageError(HistorySummarizerError):
    """Base exception for storage operations."""


class DatabaseError(StorageError):
    """Database connection or query failure."""


class MigrationError(StorageError):
    """Schema migration failure."""


class CacheReadError(StorageError):
    """Durable layer could not be read."""

    kind = ErrorKind.CACHE_READ_FAILURE


class CacheWriteError(StorageError):
    """Durable layer rejected a write."""

    kind = ErrorKind.CACHE_WRITE_FAILURE

    def __init__(self, block_hash: str, reason: str) -> None:
        self.block_hash = block_hash
        super().__init__(f"Failed to store summary for {block_hash}: {reason}")


class CacheClearError(StorageError):
    """Some durable entries could not be removed."""

    kind = ErrorKind.CACHE_WRITE_FAILURE

    def __init__(self, failed: int, reason: str) -> None:
        self.failed = failed
        super().__init__(f"{failed} cache entries could not be removed: {reason}")
