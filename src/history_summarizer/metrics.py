"""Per-run counters for summarization passes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RunStats:
    """Cache and API activity during one summarization pass."""

    blocks: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    api_calls: int = 0
    failures: int = 0
    cache_write_failures: int = 0
    elapsed_seconds: float = 0.0

    @property
    def hit_rate(self) -> float:
        """Fraction of blocks served from cache."""
        if self.blocks == 0:
            return 0.0
        return self.cache_hits / self.blocks

    def summary(self) -> str:
        """Human-readable one-liner."""
        return (
            f"Blocks: {self.blocks} | "
            f"Cache hits: {self.cache_hits} ({self.hit_rate * 100:.0f}%) | "
            f"API calls: {self.api_calls} | "
            f"Failures: {self.failures} | "
            f"Elapsed: {self.elapsed_seconds:.2f}s"
        )
