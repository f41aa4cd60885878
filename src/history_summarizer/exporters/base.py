"""Base exporter interface for cached summaries."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable


class Exporter(ABC):
    """Base class for summary cache exporters."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """File extension without dot (e.g., 'json', 'yaml')."""
        ...

    @abstractmethod
    def export(self, entries: Iterable[tuple[str, str]], output_path: Path) -> int:
        """Export entries to file.

        Args:
            entries: (hash, summary) pairs to export.
            output_path: Path to output file.

        Returns:
            Number of entries exported.
        """
        ...

    @staticmethod
    def build_document(entries: Iterable[tuple[str, str]]) -> dict:
        """Shape entries into the exported document."""
        data = [{"hash": block_hash, "summary": summary} for block_hash, summary in entries]
        return {
            "entries": data,
            "count": len(data),
        }
