"""JSON exporter for cached summaries."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from history_summarizer.exporters.base import Exporter


class JsonExporter(Exporter):
    """Export summaries to JSON format."""

    @property
    def extension(self) -> str:
        return "json"

    def export(self, entries: Iterable[tuple[str, str]], output_path: Path) -> int:
        output = self.build_document(entries)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(output, f, indent=2, ensure_ascii=False)
        return output["count"]
