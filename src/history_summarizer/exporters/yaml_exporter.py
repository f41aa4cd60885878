"""YAML exporter for cached summaries."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import yaml

from history_summarizer.exporters.base import Exporter


class YamlExporter(Exporter):
    """Export summaries to YAML format."""

    @property
    def extension(self) -> str:
        return "yaml"

    def export(self, entries: Iterable[tuple[str, str]], output_path: Path) -> int:
        output = self.build_document(entries)
        with open(output_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(output, f, allow_unicode=True, sort_keys=False)
        return output["count"]
