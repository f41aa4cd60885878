"""Summary cache exporters for JSON and YAML formats."""

from history_summarizer.exporters.base import Exporter
from history_summarizer.exporters.json_exporter import JsonExporter
from history_summarizer.exporters.yaml_exporter import YamlExporter

EXPORTERS: dict[str, type[Exporter]] = {
    "json": JsonExporter,
    "yaml": YamlExporter,
}


def get_exporter(fmt: str) -> Exporter:
    """Return an exporter instance for 'json' or 'yaml'."""
    try:
        return EXPORTERS[fmt.lower()]()
    except KeyError:
        raise ValueError(f"Unknown export format '{fmt}'") from None


__all__ = [
    "EXPORTERS",
    "Exporter",
    "JsonExporter",
    "YamlExporter",
    "get_exporter",
]
