"""Reading host chat transcripts from disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from history_summarizer.blocks.models import Message

LOGGER = logging.getLogger(__name__)


def _parse_records(text: str) -> list[dict]:
    stripped = text.lstrip()
    if stripped.startswith("["):
        data = json.loads(stripped)
        if not isinstance(data, list):
            raise ValueError("Transcript JSON must be a list of messages")
        return [item for item in data if isinstance(item, dict)]

    records = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            item = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Line {line_no} is not valid JSON: {exc}") from exc
        if isinstance(item, dict):
            records.append(item)
    return records


def load_transcript(path: Path | str) -> list[Message]:
    """
    Load messages from a JSON array or a JSON Lines chat file.

    Records without a `mes` key (e.g., a chat metadata header line) are
    skipped.
    """
    path = Path(path)
    records = _parse_records(path.read_text(encoding="utf-8"))
    messages = [Message.from_dict(r) for r in records if "mes" in r]
    LOGGER.debug("Loaded %d messages from %s", len(messages), path)
    return messages
