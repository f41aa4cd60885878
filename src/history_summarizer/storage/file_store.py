"""Directory of JSON files, one per block hash."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from history_summarizer.storage.base import DurableStore
from history_summarizer.storage.exceptions import (
    CacheClearError,
    CacheReadError,
    CacheWriteError,
)

LOGGER = logging.getLogger(__name__)

SUFFIX = ".json"

# Keys become file names, so anything that could leave the directory is refused
SAFE_KEY = re.compile(r"[A-Za-z0-9_-]+")


class FileStore(DurableStore):
    """Stores each summary as `<hash>.json` containing `{"summary": ...}`."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    @property
    def name(self) -> str:
        return "files"

    def _path(self, block_hash: str) -> Path | None:
        if not isinstance(block_hash, str) or SAFE_KEY.fullmatch(block_hash) is None:
            return None
        return self.directory / f"{block_hash}{SUFFIX}"

    def get(self, block_hash: str) -> str | None:
        path = self._path(block_hash)
        if path is None:
            raise CacheReadError(f"Refusing unsafe cache key {block_hash!r}")
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise CacheReadError(f"Error reading cache file {path}: {e}") from e
        summary = data.get("summary") if isinstance(data, dict) else None
        if not isinstance(summary, str):
            raise CacheReadError(f"Cache file {path} has no summary")
        return summary

    def put(self, block_hash: str, summary: str) -> None:
        path = self._path(block_hash)
        if path is None:
            raise CacheWriteError(block_hash, "unsafe cache key")
        tmp_path = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps({"summary": summary}, ensure_ascii=False),
                encoding="utf-8",
            )
            tmp_path.replace(path)
        except OSError as e:
            raise CacheWriteError(block_hash, str(e)) from e

    def delete_all(self) -> int:
        if not self.directory.exists():
            LOGGER.info("Cache directory %s does not exist, nothing to clear", self.directory)
            return 0

        removed = 0
        failures: list[str] = []
        for path in self.directory.glob(f"*{SUFFIX}"):
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                LOGGER.error("Could not remove %s: %s", path, e)
                failures.append(f"{path.name}: {e}")

        if failures:
            raise CacheClearError(len(failures), "; ".join(failures))
        LOGGER.info("Removed %d summaries from %s", removed, self.directory)
        return removed

    def keys(self) -> list[str]:
        if not self.directory.exists():
            return []
        try:
            return sorted(p.stem for p in self.directory.glob(f"*{SUFFIX}"))
        except OSError as e:
            raise CacheReadError(f"Listing {self.directory} failed: {e}") from e
