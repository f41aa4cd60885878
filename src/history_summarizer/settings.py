"""Immutable settings snapshots loaded from YAML."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from history_summarizer.errors import SettingsError
from history_summarizer.storage.factory import BACKENDS

LOGGER = logging.getLogger(__name__)

SUMMARY_PLACEHOLDER = "{{summary_content}}"

DEFAULT_PROMPT_TEMPLATE = (
    "[This is a summary of earlier conversation blocks:\n"
    f"{SUMMARY_PLACEHOLDER}\n"
    "End of Summary]"
)


@dataclass(frozen=True)
class Settings:
    """Summarizer configuration. Never mutated; use `replace`."""

    enabled: bool = True
    api_url: str = ""
    block_size_chars: int = 1000
    summary_size_hint: int = 150
    history_budget: int = 2048  # tokens, converted with chars_per_token
    chars_per_token: int = 4
    trigger_threshold: int = 10
    prompt_template: str = DEFAULT_PROMPT_TEMPLATE
    request_timeout: float = 60.0
    cache_backend: str = "sqlite"
    cache_path: str = "data/summaries.db"

    @property
    def history_budget_chars(self) -> int:
        """Character budget for the summary plus recent history."""
        return self.history_budget * self.chars_per_token

    @property
    def is_configured(self) -> bool:
        """True when an endpoint URL is set."""
        return bool(self.api_url.strip())

    def validate(self) -> Settings:
        """Raise SettingsError if any value has the wrong type or is out of range."""
        if not isinstance(self.enabled, bool):
            raise SettingsError(f"enabled must be true or false, got {self.enabled!r}")
        for name in ("api_url", "prompt_template", "cache_backend", "cache_path"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise SettingsError(f"{name} must be a string, got {value!r}")
        for name in (
            "block_size_chars",
            "summary_size_hint",
            "history_budget",
            "chars_per_token",
            "trigger_threshold",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise SettingsError(f"{name} must be a positive integer, got {value!r}")
        if (
            isinstance(self.request_timeout, bool)
            or not isinstance(self.request_timeout, (int, float))
            or self.request_timeout <= 0
        ):
            raise SettingsError(f"request_timeout must be positive, got {self.request_timeout!r}")
        if self.cache_backend not in BACKENDS:
            raise SettingsError(
                f"cache_backend must be one of {', '.join(BACKENDS)}, got {self.cache_backend!r}"
            )
        if self.prompt_template.count(SUMMARY_PLACEHOLDER) > 1:
            raise SettingsError(
                f"prompt_template may contain {SUMMARY_PLACEHOLDER} at most once"
            )
        return self

    def replace(self, **changes) -> Settings:
        """Return a new validated snapshot with `changes` applied."""
        unknown = set(changes) - field_names()
        if unknown:
            raise SettingsError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **changes).validate()

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


def field_names() -> set[str]:
    return {f.name for f in dataclasses.fields(Settings)}


def settings_from_dict(data: dict) -> Settings:
    """Build settings from a mapping, ignoring unknown keys."""
    known = field_names()
    unknown = sorted(set(data) - known)
    if unknown:
        LOGGER.warning("Ignoring unknown settings: %s", ", ".join(unknown))
    return Settings(**{k: v for k, v in data.items() if k in known}).validate()


def load_settings(path: Path | str) -> Settings:
    """Load settings from a YAML file; defaults when the file is missing."""
    path = Path(path)
    if not path.exists():
        LOGGER.info("No settings file at %s, using defaults", path)
        return Settings()
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must contain a mapping")
    return settings_from_dict(data)


def save_settings(settings: Settings, path: Path | str) -> None:
    """Write settings to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(settings.to_dict(), f, allow_unicode=True, sort_keys=False)
