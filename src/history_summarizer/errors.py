"""Error kinds, exceptions and result types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Typed failure categories reported to callers."""

    NOT_CONFIGURED = "not_configured"
    SUMMARIZATION_FAILED = "summarization_failed"
    CACHE_WRITE_FAILURE = "cache_write_failure"
    CACHE_READ_FAILURE = "cache_read_failure"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    INVALID_INPUT = "invalid_input"
    EMPTY_HISTORY = "empty_history"


class HistorySummarizerError(Exception):
    """Base exception for the summarizer."""

    kind: ErrorKind | None = None


class SummarizationError(HistorySummarizerError):
    """The summarization endpoint failed or answered with garbage."""

    kind = ErrorKind.SUMMARIZATION_FAILED


class NotConfiguredError(HistorySummarizerError):
    """No summarization endpoint is configured."""

    kind = ErrorKind.NOT_CONFIGURED


class SettingsError(HistorySummarizerError):
    """Settings failed validation."""

    kind = ErrorKind.INVALID_INPUT


@dataclass
class OperationResult:
    """Outcome of a preview/edit surface operation."""

    success: bool
    error: str | None = None
    kind: ErrorKind | None = None

    @classmethod
    def ok(cls) -> OperationResult:
        return cls(success=True)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str) -> OperationResult:
        return cls(success=False, error=error, kind=kind)
