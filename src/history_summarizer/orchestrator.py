"""Drives segmentation, cache lookups and summarization calls."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

from history_summarizer.blocks.hasher import is_block_hash
from history_summarizer.blocks.models import Block, Message, filter_history
from history_summarizer.blocks.segmenter import BlockSegmenter
from history_summarizer.client import SummarizationClient
from history_summarizer.composer import (
    ComposedPrompt,
    PromptComposer,
    combine_summaries,
    render_template,
)
from history_summarizer.errors import (
    ErrorKind,
    HistorySummarizerError,
    OperationResult,
    SettingsError,
)
from history_summarizer.metrics import RunStats
from history_summarizer.settings import Settings
from history_summarizer.storage.cache import SummaryCache

LOGGER = logging.getLogger(__name__)

FAILED_PLACEHOLDER = "[Summary generation failed for block {index}]"
NOT_CACHED_PLACEHOLDER = "[Summary not cached. Edit and save to create, or run summarization.]"


@dataclass
class SummarizationRun:
    """Outcome of summarizing every block of a history."""

    blocks: list[Block]
    summaries: list[str]
    had_error: bool
    stats: RunStats = field(default_factory=RunStats)

    @property
    def combined_summary(self) -> str:
        return combine_summaries(self.summaries)


@dataclass
class PreviewState:
    """What the preview surface is currently showing."""

    block_index: int = 0
    total_blocks: int = 0
    current_block_hash: str | None = None
    all_blocks: list[Block] | None = None  # memoized segmentation

    def reset(self) -> None:
        self.block_index = 0
        self.total_blocks = 0
        self.current_block_hash = None
        self.all_blocks = None


@dataclass
class PreviewResult:
    """One block's text and summary, or why it could not be shown."""

    success: bool
    block_index: int = 0
    total_blocks: int = 0
    block_text: str = ""
    summary_text: str = ""
    block_hash: str | None = None
    cached: bool = False
    error: str | None = None
    kind: ErrorKind | None = None

    @classmethod
    def fail(cls, kind: ErrorKind, error: str, total_blocks: int = 0) -> PreviewResult:
        return cls(success=False, error=error, kind=kind, total_blocks=total_blocks)


class SummaryOrchestrator:
    """
    Owns the summary cache, the client and the per-chat summarization state.

    Blocks are summarized strictly in order, one endpoint call at a time.
    Only one pass runs at once; a pass requested while another is in flight
    is dropped, not queued.
    """

    def __init__(
        self,
        settings: Settings,
        cache: SummaryCache,
        client: SummarizationClient | None = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            settings: Initial settings snapshot.
            cache: Summary cache (memory layer plus optional durable store).
            client: Endpoint client; built from `settings` when omitted.
        """
        self._settings = settings
        self.cache = cache
        self.client = client or SummarizationClient(
            api_url=settings.api_url, timeout=settings.request_timeout
        )
        self._run_lock = threading.Lock()
        self._in_progress = False
        self.chat_id: str | None = None
        self.chat: list[Message] = []
        self.last_message_count = 0
        self.last_summary = ""
        self.preview = PreviewState()

    # Settings

    def get_settings(self) -> Settings:
        """Current settings snapshot."""
        return self._settings

    def update_settings(self, **changes) -> OperationResult:
        """Swap in a new validated snapshot built from `changes`."""
        try:
            new_settings = self._settings.replace(**changes)
        except SettingsError as e:
            return OperationResult.fail(ErrorKind.INVALID_INPUT, str(e))

        old = self._settings
        self._settings = new_settings
        if (new_settings.api_url, new_settings.request_timeout) != (old.api_url, old.request_timeout):
            self.client = SummarizationClient(
                api_url=new_settings.api_url,
                timeout=new_settings.request_timeout,
                session=self.client.session,
            )
        if new_settings.block_size_chars != old.block_size_chars:
            self.preview.reset()
        LOGGER.info("Settings updated: %s", ", ".join(sorted(changes)))
        return OperationResult.ok()

    # Chat lifecycle

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def attach(self, chat_id: str, chat: Sequence[Message]) -> None:
        """Point the orchestrator at a chat; a new identity resets preview state."""
        if chat_id != self.chat_id:
            self.on_chat_changed(chat_id)
        self.chat = list(chat)

    def on_chat_changed(self, chat_id: str | None) -> None:
        """Forget per-chat state; cached summaries are kept."""
        LOGGER.info("Chat changed to %s", chat_id)
        self.chat_id = chat_id
        self.chat = []
        self.preview.reset()
        self.last_message_count = 0
        self.last_summary = ""

    def segment(self, messages: Sequence[Message]) -> list[Block]:
        segmenter = BlockSegmenter(self._settings.block_size_chars)
        return segmenter.segment(filter_history(messages))

    # Summarization

    def summarize_blocks(self, blocks: Sequence[Block]) -> SummarizationRun:
        """Summarize blocks in order, containing per-block failures."""
        stats = RunStats(blocks=len(blocks))
        started = time.monotonic()
        summaries: list[str] = []
        had_error = False
        hint = self._settings.summary_size_hint
        configured = self.client.is_configured
        if not configured:
            LOGGER.warning("Summarization API URL is not set; uncached blocks will be skipped")

        for i, block in enumerate(blocks):
            summary = self.cache.get(block.hash)
            if summary is not None:
                LOGGER.debug("Cache hit for block %d/%d", i + 1, len(blocks))
                stats.cache_hits += 1
                summaries.append(summary)
                continue

            stats.cache_misses += 1
            summary = None
            if configured:
                LOGGER.info("Cache miss for block %d/%d. Calling API...", i + 1, len(blocks))
                stats.api_calls += 1
                try:
                    summary = self.client.summarize(block, target_summary_size=hint)
                except HistorySummarizerError as e:
                    LOGGER.warning("Summarization failed for block %d: %s", i + 1, e)

            if summary is None:
                stats.failures += 1
                had_error = True
                summaries.append(FAILED_PLACEHOLDER.format(index=i + 1))
                continue

            if not self.cache.put(block.hash, summary).success:
                stats.cache_write_failures += 1
            summaries.append(summary)

        stats.elapsed_seconds = time.monotonic() - started
        LOGGER.info("Summarization pass done. %s", stats.summary())
        return SummarizationRun(
            blocks=list(blocks), summaries=summaries, had_error=had_error, stats=stats
        )

    def summarize_all(self, messages: Sequence[Message]) -> SummarizationRun:
        """Segment `messages` and summarize every block."""
        return self.summarize_blocks(self.segment(messages))

    def _try_begin(self) -> bool:
        with self._run_lock:
            if self._in_progress:
                return False
            self._in_progress = True
            return True

    def _end(self) -> None:
        with self._run_lock:
            self._in_progress = False

    @staticmethod
    def count_messages(chat: Sequence[Message]) -> int:
        """Messages that count towards the trigger threshold."""
        return len(filter_history(chat))

    def maybe_summarize(
        self,
        chat: Sequence[Message] | None = None,
        *,
        force: bool = False,
    ) -> Optional[SummarizationRun]:
        """
        Summarize when enough new messages arrived since the last pass.

        The newest message is left out; it is the turn being generated
        against. Returns None when disabled, below threshold, or when
        another pass is already running.
        """
        settings = self._settings
        if not settings.enabled:
            return None
        if chat is not None:
            self.chat = list(chat)
        chat = self.chat

        current_count = self.count_messages(chat)
        since_last = current_count - self.last_message_count
        if not force and since_last < settings.trigger_threshold:
            return None

        if not self._try_begin():
            LOGGER.debug("Summarization already in progress; trigger dropped")
            return None
        try:
            LOGGER.info(
                "Trigger reached (%d new messages, threshold %d). Starting summarization.",
                since_last,
                settings.trigger_threshold,
            )
            run = self.summarize_all(chat[:-1])
            self.last_summary = run.combined_summary
            self.last_message_count = current_count
            if run.had_error:
                LOGGER.warning("Some blocks failed to summarize")
            return run
        finally:
            self._end()

    def force_summarize(self, chat: Sequence[Message] | None = None) -> Optional[SummarizationRun]:
        """Reset the message counter and summarize now."""
        LOGGER.info("Forcing summarization")
        self.last_message_count = 0
        return self.maybe_summarize(chat, force=True)

    def current_prompt(self) -> str:
        """Last summary rendered through the template, or '' when none."""
        if not self.last_summary.strip():
            return ""
        return render_template(self._settings.prompt_template, self.last_summary.strip())

    def build_prompt(self, chat: Sequence[Message]) -> ComposedPrompt:
        """Summarize the history and fit it with recent messages into the budget."""
        settings = self._settings
        history = filter_history(chat)
        run = self.summarize_all(history)
        composer = PromptComposer(chars_per_token=settings.chars_per_token)
        return composer.compose(
            run.summaries,
            settings.prompt_template,
            history,
            settings.history_budget,
        )

    # Preview / edit surface

    def refresh_preview(self) -> None:
        """Drop the memoized segmentation."""
        self.preview.all_blocks = None

    def get_preview(self, block_index: int) -> PreviewResult:
        """Show one block and its cached summary without calling the API."""
        state = self.preview
        if state.all_blocks is None:
            if not filter_history(self.chat):
                return PreviewResult.fail(
                    ErrorKind.EMPTY_HISTORY, "No chat history available for preview."
                )
            state.all_blocks = self.segment(self.chat)
            state.total_blocks = len(state.all_blocks)

        total = state.total_blocks
        if not 0 <= block_index < total:
            return PreviewResult.fail(
                ErrorKind.INDEX_OUT_OF_RANGE,
                f"Invalid block index {block_index}. Max index is {total - 1}.",
                total_blocks=total,
            )

        block = state.all_blocks[block_index]
        state.block_index = block_index
        state.current_block_hash = block.hash

        summary = self.cache.get(block.hash)
        return PreviewResult(
            success=True,
            block_index=block_index,
            total_blocks=total,
            block_text=block.render(),
            summary_text=summary if summary is not None else NOT_CACHED_PLACEHOLDER,
            block_hash=block.hash,
            cached=summary is not None,
        )

    def update_summary(self, block_hash: object, new_text: object) -> OperationResult:
        """Overwrite a block's summary by hand, bypassing the endpoint."""
        if not isinstance(block_hash, str) or not block_hash.strip():
            return OperationResult.fail(ErrorKind.INVALID_INPUT, "No block hash given.")
        if not is_block_hash(block_hash):
            return OperationResult.fail(
                ErrorKind.INVALID_INPUT,
                f"Not a block hash (expected 64 lowercase hex characters): {block_hash!r}",
            )
        if not isinstance(new_text, str):
            return OperationResult.fail(ErrorKind.INVALID_INPUT, "Summary text must be a string.")
        LOGGER.info("Updating summary for %s by hand", block_hash[:12])
        return self.cache.put(block_hash, new_text)

    def clear_cache(self) -> OperationResult:
        """Clear every cached summary and the current summary prompt."""
        result = self.cache.clear()
        self.refresh_preview()
        if result.success:
            self.last_summary = ""
        return result
