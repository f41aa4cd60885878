"""Split a transcript into character-bounded blocks."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from history_summarizer.blocks.hasher import hash_messages
from history_summarizer.blocks.models import Block, Message

LOGGER = logging.getLogger(__name__)


class BlockSegmenter:
    """Group consecutive messages into blocks of at most `block_size_chars`."""

    def __init__(self, block_size_chars: int = 1000) -> None:
        if block_size_chars <= 0:
            raise ValueError(f"block_size_chars must be positive, got {block_size_chars}")
        self.block_size_chars = block_size_chars

    def iter_blocks(self, messages: Iterable[Message]) -> Iterator[Block]:
        """
        Yield blocks in transcript order.

        A block closes when adding the next message would push it past
        the character budget. A message longer than the budget still gets a
        block of its own; messages are never split. System messages and
        empty messages are skipped.
        """
        current: list[Message] = []
        current_length = 0

        for message in messages:
            if message.is_system or not message.text:
                continue
            length = message.char_length

            if current and current_length + length > self.block_size_chars:
                yield self._make_block(current)
                current = [message]
                current_length = length
            else:
                current.append(message)
                current_length += length

        if current:
            yield self._make_block(current)

    def segment(self, messages: Iterable[Message]) -> list[Block]:
        """Return all blocks as a list."""
        messages = list(messages)
        blocks = list(self.iter_blocks(messages))
        LOGGER.debug(
            "Split %d messages into %d blocks (block size %d chars)",
            len(messages),
            len(blocks),
            self.block_size_chars,
        )
        return blocks

    @staticmethod
    def _make_block(messages: list[Message]) -> Block:
        frozen = tuple(messages)
        return Block(messages=frozen, hash=hash_messages(frozen))


def segment(messages: Iterable[Message], block_size_chars: int) -> list[Block]:
    """Convenience wrapper around `BlockSegmenter.segment`."""
    return BlockSegmenter(block_size_chars).segment(messages)
