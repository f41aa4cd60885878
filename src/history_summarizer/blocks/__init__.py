"""Transcript blocks: models, fingerprints and segmentation."""

from history_summarizer.blocks.hasher import fingerprint_source, hash_messages, is_block_hash
from history_summarizer.blocks.models import Block, Message, filter_history
from history_summarizer.blocks.segmenter import BlockSegmenter, segment

__all__ = [
    "Block",
    "BlockSegmenter",
    "Message",
    "filter_history",
    "fingerprint_source",
    "hash_messages",
    "is_block_hash",
    "segment",
]
