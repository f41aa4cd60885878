"""Content fingerprints for blocks."""

from __future__ import annotations

import hashlib
import re
from typing import Iterable

from history_summarizer.blocks.models import Message

# Prefixes distinguish user turns from character turns in the fingerprint
USER_PREFIX = "U"
CHARACTER_PREFIX = "C"
SEPARATOR = "|"

BLOCK_HASH_PATTERN = re.compile(r"[0-9a-f]{64}")


def fingerprint_source(messages: Iterable[Message]) -> str:
    """Build the canonical string that gets hashed.

    Each message becomes `<role>:<length>:<text>`. The length prefix keeps
    the encoding unambiguous when a text itself contains the separator.
    Only the role and the text take part; the speaker name does not, so
    renaming a character keeps existing summaries valid.
    """
    return SEPARATOR.join(
        f"{USER_PREFIX if m.is_user else CHARACTER_PREFIX}:{len(m.text)}:{m.text}"
        for m in messages
    )


def hash_messages(messages: Iterable[Message]) -> str:
    """Return the SHA-256 hex digest identifying a block's content."""
    source = fingerprint_source(messages)
    return hashlib.sha256(source.encode("utf-8")).hexdigest()


def is_block_hash(value: object) -> bool:
    """True for a 64-character lowercase hex digest."""
    return isinstance(value, str) and BLOCK_HASH_PATTERN.fullmatch(value) is not None
