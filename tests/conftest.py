"""Shared pytest fixtures for history-summarizer tests."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from history_summarizer.blocks import Message


@pytest.fixture
def temp_db_path() -> Path:
    """Create a temporary database file path.

    Returns:
        Path to a temporary .db file (file created but empty).
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        return Path(f.name)


@pytest.fixture
def sample_chat() -> list[Message]:
    """A short chat with one oversized message at the end."""
    return [
        Message(speaker_name="User", is_user=True, text="hi"),
        Message(speaker_name="Aria", is_user=False, text="hello"),
        Message(speaker_name="User", is_user=True, text="x" * 1500),
    ]
