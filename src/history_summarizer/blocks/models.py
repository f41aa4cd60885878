"""Data models for transcript blocks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Message:
    """A single chat message as read from the host transcript."""

    speaker_name: str
    is_user: bool
    text: str
    is_system: bool = False

    @property
    def char_length(self) -> int:
        """Length of the message text in characters."""
        return len(self.text)

    def render(self) -> str:
        """Render as a `speaker: text` line."""
        return f"{self.speaker_name}: {self.text}"

    def to_detail(self) -> dict:
        """Structured form sent to the summarization endpoint."""
        return {
            "name": self.speaker_name,
            "is_user": self.is_user,
            "mes": self.text,
        }

    def to_dict(self) -> dict:
        """Serialize using the host transcript keys."""
        return {
            "name": self.speaker_name,
            "is_user": self.is_user,
            "is_system": self.is_system,
            "mes": self.text,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Message:
        """Build from a host transcript record."""
        return cls(
            speaker_name=data.get("name") or "",
            is_user=bool(data.get("is_user", False)),
            text=data.get("mes") or "",
            is_system=bool(data.get("is_system", False)),
        )


@dataclass(frozen=True)
class Block:
    """A contiguous run of messages summarized as one unit."""

    messages: tuple[Message, ...]
    hash: str

    @property
    def char_length(self) -> int:
        """Summed text length of the block's messages."""
        return sum(m.char_length for m in self.messages)

    @property
    def message_count(self) -> int:
        """Number of messages in the block."""
        return len(self.messages)

    def render(self) -> str:
        """Block text as sent in `block_content`."""
        return "\n".join(m.render() for m in self.messages)

    def details(self) -> list[dict]:
        """Block messages as sent in `block_details`."""
        return [m.to_detail() for m in self.messages]


def filter_history(messages: Iterable[Message]) -> list[Message]:
    """Drop system messages and messages without text."""
    return [m for m in messages if not m.is_system and m.text]
