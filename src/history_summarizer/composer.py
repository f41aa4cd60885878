"""Combine block summaries and recent messages into a bounded prompt."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from history_summarizer.blocks.models import Message
from history_summarizer.settings import SUMMARY_PLACEHOLDER

LOGGER = logging.getLogger(__name__)

SUMMARY_SEPARATOR = "\n\n"

# Chars counted per kept message on top of name and text (": " / newline)
NAME_OVERHEAD = 2

SUMMARY_SPEAKER = "System"


@dataclass
class ComposedPrompt:
    """Result of prompt composition."""

    fragment: str
    summary_part: str
    messages: list[Message] = field(default_factory=list)
    budget_chars: int = 0
    remaining_budget: int = 0
    used_chars: int = 0
    summary_dropped: bool = False  # template had no placeholder


def combine_summaries(summaries: Sequence[str]) -> str:
    """Join block summaries with a blank line between them."""
    return SUMMARY_SEPARATOR.join(summaries).strip()


def render_template(template: str, combined_summary: str) -> str:
    """Substitute the summary into the template.

    A template without the placeholder is returned unchanged and the summary
    is lost.
    """
    if SUMMARY_PLACEHOLDER not in template:
        LOGGER.warning("Prompt template has no %s placeholder; summary dropped", SUMMARY_PLACEHOLDER)
        return template
    return template.replace(SUMMARY_PLACEHOLDER, combined_summary, 1)


def message_cost(message: Message) -> int:
    """Characters a message occupies in the prompt."""
    return len(message.speaker_name) + NAME_OVERHEAD + len(message.text)


class PromptComposer:
    """Fits a summary fragment and the newest raw messages into a char budget."""

    def __init__(self, chars_per_token: int = 4) -> None:
        self.chars_per_token = chars_per_token

    def assemble(self, chat_tail: Sequence[Message], remaining_budget: int) -> list[Message]:
        """
        Keep the newest messages that fit in `remaining_budget` characters.

        Walks from the most recent message backwards and stops at the first
        message that would overflow; the result is in chronological order.
        """
        kept: list[Message] = []
        used = 0
        for index in range(len(chat_tail) - 1, -1, -1):
            message = chat_tail[index]
            cost = message_cost(message)
            if used + cost > remaining_budget:
                LOGGER.debug(
                    "Truncating history before message %d; kept %d chars", index, used
                )
                break
            kept.append(message)
            used += cost
        kept.reverse()
        return kept

    def compose(
        self,
        summaries: Sequence[str],
        template: str,
        recent_messages: Sequence[Message],
        history_budget: int,
    ) -> ComposedPrompt:
        """
        Build the prompt fragment.

        Args:
            summaries: Block summaries in block order.
            template: Prompt template containing the summary placeholder.
            recent_messages: Raw history, oldest first.
            history_budget: Budget in tokens, converted with `chars_per_token`.

        Returns:
            ComposedPrompt whose fragment is the rendered summary followed by
            the kept messages, one `name: text` line each.
        """
        combined = combine_summaries(summaries)
        summary_part = render_template(template, combined) if combined else ""

        budget_chars = history_budget * self.chars_per_token
        remaining = max(0, budget_chars - len(summary_part))
        kept = self.assemble(recent_messages, remaining)
        used = sum(message_cost(m) for m in kept)

        LOGGER.debug(
            "Target chars: %d, template chars: %d, remaining for history: %d",
            budget_chars,
            len(summary_part),
            remaining,
        )

        lines = [summary_part] if summary_part else []
        lines.extend(m.render() for m in kept)
        return ComposedPrompt(
            fragment="\n".join(lines),
            summary_part=summary_part,
            messages=kept,
            budget_chars=budget_chars,
            remaining_budget=remaining,
            used_chars=used,
            summary_dropped=bool(combined) and SUMMARY_PLACEHOLDER not in template,
        )


def inject_summary(
    chat: Sequence[Message],
    summary_part: str,
    kept: Sequence[Message],
) -> list[Message]:
    """
    Rebuild a chat for the model: system messages, the summary, recent turns.

    The summary goes in as a system message right after the first original
    system message, or first when there is none. Without a summary the
    system messages are followed directly by `kept`.
    """
    final: list[Message] = []
    summary_message = (
        Message(speaker_name=SUMMARY_SPEAKER, is_user=False, text=summary_part, is_system=True)
        if summary_part
        else None
    )

    inserted = False
    for message in chat:
        if not message.is_system:
            continue
        final.append(message)
        if summary_message is not None and not inserted:
            final.append(summary_message)
            inserted = True

    if summary_message is not None and not inserted:
        final.insert(0, summary_message)

    final.extend(kept)
    return final
