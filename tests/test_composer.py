"""Tests for prompt composition and truncation."""

from history_summarizer.blocks import Message
from history_summarizer.composer import (
    PromptComposer,
    combine_summaries,
    inject_summary,
    message_cost,
    render_template,
)

TEMPLATE = "Summary so far:\n{{summary_content}}\nEnd."


def _msg(text: str, name: str = "A", is_user: bool = False, is_system: bool = False) -> Message:
    return Message(speaker_name=name, is_user=is_user, text=text, is_system=is_system)


class TestHelpers:
    def test_combine_summaries_blank_line(self):
        assert combine_summaries(["one", "two"]) == "one\n\ntwo"

    def test_combine_empty(self):
        assert combine_summaries([]) == ""

    def test_render_template(self):
        assert render_template(TEMPLATE, "S") == "Summary so far:\nS\nEnd."

    def test_render_template_without_placeholder(self):
        assert render_template("Static text", "S") == "Static text"

    def test_message_cost(self):
        assert message_cost(_msg("x" * 50, name="Bob")) == 3 + 2 + 50


class TestAssemble:
    def test_keeps_newest_in_order(self):
        messages = [_msg(f"m{i}" + "x" * 8) for i in range(5)]  # cost 13 each
        kept = PromptComposer().assemble(messages, 40)

        assert kept == messages[-3:]

    def test_stops_at_first_overflow(self):
        messages = [_msg("x" * 5), _msg("y" * 100), _msg("z" * 5)]
        kept = PromptComposer().assemble(messages, 50)

        # The small oldest message is not reached past the overflowing one
        assert kept == [messages[2]]

    def test_zero_budget(self):
        assert PromptComposer().assemble([_msg("hi")], 0) == []

    def test_exact_fit(self):
        messages = [_msg("x" * 7)]  # 1 + 2 + 7
        assert PromptComposer().assemble(messages, 10) == messages


class TestCompose:
    def test_budget_figures(self):
        """historyBudget=100 tokens at 4 chars each leaves 400 - template."""
        template = "T" * 40  # no placeholder: 40 chars of overhead
        messages = [_msg("x" * 50) for _ in range(10)]  # 53 chars each
        composed = PromptComposer(chars_per_token=4).compose(["s"], template, messages, 100)

        assert composed.budget_chars == 400
        assert composed.remaining_budget == 360
        assert len(composed.messages) == 6  # 6 * 53 = 318, 7 * 53 = 371
        assert composed.messages == messages[-6:]
        assert composed.used_chars == 318
        assert composed.summary_dropped is True

    def test_five_messages_all_fit(self):
        template = "T" * 40
        messages = [_msg(f"{i}" * 50) for i in range(5)]
        composed = PromptComposer(chars_per_token=4).compose(["s"], template, messages, 100)

        assert composed.messages == messages
        assert composed.used_chars <= composed.remaining_budget

    def test_fragment_contains_summary_then_messages(self):
        messages = [_msg("hello", name="Aria"), _msg("hi", name="User", is_user=True)]
        composed = PromptComposer().compose(["one", "two"], TEMPLATE, messages, 1000)

        assert composed.summary_part == "Summary so far:\none\n\ntwo\nEnd."
        assert composed.fragment == composed.summary_part + "\nAria: hello\nUser: hi"
        assert composed.summary_dropped is False

    def test_summary_consumes_budget(self):
        long_summary = "s" * 390
        messages = [_msg("x" * 20)]
        composed = PromptComposer(chars_per_token=4).compose(
            [long_summary], "{{summary_content}}", messages, 100
        )

        assert composed.remaining_budget == 10
        assert composed.messages == []
        assert composed.fragment == long_summary

    def test_summary_larger_than_budget(self):
        composed = PromptComposer(chars_per_token=1).compose(
            ["s" * 50], "{{summary_content}}", [_msg("hi")], 10
        )
        assert composed.remaining_budget == 0
        assert composed.messages == []

    def test_empty_when_nothing_fits(self):
        composed = PromptComposer().compose([], TEMPLATE, [_msg("x" * 100)], 1)
        assert composed.fragment == ""

    def test_no_summaries_uses_full_budget(self):
        messages = [_msg("hello")]
        composed = PromptComposer().compose([], TEMPLATE, messages, 100)

        assert composed.summary_part == ""
        assert composed.remaining_budget == 400
        assert composed.fragment == "A: hello"


class TestInjectSummary:
    def test_after_first_system_message(self):
        sys1 = _msg("persona", name="System", is_system=True)
        sys2 = _msg("scenario", name="System", is_system=True)
        user = _msg("hi", name="User", is_user=True)
        chat = [sys1, user, sys2]

        result = inject_summary(chat, "SUMMARY", [user])

        assert [m.text for m in result] == ["persona", "SUMMARY", "scenario", "hi"]
        assert result[1].is_system is True

    def test_at_start_without_system_messages(self):
        user = _msg("hi", name="User", is_user=True)
        result = inject_summary([user], "SUMMARY", [user])

        assert [m.text for m in result] == ["SUMMARY", "hi"]

    def test_without_summary(self):
        sys1 = _msg("persona", name="System", is_system=True)
        user = _msg("hi", name="User", is_user=True)

        result = inject_summary([sys1, user], "", [user])

        assert result == [sys1, user]
