"""Tests for history trimming, input clipping and per-user history."""

from brev_ai.history import ConversationHistory, clip_user_input, trim_messages
from brev_ai.types import Message


def _turns(n: int, start: int = 0) -> list[Message]:
    return [
        Message(role="user" if i % 2 == 0 else "assistant", content=f"m{i}")
        for i in range(start, start + n)
    ]


class TestTrimMessages:
    def test_no_trim_under_limit(self):
        msgs = _turns(5)
        assert trim_messages(msgs, 10) is msgs

    def test_exact_limit_untouched(self):
        msgs = _turns(10)
        assert trim_messages(msgs, 10) == msgs

    def test_keeps_most_recent(self):
        msgs = _turns(40)
        trimmed = trim_messages(msgs, 30)
        assert len(trimmed) == 30
        assert trimmed == msgs[-30:]

    def test_keeps_system_message_first(self):
        system = Message(role="system", content="be nice")
        msgs = [system] + _turns(40)
        trimmed = trim_messages(msgs, 30)
        assert len(trimmed) == 30
        assert trimmed[0] is system
        assert trimmed[1:] == msgs[-29:]

    def test_only_first_system_kept_in_front(self):
        first = Message(role="system", content="first")
        second = Message(role="system", content="second")
        msgs = [first] + _turns(5) + [second] + _turns(5, start=5)
        trimmed = trim_messages(msgs, 4)
        assert trimmed[0] is first
        assert [m.content for m in trimmed[1:]] == ["m7", "m8", "m9"]

    def test_order_preserved_for_any_limit(self):
        msgs = [Message(role="system", content="s")] + _turns(25)
        for limit in range(1, 25):
            trimmed = trim_messages(msgs, limit)
            assert len(trimmed) <= limit
            assert trimmed[0].role == "system"
            contents = [m.content for m in trimmed[1:]]
            indices = [int(c[1:]) for c in contents]
            assert indices == sorted(indices)
            if indices:
                assert indices[-1] == 24


    def test_zero_limit_empty(self):
        msgs = [Message(role="system", content="s")] + _turns(3)
        assert trim_messages(msgs, 0) == []
        assert trim_messages([], 0) == []


class TestClipUserInput:
    def test_short_text_stripped(self):
        assert clip_user_input("  hi there \n", 100) == "hi there"

    def test_long_text_clipped_with_marker(self):
        clipped = clip_user_input("x" * 50, 10)
        assert clipped == "x" * 10 + "…"

    def test_counts_characters_not_bytes(self):
        text = "я" * 12
        assert clip_user_input(text, 12) == text


class TestConversationHistory:
    def test_add_and_read(self):
        history = ConversationHistory()
        history.add(1, "user", "hello")
        history.add(1, "assistant", "hi")
        assert history.messages(1) == [
            Message(role="user", content="hello"),
            Message(role="assistant", content="hi"),
        ]
        assert history.count(2) == 0

    def test_bounded(self):
        history = ConversationHistory(max_turns=3)
        for i in range(5):
            history.add(7, "user", str(i))
        assert [m.content for m in history.messages(7)] == ["2", "3", "4"]

    def test_last(self):
        history = ConversationHistory()
        for i in range(4):
            history.add(1, "user", str(i))
        assert [m.content for m in history.last(1, 2)] == ["2", "3"]
        assert history.last(1, 0) == []
        assert len(history.last(1, 10)) == 4

    def test_clear(self):
        history = ConversationHistory()
        history.add(1, "user", "x")
        history.clear(1)
        assert history.count(1) == 0

    def test_set_max_size_trims_existing(self):
        history = ConversationHistory(max_turns=10)
        for i in range(6):
            history.add(1, "user", str(i))
        history.set_max_size(2)
        assert [m.content for m in history.messages(1)] == ["4", "5"]
