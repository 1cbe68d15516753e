"""Conversation history bounding.

``trim_messages`` limits what is sent upstream; ``ConversationHistory`` keeps
a short per-user log that callers turn into the ``messages`` argument.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from brev_ai.types import Message

TRUNCATION_MARKER = "…"


def trim_messages(messages: list[Message], max_messages: int) -> list[Message]:
    """Keep the first system message plus the most recent other turns.

    The result holds at most *max_messages* entries.  Older non-system turns
    are dropped first; relative order is preserved.
    """
    if max_messages < 1:
        return []
    if len(messages) <= max_messages:
        return messages

    system: list[Message] = []
    rest: list[Message] = []
    for msg in messages:
        if msg.role == "system" and not system:
            system.append(msg)
            continue
        rest.append(msg)

    limit = max(0, max_messages - len(system))
    if len(rest) > limit:
        rest = rest[len(rest) - limit:]
    return system + rest


def clip_user_input(text: str, limit: int) -> str:
    """Strip *text* and cut it to *limit* characters, marking the cut."""
    trimmed = text.strip()
    if len(trimmed) > limit:
        return trimmed[:limit] + TRUNCATION_MARKER
    return trimmed


# ---------------------------------------------------------------------------
# Per-user history
# ---------------------------------------------------------------------------

@dataclass
class HistoryTurn:
    role: str  # user, assistant
    content: str
    timestamp: float = field(default_factory=time.time)

    def to_message(self) -> Message:
        return Message(role=self.role, content=self.content)


class ConversationHistory:
    """In-memory turn history keyed by user id."""

    def __init__(self, max_turns: int = 12) -> None:
        self._max_turns = max_turns
        self._turns: dict[int, list[HistoryTurn]] = {}

    def add(self, user_id: int, role: str, content: str) -> None:
        turns = self._turns.setdefault(user_id, [])
        turns.append(HistoryTurn(role=role, content=content))
        if len(turns) > self._max_turns:
            del turns[: len(turns) - self._max_turns]

    def messages(self, user_id: int) -> list[Message]:
        return [t.to_message() for t in self._turns.get(user_id, [])]

    def last(self, user_id: int, count: int) -> list[Message]:
        if count <= 0:
            return []
        return self.messages(user_id)[-count:]

    def count(self, user_id: int) -> int:
        return len(self._turns.get(user_id, []))

    def clear(self, user_id: int) -> None:
        self._turns.pop(user_id, None)

    def set_max_size(self, size: int) -> None:
        """Change the bound and trim every stored history to it."""
        self._max_turns = size
        for turns in self._turns.values():
            if len(turns) > size:
                del turns[: len(turns) - size]
