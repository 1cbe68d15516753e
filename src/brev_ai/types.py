"""Shared data types for the brev-ai chat client."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

ROLES = ("system", "user", "assistant")


# ---------------------------------------------------------------------------
# Conversation types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Message:
    """One conversational turn."""

    role: str  # system, user, assistant
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class Tool:
    """A function the model may call."""

    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)
    type: str = "function"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


def create_tool(
    name: str, description: str, parameters: dict[str, Any] | None = None,
) -> Tool:
    """Build a function-tool declaration."""
    return Tool(name=name, description=description, parameters=parameters or {})


@dataclass
class ChatRequest:
    """Everything needed for one streamed completion.

    ``user_name`` and ``user_location`` only feed template variables; they
    are never sent as conversation content.
    """

    model: str
    messages: list[Message]
    temperature: float = 0.8
    max_tokens: int = 4000
    top_p: float = 0.95
    stream: bool = True
    tools: list[Tool] = field(default_factory=list)
    tool_choice: str | None = None
    user_name: str = ""
    user_location: str = ""

    def first_user_content(self) -> str:
        for msg in self.messages:
            if msg.role == "user":
                return msg.content
        return ""


@dataclass
class Session:
    """Provider-side conversation created before each streamed completion."""

    id: str
    created_at: float = field(default_factory=time.time)


# ---------------------------------------------------------------------------
# Stream types
# ---------------------------------------------------------------------------

@dataclass
class UsageStats:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> UsageStats | None:
        """Build from a provider ``usage`` object; ``None`` if a count is not an int."""
        counts: dict[str, int] = {}
        for key in ("prompt_tokens", "completion_tokens", "total_tokens"):
            value = raw.get(key)
            if value is None:
                value = 0
            if isinstance(value, bool) or not isinstance(value, int):
                return None
            counts[key] = value
        return cls(**counts)

    def as_tuple(self) -> tuple[int, int, int]:
        return self.prompt_tokens, self.completion_tokens, self.total_tokens


@dataclass
class StreamChunk:
    """One decoded ``data:`` record."""

    delta_content: str = ""
    phase: str = ""
    type: str = ""
    done: bool = False
    usage: UsageStats | None = None


# ---------------------------------------------------------------------------
# Response types
# ---------------------------------------------------------------------------

@dataclass
class Choice:
    content: str
    role: str = "assistant"
    index: int = 0
    finish_reason: str = "stop"


@dataclass
class ChatResponse:
    """Assembled answer for one chat exchange."""

    id: str
    model: str
    choices: list[Choice] = field(default_factory=list)
    usage: UsageStats = field(default_factory=UsageStats)
    created: int = field(default_factory=lambda: int(time.time()))
    object: str = "chat.completion"

    @property
    def content(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].content

    def usage_tuple(self) -> tuple[int, int, int]:
        """Return ``(prompt, completion, total)`` token counts."""
        return self.usage.as_tuple()
