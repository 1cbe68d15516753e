"""Streaming chat-completion client with liveness deadlines and retries."""

from brev_ai.client import ChatClient
from brev_ai.config import ClientConfig, load_config
from brev_ai.errors import (
    ChatClientError,
    ConfigurationError,
    IncompleteResponseTimeoutError,
    LivenessTimeoutError,
    NoContentTimeoutError,
    RetriesExhaustedError,
    SessionCreateError,
    StreamReadError,
    is_retryable,
)
from brev_ai.history import ConversationHistory, trim_messages
from brev_ai.types import ChatRequest, ChatResponse, Message, Tool, UsageStats, create_tool

__all__ = [
    "ChatClient",
    "ChatClientError",
    "ChatRequest",
    "ChatResponse",
    "ClientConfig",
    "ConfigurationError",
    "ConversationHistory",
    "IncompleteResponseTimeoutError",
    "LivenessTimeoutError",
    "Message",
    "NoContentTimeoutError",
    "RetriesExhaustedError",
    "SessionCreateError",
    "StreamReadError",
    "Tool",
    "UsageStats",
    "create_tool",
    "is_retryable",
    "load_config",
    "trim_messages",
]
