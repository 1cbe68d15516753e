"""Provider wire shapes for the two HTTP calls.

These are serialization details only; the rest of the package works with
``brev_ai.types``.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

from brev_ai.config import ClientConfig
from brev_ai.types import ChatRequest

NEW_CHAT_PATH = "/v1/chats/new"
COMPLETIONS_PATH = "/chat/completions"


def _hidden_features(config: ClientConfig) -> list[dict[str, str]]:
    return [
        {"type": "mcp", "server": server, "status": "hidden"}
        for server in config.hidden_mcp_servers
    ]


def base_headers(config: ClientConfig) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {config.auth_token}",
        "User-Agent": config.user_agent,
        "Origin": config.origin,
        "Content-Type": "application/json",
    }


def completion_headers(config: ClientConfig, session_id: str) -> dict[str, str]:
    headers = base_headers(config)
    headers.update({
        "Accept": "*/*",
        "X-FE-Version": config.frontend_version,
        "Referer": f"{config.origin}/c/{session_id}",
    })
    return headers


def new_chat_payload(
    config: ClientConfig,
    first_message: str,
    model: str,
    now: float | None = None,
    message_id: str | None = None,
) -> dict[str, Any]:
    """Body for ``POST /v1/chats/new`` seeded with a single user message."""
    timestamp = int(now if now is not None else time.time())
    message_id = message_id or str(uuid.uuid4())
    message = {
        "id": message_id,
        "parentId": None,
        "childrenIds": [],
        "role": "user",
        "content": first_message,
        "timestamp": timestamp,
        "models": [model],
    }
    return {
        "chat": {
            "id": "",
            "title": config.chat_title,
            "models": [model],
            "params": {},
            "history": {
                "messages": {message_id: dict(message)},
                "currentId": message_id,
            },
            "messages": [message],
            "tags": [],
            "flags": [],
            "features": _hidden_features(config),
            "enable_thinking": False,
            "timestamp": timestamp * 1000,
        },
    }


def completion_payload(
    config: ClientConfig,
    session_id: str,
    request: ChatRequest,
    variables: dict[str, str],
    request_id: str | None = None,
) -> dict[str, Any]:
    """Body for ``POST /chat/completions``."""
    payload: dict[str, Any] = {
        "stream": request.stream,
        "model": request.model,
        "messages": [m.to_dict() for m in request.messages],
        "params": {
            "temperature": request.temperature,
            "top_p": request.top_p,
            "max_tokens": request.max_tokens,
        },
        "tool_servers": [],
        "features": {
            "image_generation": False,
            "code_interpreter": False,
            "web_search": False,
            "auto_web_search": False,
            "preview_mode": True,
            "flags": [],
            "features": _hidden_features(config),
            "enable_thinking": False,
        },
        "variables": variables,
        "chat_id": session_id,
        "id": request_id or str(uuid.uuid4()),
    }
    if request.tools:
        payload["tools"] = [t.to_dict() for t in request.tools]
    if request.tool_choice:
        payload["tool_choice"] = request.tool_choice
    return payload
