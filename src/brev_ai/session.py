"""Session creation: the first of the two HTTP phases."""

from __future__ import annotations

import logging

import httpx

from brev_ai.config import ClientConfig
from brev_ai.errors import (
    RETRYABLE_STATUS,
    SessionCreateError,
    is_transport_retryable,
)
from brev_ai.history import clip_user_input
from brev_ai.payloads import NEW_CHAT_PATH, base_headers, new_chat_payload
from brev_ai.types import Session

_logger = logging.getLogger(__name__)


class SessionOpener:
    """Create a fresh provider conversation and return its id.

    Every call creates a new session; nothing is cached.
    """

    def __init__(self, http: httpx.AsyncClient, config: ClientConfig) -> None:
        self._http = http
        self._config = config

    async def open(self, first_message: str, model: str | None = None) -> Session:
        first_message = clip_user_input(
            first_message, self._config.max_user_input_length,
        )
        payload = new_chat_payload(
            self._config, first_message, model or self._config.default_model,
        )

        try:
            resp = await self._http.post(
                NEW_CHAT_PATH, json=payload, headers=base_headers(self._config),
            )
        except httpx.HTTPError as e:
            raise SessionCreateError(
                f"create chat request failed: {e}",
                retryable=is_transport_retryable(e),
            ) from e

        if resp.status_code != 200:
            raise SessionCreateError(
                f"create chat failed with status {resp.status_code}: {resp.text}",
                retryable=resp.status_code in RETRYABLE_STATUS,
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise SessionCreateError(
                f"failed to decode create chat response: {e}",
            ) from e

        session_id = data.get("id", "") if isinstance(data, dict) else ""
        if not session_id:
            raise SessionCreateError("provider returned empty chat id")

        _logger.debug("Created chat session %s", session_id)
        return Session(id=str(session_id))
