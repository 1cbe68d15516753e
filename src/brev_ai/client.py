"""Async streaming chat client.

One ``chat()`` call runs the two-phase exchange (session creation, then a
supervised streamed completion) inside a bounded retry loop::

    async with ChatClient(load_config()) as client:
        resp = await client.chat([Message("user", "hi")], temperature=1)
        print(resp.content, resp.usage_tuple())
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from brev_ai.config import TOKEN_ENV, ClientConfig, load_config
from brev_ai.errors import ChatClientError, ConfigurationError
from brev_ai.history import clip_user_input, trim_messages
from brev_ai.retry import RetryPolicy
from brev_ai.session import SessionOpener
from brev_ai.stream import StreamReader
from brev_ai.supervisor import LivenessSupervisor
from brev_ai.types import ChatRequest, ChatResponse, Choice, Message, Tool

_logger = logging.getLogger(__name__)

# Seed for the new conversation when the request has no user turn
_FALLBACK_FIRST_MESSAGE = "hello"


class ChatClient:
    """Client for the provider's session + SSE completion protocol.

    Parameters
    ----------
    config:
        Client configuration; loaded from file/environment when omitted.
    http_client:
        Pre-built ``httpx.AsyncClient`` (tests pass one with a
        ``MockTransport``).  Its ``base_url`` must point at the API root.
    retry_policy:
        Overrides the policy derived from *config*.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        if not self.config.auth_token:
            raise ConfigurationError(f"{TOKEN_ENV} not found in environment variables")

        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(
                self.config.request_timeout, connect=self.config.connect_timeout,
            ),
        )
        self.retry_policy = retry_policy or RetryPolicy(
            max_retries=self.config.max_retries,
            base_delay=self.config.retry_delay,
            max_delay=self.config.max_retry_delay,
        )
        self.supervisor = LivenessSupervisor(
            first_content_timeout=self.config.first_content_timeout,
            completion_timeout=self.config.completion_timeout,
        )
        self._opener = SessionOpener(self._http, self.config)
        self._reader = StreamReader(self._http, self.config, self.supervisor)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        top_p: float | None = None,
        tools: list[Tool] | None = None,
        tool_choice: str | None = None,
        user_name: str = "",
        user_location: str = "",
        system_message: str | None = None,
    ) -> ChatResponse:
        """Send *messages* and return the assembled answer.

        Raises
        ------
        ValueError
            *messages* is empty.
        ChatClientError
            A non-retryable failure, or ``RetriesExhaustedError`` once every
            attempt failed.
        """
        if not messages:
            raise ValueError("no messages provided")

        request = self._build_request(
            messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            top_p=top_p,
            tools=tools,
            tool_choice=tool_choice,
            user_name=user_name,
            user_location=user_location,
            system_message=system_message,
        )
        first_user = clip_user_input(
            request.first_user_content(), self.config.max_user_input_length,
        ) or _FALLBACK_FIRST_MESSAGE

        async def _attempt(attempt: int) -> ChatResponse:
            # Fresh session per attempt; never reused
            session = await self._opener.open(first_user, request.model)
            result = await self._reader.read(session, request)
            return ChatResponse(
                id=session.id,
                model=request.model,
                choices=[Choice(content=result.answer)],
                usage=result.usage,
            )

        return await self.retry_policy.run(_attempt)

    async def quick_chat(self, prompt: str, **options: Any) -> str:
        """Single-prompt convenience wrapper around :meth:`chat`."""
        resp = await self.chat([Message(role="user", content=prompt)], **options)
        if not resp.choices:
            raise ChatClientError("no response from AI")
        return resp.choices[0].content

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> ChatClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build_request(
        self,
        messages: list[Message],
        *,
        model: str | None,
        temperature: float | None,
        max_tokens: int | None,
        top_p: float | None,
        tools: list[Tool] | None,
        tool_choice: str | None,
        user_name: str,
        user_location: str,
        system_message: str | None,
    ) -> ChatRequest:
        msgs = list(messages)
        if system_message is not None:
            msgs.insert(0, Message(role="system", content=system_message))
        cfg = self.config
        return ChatRequest(
            model=model or cfg.default_model,
            messages=trim_messages(msgs, cfg.max_history_messages),
            temperature=cfg.temperature if temperature is None else temperature,
            max_tokens=cfg.max_tokens if max_tokens is None else max_tokens,
            top_p=cfg.top_p if top_p is None else top_p,
            tools=list(tools or []),
            tool_choice=tool_choice,
            user_name=user_name.strip(),
            user_location=user_location.strip(),
        )
