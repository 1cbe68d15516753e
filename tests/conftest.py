"""Shared fixtures: a stubbed provider behind ``httpx.MockTransport``."""

from __future__ import annotations

from typing import Callable
from unittest.mock import AsyncMock

import httpx
import pytest

from brev_ai.client import ChatClient
from brev_ai.config import ClientConfig
from brev_ai.retry import RetryPolicy
from helpers import BASE_URL, FakeProvider


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        auth_token="test-token",
        base_url=BASE_URL,
        first_content_timeout=0.2,
        completion_timeout=0.5,
    )


@pytest.fixture
def no_sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def make_client(config: ClientConfig, no_sleep: AsyncMock) -> Callable[..., ChatClient]:
    """Build a ChatClient wired to *provider* with instant, jitter-free backoff."""

    def _make(provider: FakeProvider, cfg: ClientConfig | None = None) -> ChatClient:
        cfg = cfg or config
        http = httpx.AsyncClient(
            base_url=cfg.base_url, transport=httpx.MockTransport(provider),
        )
        policy = RetryPolicy(
            max_retries=cfg.max_retries,
            base_delay=cfg.retry_delay,
            max_delay=cfg.max_retry_delay,
            clock_ns=lambda: 0,
            sleep=no_sleep,
        )
        return ChatClient(cfg, http_client=http, retry_policy=policy)

    return _make
