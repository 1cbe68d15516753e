"""Stub provider for the streaming client tests."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx

BASE_URL = "http://test/api"


class ScriptedStream(httpx.AsyncByteStream):
    """Response body made of byte chunks, pauses (floats, in seconds) and
    exceptions raised mid-body."""

    def __init__(self, steps: list[bytes | float | Exception]) -> None:
        self.steps = steps

    async def __aiter__(self):
        for step in self.steps:
            if isinstance(step, Exception):
                raise step
            if isinstance(step, (int, float)):
                await asyncio.sleep(step)
            else:
                yield step


def sse(*records: dict[str, Any] | str) -> list[bytes]:
    """Encode records as ``data:`` lines (strings are sent verbatim)."""
    lines = []
    for rec in records:
        payload = rec if isinstance(rec, str) else json.dumps(rec)
        lines.append(f"data: {payload}\n".encode())
    return lines


def delta(text: str, **extra: Any) -> dict[str, Any]:
    """A provider-style envelope carrying *text*."""
    return {"type": "chat:completion", "data": {"delta_content": text, "phase": "answer", **extra}}


class FakeProvider:
    """Stub for both endpoints.

    ``session_replies`` is consumed one per session call (the last one
    repeats); each entry is a ``(status, body)`` pair or an exception.
    ``stream_steps`` is the completion body script.
    """

    def __init__(
        self,
        stream_steps: list[bytes | float | Exception] | None = None,
        session_replies: list[tuple[int, Any] | Exception] | None = None,
        stream_status: int = 200,
    ) -> None:
        self.stream_steps = stream_steps if stream_steps is not None else (
            sse(delta("Hello "), delta("world"), "[DONE]")
        )
        self.session_replies = session_replies or [(200, {"id": "chat-1"})]
        self.stream_status = stream_status
        self.session_requests: list[httpx.Request] = []
        self.stream_requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/v1/chats/new"):
            self.session_requests.append(request)
            idx = min(len(self.session_requests), len(self.session_replies)) - 1
            reply = self.session_replies[idx]
            if isinstance(reply, Exception):
                raise reply
            status, body = reply
            if isinstance(body, (bytes, str)):
                return httpx.Response(status, content=body)
            return httpx.Response(status, json=body)
        if request.url.path.endswith("/chat/completions"):
            self.stream_requests.append(request)
            if self.stream_status != 200:
                return httpx.Response(self.stream_status, text="upstream broke")
            return httpx.Response(200, stream=ScriptedStream(list(self.stream_steps)))
        return httpx.Response(404)


