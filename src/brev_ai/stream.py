"""Streamed completion: the second HTTP phase.

The provider answers with newline-delimited ``data: {json}`` records and a
``data: [DONE]`` sentinel.  Records usually wrap their fields in an envelope::

    data: {"type": "chat:completion", "data": {"delta_content": "Hi", "phase": "answer"}}

Flat objects (``{"delta_content": "Hi"}``) are accepted as well.
"""

from __future__ import annotations

import asyncio
import enum
import json
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable

import httpx

from brev_ai.config import ClientConfig
from brev_ai.errors import RETRYABLE_STATUS, StreamReadError, is_transport_retryable
from brev_ai.payloads import COMPLETIONS_PATH, completion_headers, completion_payload
from brev_ai.templates import build_variables
from brev_ai.types import ChatRequest, Session, StreamChunk, UsageStats

if TYPE_CHECKING:
    from brev_ai.supervisor import LivenessSupervisor

_logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
_FENCE = "```"


# ---------------------------------------------------------------------------
# Line parsing and answer cleanup
# ---------------------------------------------------------------------------

def parse_stream_line(line: str) -> StreamChunk | None:
    """Decode one body line; ``None`` for anything that is not an event."""
    line = line.strip()
    if not line.startswith(DATA_PREFIX):
        return None

    data_str = line[len(DATA_PREFIX):].strip()
    if data_str == DONE_SENTINEL:
        return StreamChunk(type="done", done=True)

    try:
        obj = json.loads(data_str)
    except json.JSONDecodeError:
        return None
    if not isinstance(obj, dict):
        return None

    body = obj["data"] if isinstance(obj.get("data"), dict) else obj
    fields = {
        "delta_content": body.get("delta_content"),
        "phase": body.get("phase"),
        "type": obj.get("type"),
    }
    if any(v is not None and not isinstance(v, str) for v in fields.values()):
        _logger.debug("Skipping record with non-string fields: %s", data_str)
        return None
    done = body.get("done")
    if done is not None and not isinstance(done, bool):
        _logger.debug("Skipping record with non-boolean done: %s", data_str)
        return None

    usage = body.get("usage")
    return StreamChunk(
        delta_content=fields["delta_content"] or "",
        phase=fields["phase"] or "",
        type=fields["type"] or "",
        done=bool(done),
        usage=UsageStats.from_dict(usage) if isinstance(usage, dict) else None,
    )


def clean_response(text: str) -> str:
    """Normalize the assembled answer.

    Strips outer whitespace, closes an unbalanced code fence and collapses
    runs of four or more newlines to three.
    """
    if not text:
        return ""

    cleaned = text.replace("\r\n", "\n").strip()
    if cleaned.count(_FENCE) % 2 == 1:
        cleaned += "\n" + _FENCE
    while "\n\n\n\n" in cleaned:
        cleaned = cleaned.replace("\n\n\n\n", "\n\n\n")
    return cleaned


# ---------------------------------------------------------------------------
# Per-attempt state
# ---------------------------------------------------------------------------

class StreamPhase(enum.Enum):
    WAITING_FOR_FIRST_CONTENT = "waiting_for_first_content"
    WAITING_FOR_COMPLETION = "waiting_for_completion"
    DONE = "done"


class StreamState:
    """Accumulator and signals shared by the read loop and its supervisor.

    Written only by the read loop; read by the supervisor after
    ``finished`` is set.  A new instance is created for every attempt.
    """

    def __init__(self) -> None:
        self.parts: list[str] = []
        self.usage: UsageStats | None = None
        self.error: BaseException | None = None
        self.phase = StreamPhase.WAITING_FOR_FIRST_CONTENT
        self.first_content = asyncio.Event()
        self.finished = asyncio.Event()
        self.started = time.monotonic()

    def elapsed(self) -> float:
        return time.monotonic() - self.started

    def feed(self, chunk: StreamChunk) -> bool:
        """Apply *chunk*; return True when the read loop should stop."""
        if chunk.delta_content:
            self.parts.append(chunk.delta_content)
            self.first_content.set()
        if chunk.usage is not None:
            self.usage = chunk.usage
        return chunk.done

    def answer(self) -> str:
        return clean_response("".join(self.parts))


# Body-consumption coroutine handed to the supervisor
ReadLoop = Callable[[StreamState], Awaitable[None]]


@dataclass
class StreamResult:
    answer: str
    usage: UsageStats = field(default_factory=UsageStats)


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

class StreamReader:
    """Issue the streaming completion call and assemble the answer.

    Body consumption is handed to a ``LivenessSupervisor`` which runs it as
    a task and enforces the first-content and completion deadlines.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        config: ClientConfig,
        supervisor: LivenessSupervisor,
    ) -> None:
        self._http = http
        self._config = config
        self._supervisor = supervisor

    async def read(self, session: Session, request: ChatRequest) -> StreamResult:
        variables = build_variables(
            self._config, request.user_name, request.user_location,
        )
        payload = completion_payload(self._config, session.id, request, variables)
        headers = completion_headers(self._config, session.id)
        state = StreamState()

        try:
            async with self._http.stream(
                "POST", COMPLETIONS_PATH, json=payload, headers=headers,
            ) as resp:
                if resp.status_code != 200:
                    body = (await resp.aread()).decode(errors="replace")
                    raise StreamReadError(
                        f"completion failed with status {resp.status_code}: {body}",
                        retryable=resp.status_code in RETRYABLE_STATUS,
                        status_code=resp.status_code,
                    )
                await self._supervisor.supervise(
                    lambda s: self._consume(resp, s), state,
                )
        except httpx.HTTPError as e:
            raise StreamReadError(
                f"completion request failed: {e}",
                retryable=is_transport_retryable(e),
            ) from e

        return StreamResult(answer=state.answer(), usage=state.usage or UsageStats())

    async def _consume(self, resp: httpx.Response, state: StreamState) -> None:
        try:
            async for line in resp.aiter_lines():
                chunk = parse_stream_line(line)
                if chunk is None:
                    continue
                if state.feed(chunk):
                    _logger.debug("Stream marked as done")
                    break
        except httpx.HTTPError as e:
            raise StreamReadError(
                f"reading completion stream failed: {e}",
                retryable=is_transport_retryable(e),
            ) from e
