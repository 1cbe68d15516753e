"""Liveness supervision for the streamed completion.

The read loop runs as an asyncio task that sets two one-shot events on its
``StreamState``: ``first_content`` and ``finished``.  The supervising
coroutine waits in two windows:

1. up to ``first_content_timeout`` for first content, else
   ``NoContentTimeoutError``;
2. up to ``completion_timeout`` for the loop to finish, else
   ``IncompleteResponseTimeoutError``.

On any exit the task is cancelled, which closes the streamed response.
"""

from __future__ import annotations

import asyncio
import logging

from brev_ai.errors import IncompleteResponseTimeoutError, NoContentTimeoutError
from brev_ai.stream import ReadLoop, StreamPhase, StreamState

_logger = logging.getLogger(__name__)


async def _wait_any(events: list[asyncio.Event], timeout: float) -> bool:
    """Wait until one of *events* is set; False on timeout."""
    waiters = [asyncio.ensure_future(e.wait()) for e in events]
    try:
        done, _ = await asyncio.wait(
            waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        for w in waiters:
            w.cancel()
    return bool(done)


class LivenessSupervisor:
    def __init__(
        self,
        first_content_timeout: float = 3.0,
        completion_timeout: float = 30.0,
    ) -> None:
        self.first_content_timeout = first_content_timeout
        self.completion_timeout = completion_timeout

    async def supervise(self, loop: ReadLoop, state: StreamState) -> None:
        """Run *loop* against *state* and enforce both deadlines.

        Returns normally once the loop finished cleanly; the caller then
        reads the accumulated answer from *state*.
        """
        task = asyncio.create_task(self._run_loop(loop, state))
        try:
            await self._await_first_content(state)
            await self._await_completion(state)
        finally:
            state.phase = StreamPhase.DONE
            if not task.done():
                task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    async def _run_loop(self, loop: ReadLoop, state: StreamState) -> None:
        try:
            await loop(state)
        except Exception as e:
            state.error = e
        else:
            # Loop's own view of the first-content deadline
            if (
                not state.first_content.is_set()
                and state.elapsed() >= self.first_content_timeout
            ):
                state.error = NoContentTimeoutError(self.first_content_timeout)
        finally:
            state.finished.set()

    async def _await_first_content(self, state: StreamState) -> None:
        state.phase = StreamPhase.WAITING_FOR_FIRST_CONTENT
        await _wait_any(
            [state.first_content, state.finished], self.first_content_timeout,
        )
        if state.first_content.is_set():
            _logger.info("First content chunk received after %.2fs", state.elapsed())
            return
        if state.finished.is_set() and state.error is not None:
            raise state.error
        # Silent past the deadline, or ended without any content
        raise NoContentTimeoutError(self.first_content_timeout)

    async def _await_completion(self, state: StreamState) -> None:
        state.phase = StreamPhase.WAITING_FOR_COMPLETION
        _logger.debug("Waiting for response completion")
        if not await _wait_any([state.finished], self.completion_timeout):
            raise IncompleteResponseTimeoutError(self.completion_timeout)
        if state.error is not None:
            raise state.error
