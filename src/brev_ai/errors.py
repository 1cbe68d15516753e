"""Exception hierarchy for the streaming chat client.

Every failure raised by the client is a ``ChatClientError`` carrying a
``retryable`` flag.  Transport errors from ``httpx`` are wrapped with the
phase that failed and chained via ``raise ... from exc``.
"""

from __future__ import annotations

import httpx

# Statuses treated as transient by the retry loop
RETRYABLE_STATUS = (429, 500, 502, 503, 504)


class ChatClientError(Exception):
    """Base class for all client errors."""

    retryable: bool = False

    def __init__(self, message: str, *, retryable: bool | None = None) -> None:
        super().__init__(message)
        if retryable is not None:
            self.retryable = retryable


class ConfigurationError(ChatClientError):
    """Client cannot be constructed (e.g. missing credential)."""


class _PhaseError(ChatClientError):
    """Failure of one HTTP phase; ``status_code`` is set for non-200 replies."""

    def __init__(
        self,
        message: str,
        *,
        retryable: bool | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, retryable=retryable)
        self.status_code = status_code


class SessionCreateError(_PhaseError):
    """Creating the remote chat session failed."""


class StreamReadError(_PhaseError):
    """The streamed completion call failed."""


class LivenessTimeoutError(ChatClientError):
    """The stream was silent or stalled past a deadline."""

    retryable = True


class NoContentTimeoutError(LivenessTimeoutError):
    def __init__(self, timeout: float) -> None:
        super().__init__(
            f"AI response timeout: no content chunks received within {timeout:g} seconds",
        )
        self.timeout = timeout


class IncompleteResponseTimeoutError(LivenessTimeoutError):
    def __init__(self, timeout: float) -> None:
        super().__init__(
            f"AI response timeout: response incomplete after {timeout:g} seconds",
        )
        self.timeout = timeout


class RetriesExhaustedError(ChatClientError):
    """All attempts failed; ``last_error`` is the final cause."""

    def __init__(self, attempts: int, last_error: BaseException | None) -> None:
        super().__init__(f"failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def is_transport_retryable(exc: BaseException) -> bool:
    """Classify a raw ``httpx`` error.

    Timeouts, connection and network failures (DNS lookups surface as
    ``ConnectError``) and a peer closing the stream early are transient.
    """
    return isinstance(
        exc,
        (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError),
    )


def is_retryable(exc: BaseException | None) -> bool:
    """Return True if *exc* should trigger another attempt."""
    if exc is None:
        return False
    if isinstance(exc, ChatClientError):
        return exc.retryable
    return is_transport_retryable(exc)
