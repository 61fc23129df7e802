"""Transport reader for the streaming chat endpoint.

Opens one POST request and yields the raw response body chunk by chunk
until the stream ends, the transport fails, or the request is cancelled.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StreamError(Exception):
    """Base class for terminal stream conditions other than normal end."""


class TransportError(StreamError):
    """Raised on a non-success status or a network failure.

    Attributes:
        status_code: HTTP status of the response, None for network errors.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StreamCancelled(StreamError):
    """Raised when the request's cancellation token is triggered."""


class CancellationToken:
    """Cooperative cancellation signal for a single request."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


async def _discard(
    task: asyncio.Future, release: Callable[[Any], Awaitable[None]] | None
) -> None:
    """Cancel a raced task, releasing its result if it finished anyway."""
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    if release is not None and not task.cancelled() and task.exception() is None:
        await release(task.result())


async def _until_cancelled(
    awaitable: Awaitable[T],
    token: CancellationToken,
    stage: str,
    release: Callable[[T], Awaitable[None]] | None = None,
) -> T:
    """Await ``awaitable`` unless the token fires first.

    Cancellation wins when both finish together; ``release`` then disposes
    of the result that will never be handed out.

    Raises:
        StreamCancelled: When the token fires before the awaitable finishes.
    """
    task = asyncio.ensure_future(awaitable)
    cancel_task = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait(
            {task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        await _discard(task, release)
        raise
    finally:
        cancel_task.cancel()

    if cancel_task in done:
        await _discard(task, release)
        raise StreamCancelled(f"Request cancelled {stage}")

    return task.result()


async def open_stream(
    client: httpx.AsyncClient,
    url: str,
    payload: dict[str, Any],
    token: CancellationToken,
) -> AsyncIterator[bytes]:
    """POST the payload and yield response body chunks.

    The token is watched while waiting for the response headers and for
    every chunk after them. The connection is released on every exit path:
    exhaustion, failure, cancellation, or the consumer closing the iterator
    early.

    Args:
        client: HTTP client used for the request.
        url: Streaming chat endpoint.
        payload: JSON-serializable request body.
        token: Cancellation token of the request.

    Yields:
        Raw byte chunks in arrival order.

    Raises:
        TransportError: Non-2xx response or network-level failure.
        StreamCancelled: The token was triggered.
    """
    if token.cancelled:
        raise StreamCancelled("Request cancelled before it was sent")

    request = client.build_request(
        "POST",
        url,
        json=payload,
        headers={"Accept": "text/event-stream"},
    )
    try:
        response = await _until_cancelled(
            client.send(request, stream=True),
            token,
            "while waiting for the response",
            release=httpx.Response.aclose,
        )
        try:
            if not response.is_success:
                raise TransportError(
                    f"HTTP {response.status_code}", status_code=response.status_code
                )
            logger.debug(f"Stream opened: {url} ({response.status_code})")

            chunks = response.aiter_bytes()
            while True:
                if token.cancelled:
                    raise StreamCancelled("Request cancelled")
                chunk = await _until_cancelled(
                    anext(chunks, None), token, "while waiting for data"
                )
                if chunk is None:
                    break
                if chunk:
                    yield chunk
        finally:
            await response.aclose()
    except httpx.RequestError as e:
        raise TransportError(f"Connection failed: {e}") from e
