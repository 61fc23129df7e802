"""Session controller driving one streaming request at a time.

Owns the SessionState snapshot, the cancellation token of the in-flight
request, and the list of observers notified after every change.
"""

import asyncio
import logging
from collections.abc import Callable
from contextlib import aclosing
from typing import Any

import httpx

from chatstream.config import ClientConfig, get_client_config
from chatstream.models.schemas import ChatRequest, SessionPhase, SessionState
from chatstream.streaming import reconciler
from chatstream.streaming.framer import LineFramer
from chatstream.streaming.parser import parse_line
from chatstream.streaming.transport import (
    CancellationToken,
    StreamCancelled,
    TransportError,
    open_stream,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]


class SessionController:
    """Orchestrates request, streaming and finalization for a chat session.

    Only one request may stream at a time; ``send`` is ignored while one is
    in flight. Failures never propagate to the caller: they end the request
    with a notice in the transcript and leave the controller ready for the
    next ``send``.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            config: Optional client configuration.
                    Loads from environment if not provided.
            transport: Optional httpx transport, used by tests and the
                       integrated demo server.
        """
        self._config = config or get_client_config()
        self._transport = transport
        self._state = reconciler.initial_state(self._config.process_steps)
        self._token: CancellationToken | None = None
        self._generation = 0
        self._listeners: list[StateListener] = []

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def cancellation_token(self) -> CancellationToken | None:
        return self._token

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every new snapshot.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, state: SessionState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener failed")

    async def send(self, text: str) -> None:
        """Send a question and stream the answer into the transcript.

        Blank text and calls made while a request is in flight are ignored.
        """
        if not text.strip() or self.is_loading:
            return

        self._generation += 1
        generation = self._generation
        token = CancellationToken()
        self._token = token

        self._commit(reconciler.start(self._state, text))
        payload = ChatRequest(
            question=text, history=list(self._state.transcript)
        ).model_dump(mode="json")

        try:
            outcome = await self._stream(payload, token, generation)
        except asyncio.CancelledError:
            if generation == self._generation:
                self._token = None
                self._commit(self._finish(SessionPhase.ABORTED))
            raise

        if generation != self._generation:
            logger.debug("Dropping terminal update of a request cleared by reset")
            return
        self._token = None
        self._commit(self._finish(outcome))
        logger.info(f"Request finished: {outcome.value}")

    def _finish(self, outcome: SessionPhase) -> SessionState:
        return reconciler.finish(
            self._state,
            outcome,
            interrupted_notice=self._config.interrupted_notice,
            error_notice=self._config.error_notice,
        )

    async def _stream(
        self, payload: dict[str, Any], token: CancellationToken, generation: int
    ) -> SessionPhase:
        """Drive chunks through framer, parser and reconciler.

        Whatever the framer still holds when the stream ends is a line
        without its terminating newline. It is discarded, never parsed,
        so the value returned by ``framer.close()`` is dropped here.

        Returns:
            The terminal phase reached by the request.
        """
        framer = LineFramer()
        timeout = httpx.Timeout(None, connect=self._config.connect_timeout)
        try:
            async with (
                httpx.AsyncClient(transport=self._transport, timeout=timeout) as client,
                aclosing(open_stream(client, self._config.endpoint, payload, token)) as chunks,
            ):
                async for chunk in chunks:
                    if token.cancelled or generation != self._generation:
                        raise StreamCancelled("Request cancelled")
                    for line in framer.feed(chunk):
                        event = parse_line(line)
                        if event is not None:
                            self._commit(reconciler.apply(self._state, event))
        except StreamCancelled:
            logger.info("Request aborted by caller")
            return SessionPhase.ABORTED
        except TransportError as e:
            logger.error(f"Request failed: {e}")
            return SessionPhase.FAILED
        except Exception:
            logger.exception("Unexpected error while streaming response")
            return SessionPhase.FAILED
        finally:
            framer.close()

        if self._state.malformed_count:
            logger.warning(
                f"Response contained {self._state.malformed_count} undecodable payload(s)"
            )
        return SessionPhase.COMPLETED

    def abort(self) -> None:
        """Cancel the in-flight request, if any."""
        if self._token is not None and self.is_loading:
            logger.info("Aborting in-flight request")
            self._token.cancel()

    def reset(self) -> None:
        """Abort any in-flight request and wipe the session to initial values."""
        if self.is_loading:
            self.abort()
        self._generation += 1
        self._token = None
        self._commit(reconciler.initial_state(self._config.process_steps))
