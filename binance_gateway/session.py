"""Lifecycle of a single streaming connection.

A StreamSession owns one transport connection at a time and moves through
``CONNECTING -> OPEN -> CLOSED``. Restarting moves a closed session back to
CONNECTING under the same identifier with a fresh connection.
"""

import asyncio
import logging
from enum import Enum, auto
from typing import Awaitable, Callable

from binance_gateway.errors import (
    DeserializationError,
    SessionStateError,
    TransportError,
    WebSocketConnectionError,
)
from binance_gateway.executors.interface import WsConnection, WsExecutor
from binance_gateway.helpers import invoke_callback
from binance_gateway.types import ErrorHandler, OpenHandler, SessionId, SessionState

log = logging.getLogger(__name__)

FrameHandler = Callable[[str], Awaitable[None]]
StateListener = Callable[["StreamSession", SessionState], None]

_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.CONNECTING: frozenset({SessionState.OPEN, SessionState.CLOSED}),
    SessionState.OPEN: frozenset({SessionState.CLOSED}),
    SessionState.CLOSED: frozenset({SessionState.CONNECTING}),
}


class _Request(Enum):
    CLOSE = auto()
    RESTART = auto()


class StreamSession:
    """One logical stream, identified by an id independent of its connection.

    ``close`` and ``restart`` only request the change and return immediately.
    They may be called from any thread. Teardown of a connection always
    finishes, including the CLOSED notification, before a restarted
    connection reaches OPEN.
    """

    def __init__(
        self,
        session_id: SessionId,
        url: str,
        executor: WsExecutor,
        frame_handler: FrameHandler,
        state_listener: StateListener,
        open_handler: OpenHandler | None = None,
        error_handler: ErrorHandler | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        """Initialize a session in the CONNECTING state.

        Args:
            session_id: Identifier handed to the caller.
            url: Full stream URL to connect to.
            executor: Executor used to open each connection.
            frame_handler: Coroutine called with every raw frame.
            state_listener: Called synchronously after every state change.
            open_handler: Optional callback receiving the id once the session is open.
            error_handler: Optional callback receiving the id and any stream error.
            loop: Event loop running the session. Defaults to the running loop.

        """
        self.id = session_id
        self.url = url
        self._executor = executor
        self._frame_handler = frame_handler
        self._state_listener = state_listener
        self._open_handler = open_handler
        self._error_handler = error_handler
        self._loop = loop if loop is not None else asyncio.get_running_loop()

        self._state = SessionState.CONNECTING
        self._connection: WsConnection | None = None
        self._request: _Request | None = None
        self._serve_task: asyncio.Task[None] | None = None
        self._supervisor: asyncio.Task[None] | None = None

    def __repr__(self) -> str:
        return f"StreamSession(id={self.id!r}, state={self._state.name}, url={self.url!r})"

    @property
    def state(self) -> SessionState:
        return self._state

    def start(self) -> None:
        """Begin connecting. Must be called on the session's event loop."""
        if self._supervisor is not None and not self._supervisor.done():
            return
        self._supervisor = self._loop.create_task(self._supervise())

    def close(self) -> None:
        """Request the session to close."""
        self._loop.call_soon_threadsafe(self._submit, _Request.CLOSE)

    def restart(self) -> None:
        """Request the session to reconnect under the same id."""
        self._loop.call_soon_threadsafe(self._submit, _Request.RESTART)

    async def wait_closed(self) -> None:
        """Wait until the session has closed and no restart is pending."""
        while self._supervisor is not None and not self._supervisor.done():
            await asyncio.wait({self._supervisor})

    def _submit(self, request: _Request) -> None:
        # last request wins
        self._request = request
        if self._supervisor is None or self._supervisor.done():
            if request is _Request.RESTART and self._state is SessionState.CLOSED:
                self._request = None
                self._transition(SessionState.CONNECTING)
                self.start()
            return
        if self._serve_task is not None and not self._serve_task.done():
            self._serve_task.cancel()

    def _transition(self, new_state: SessionState) -> None:
        if new_state not in _TRANSITIONS[self._state]:
            raise SessionStateError(self.id, self._state.name, new_state.name)
        log.debug("Stream %s: %s -> %s", self.id, self._state.name, new_state.name)
        self._state = new_state
        self._state_listener(self, new_state)

    async def _supervise(self) -> None:
        while True:
            self._serve_task = self._loop.create_task(self._serve())
            await asyncio.wait({self._serve_task})
            self._serve_task = None

            # teardown runs here so a second close or restart cannot interrupt it
            await self._teardown()
            self._transition(SessionState.CLOSED)
            log.info("Stream %s closed", self.id)

            if self._request is not _Request.RESTART:
                self._request = None
                return
            self._request = None
            log.info("Restarting stream %s", self.id)
            self._transition(SessionState.CONNECTING)

    async def _serve(self) -> None:
        try:
            self._connection = await self._executor.connect(self.url)
            self._transition(SessionState.OPEN)
            log.info("Stream %s open: %s", self.id, self.url)
            if self._open_handler is not None:
                await invoke_callback(self._open_handler, self.id)

            while True:
                try:
                    frame = await self._connection.recv()
                    await self._frame_handler(frame)
                except DeserializationError as e:
                    if not await self._report(e):
                        log.error("Dropped undecodable frame on stream %s: %s", self.id, e)
        except asyncio.CancelledError:
            log.debug("Stream %s cancelled", self.id)
        except WebSocketConnectionError as e:
            log.warning("WebSocket closed: %s", e)
            await self._report(e)
        except TransportError as e:
            log.error("Stream %s transport error: %s", self.id, e)
            await self._report(e)
        except Exception as e:
            log.exception("Handler failed on stream %s, closing it", self.id)
            await self._report(e)

    async def _teardown(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            await connection.close()
        except Exception as e:
            log.warning("Error while closing stream %s: %s", self.id, e)

    async def _report(self, error: Exception) -> bool:
        """Forward ``error`` to the error handler, returning whether one exists."""
        if self._error_handler is None:
            return False
        try:
            await invoke_callback(self._error_handler, self.id, error)
        except Exception:
            log.exception("Error handler failed on stream %s", self.id)
        return True
