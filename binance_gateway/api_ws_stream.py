"""WebSocket client for market and user data streams.

This module provides the BinanceWSStreamClient, which opens any number of
concurrent stream sessions, decodes their frames into typed messages and
dispatches them to caller supplied handlers.
"""

import asyncio
import logging
import threading
import uuid
from functools import partial
from typing import Any, Callable

from binance_gateway.errors import ValidationError
from binance_gateway.executors import DEFAULT_WS_EXECUTOR, WsExecutor
from binance_gateway.helpers import (
    DEFAULT_STREAM_URL,
    decode_user_data_event,
    decode_with,
    deserialize_frame,
    invoke_callback,
    parse_depth_message,
)
from binance_gateway.registry import SessionRegistry
from binance_gateway.session import FrameHandler, StreamSession
from binance_gateway.types import (
    AggregateTradeMessage,
    ErrorHandler,
    KlineInterval,
    KlineMessage,
    MessageHandler,
    OpenHandler,
    SessionId,
    SessionState,
    StreamMessage,
    UserDataEventKind,
)

log = logging.getLogger(__name__)


class BinanceWSStreamClient:
    """WebSocket client for streaming Binance market and user data.

    Every stream runs as its own session on the current event loop. The id
    returned when a stream is opened is valid immediately and stays the same
    across restarts.

    Examples:
        .. code-block:: python

            client = BinanceWSStreamClient()

            async def on_depth(msg: DepthMessage) -> None:
                print(msg.symbol, msg.bids[:1], msg.asks[:1])

            stream_id = client.listen_depth("ETHBTC", on_depth)
            ...
            client.close_stream(stream_id)
    """

    def __init__(
        self,
        stream_url: str = DEFAULT_STREAM_URL,
        executor: WsExecutor | None = None,
        registry: SessionRegistry | None = None,
    ):
        """Initialize the stream client.

        Args:
            stream_url: Base URL that stream parameters are appended to.
            executor: Optional WebSocket executor for handling connections. If None,
                uses the default executor.
            registry: Optional registry of open sessions, shared between clients.

        """
        self.stream_url = stream_url
        self.registry = registry if registry is not None else SessionRegistry()
        self._executor: WsExecutor = (
            executor if executor is not None else DEFAULT_WS_EXECUTOR()
        )
        # every session that is not closed, including those still connecting
        self._sessions_lock = threading.Lock()
        self._sessions: dict[SessionId, StreamSession] = {}

    def open_stream(
        self,
        parameters: str,
        message_handler: MessageHandler,
        open_handler: OpenHandler | None = None,
        use_custom_parser: bool = False,
        message_type: type[StreamMessage] | None = None,
        error_handler: ErrorHandler | None = None,
    ) -> SessionId:
        """Open a stream delivering one decoded message per frame.

        Must be called while an event loop is running. Returns before the
        connection is established.

        Args:
            parameters: Suffix appended to ``stream_url``, e.g. ``ethbtc@depth``.
            message_handler: Called with every decoded message, in arrival order.
            open_handler: Optional callback receiving the stream id once connected.
            use_custom_parser: Normalise frames with the depth parser into DepthMessage.
            message_type: Schema with a ``from_json`` classmethod to decode frames
                into. Frames are passed as parsed JSON when omitted.
            error_handler: Optional callback receiving the stream id and any error
                raised while the stream runs.

        Returns:
            The id of the new stream.

        Raises:
            ValidationError: If no event loop is running.

        """
        decoder: Callable[[Any], Any] | None
        if use_custom_parser:
            decoder = parse_depth_message
        elif message_type is not None:
            decoder = message_type.from_json
        else:
            decoder = None

        url = self.stream_url + parameters
        frame_handler = partial(self._dispatch_message, url, decoder, message_handler)
        return self._start_session(url, frame_handler, open_handler, error_handler)

    def open_user_data_stream(
        self,
        parameters: str,
        account_handler: MessageHandler,
        trade_handler: MessageHandler,
        order_handler: MessageHandler,
        error_handler: ErrorHandler | None = None,
    ) -> SessionId:
        """Open a user data stream routing frames to three handlers.

        ``outboundAccountInfo`` frames go to ``account_handler``. Execution
        reports go to ``trade_handler`` when their execution type is ``TRADE``
        (any case) and to ``order_handler`` otherwise. Other frames are dropped.

        Args:
            parameters: Suffix appended to ``stream_url``, usually the listen key.
            account_handler: Receives AccountUpdatedMessage values.
            trade_handler: Receives OrderOrTradeUpdatedMessage values for trades.
            order_handler: Receives OrderOrTradeUpdatedMessage values for orders.
            error_handler: Optional callback receiving the stream id and any error
                raised while the stream runs.

        Returns:
            The id of the new stream.

        Raises:
            ValidationError: If no event loop is running.

        """
        handlers: dict[UserDataEventKind, MessageHandler] = {
            UserDataEventKind.ACCOUNT: account_handler,
            UserDataEventKind.TRADE: trade_handler,
            UserDataEventKind.ORDER: order_handler,
        }
        url = self.stream_url + parameters
        frame_handler = partial(self._dispatch_user_data, url, handlers)
        return self._start_session(url, frame_handler, None, error_handler)

    def close_stream(self, session_id: SessionId) -> bool:
        """Initiate closing of a stream.

        Returns:
            False if no stream with this id exists, True otherwise.

        """
        if self.registry.close(session_id):
            return True
        # not registered until open, the caller may still hold a connecting id
        session = self._connecting_session(session_id)
        if session is None:
            return False
        session.close()
        return True

    def restart_stream(self, session_id: SessionId) -> bool:
        """Initiate a reconnect of a stream, keeping its id.

        Returns:
            False if no stream with this id exists, True otherwise.

        """
        if self.registry.restart(session_id):
            return True
        session = self._connecting_session(session_id)
        if session is None:
            return False
        session.restart()
        return True

    def get_state(self, session_id: SessionId) -> SessionState | None:
        """Current state of a stream, or None once it has closed."""
        with self._sessions_lock:
            session = self._sessions.get(session_id)
        return session.state if session is not None else None

    async def disconnect(self) -> None:
        """Close every stream, wait for them to finish, and release the executor."""
        with self._sessions_lock:
            sessions = list(self._sessions.values())
        for session in sessions:
            session.close()
        await asyncio.gather(*(session.wait_closed() for session in sessions))
        await self._executor.close()

    """ Stream shortcuts """

    def listen_depth(
        self,
        symbol: str,
        handler: MessageHandler,
        error_handler: ErrorHandler | None = None,
    ) -> SessionId:
        """Stream depth updates of ``symbol`` as DepthMessage values."""
        return self.open_stream(
            f"{symbol.lower()}@depth",
            handler,
            use_custom_parser=True,
            error_handler=error_handler,
        )

    def listen_kline(
        self,
        symbol: str,
        interval: KlineInterval,
        handler: MessageHandler,
        error_handler: ErrorHandler | None = None,
    ) -> SessionId:
        """Stream candlesticks of ``symbol`` as KlineMessage values."""
        return self.open_stream(
            f"{symbol.lower()}@kline_{interval.value}",
            handler,
            message_type=KlineMessage,
            error_handler=error_handler,
        )

    def listen_trades(
        self,
        symbol: str,
        handler: MessageHandler,
        error_handler: ErrorHandler | None = None,
    ) -> SessionId:
        """Stream aggregated trades of ``symbol`` as AggregateTradeMessage values."""
        return self.open_stream(
            f"{symbol.lower()}@aggTrade",
            handler,
            message_type=AggregateTradeMessage,
            error_handler=error_handler,
        )

    def listen_user_data(
        self,
        listen_key: str,
        account_handler: MessageHandler,
        trade_handler: MessageHandler,
        order_handler: MessageHandler,
        error_handler: ErrorHandler | None = None,
    ) -> SessionId:
        """Stream account, trade and order updates for a listen key."""
        return self.open_user_data_stream(
            listen_key, account_handler, trade_handler, order_handler, error_handler
        )

    """ Private helpers """

    def _start_session(
        self,
        url: str,
        frame_handler: FrameHandler,
        open_handler: OpenHandler | None,
        error_handler: ErrorHandler | None,
    ) -> SessionId:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise ValidationError("Streams must be opened from a running event loop") from e

        session = StreamSession(
            session_id=uuid.uuid4().hex,
            url=url,
            executor=self._executor,
            frame_handler=frame_handler,
            state_listener=self._on_state_change,
            open_handler=open_handler,
            error_handler=error_handler,
            loop=loop,
        )
        with self._sessions_lock:
            self._sessions[session.id] = session
        session.start()
        return session.id

    def _connecting_session(self, session_id: SessionId) -> StreamSession | None:
        with self._sessions_lock:
            session = self._sessions.get(session_id)
        if session is None or session.state is not SessionState.CONNECTING:
            return None
        return session

    def _on_state_change(self, session: StreamSession, state: SessionState) -> None:
        if state is SessionState.OPEN:
            self.registry.register(session.id, session)
        elif state is SessionState.CLOSED:
            self.registry.remove(session.id)
            with self._sessions_lock:
                self._sessions.pop(session.id, None)
        else:
            with self._sessions_lock:
                self._sessions[session.id] = session

    async def _dispatch_message(
        self,
        url: str,
        decoder: Callable[[Any], Any] | None,
        handler: MessageHandler,
        frame: str,
    ) -> None:
        data = deserialize_frame(frame)
        message = data if decoder is None else decode_with(decoder, data, url)
        await invoke_callback(handler, message)

    async def _dispatch_user_data(
        self,
        url: str,
        handlers: dict[UserDataEventKind, MessageHandler],
        frame: str,
    ) -> None:
        event = decode_with(decode_user_data_event, deserialize_frame(frame), url)
        if event is None:
            log.debug("Ignoring user data frame on %s: %s", url, frame)
            return
        await invoke_callback(handlers[event.kind], event.message)
