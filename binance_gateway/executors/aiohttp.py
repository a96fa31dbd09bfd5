"""Stream transport built on aiohttp, the default for BinanceWSStreamClient.

Binance raw streams are receive-only: the stream is selected by the URL and
the server never expects a message back, so a connection here only reads
frames until the server goes away.
"""

import asyncio
from typing_extensions import override

import aiohttp

from binance_gateway.errors import (
    DeserializationError,
    TransportError,
    WebSocketConnectionError,
    WebSocketMessageError,
)
from binance_gateway.executors.interface import WsConnection, WsExecutor

# message types meaning the server has ended the stream
_END_OF_STREAM = frozenset(
    {aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED}
)


class AiohttpWsConnection(WsConnection):
    """One stream connection opened by AiohttpWsExecutor."""

    def __init__(self, ws: aiohttp.ClientWebSocketResponse, url: str):
        self._ws = ws
        self.url = url

    @override
    async def recv(self) -> str:
        """Wait for the next frame of the stream.

        Binary frames are decoded as UTF-8 so every frame reaches the
        dispatcher as text.

        Raises:
            WebSocketConnectionError: Once the server closes the stream or the
                socket fails. Every later call raises it again.
            DeserializationError: If a binary frame is not valid UTF-8.
            WebSocketMessageError: For any other message type.
            TransportError: If reading fails for any other reason.

        """
        try:
            msg = await self._ws.receive()
        except Exception as e:
            raise TransportError(f"Failed to read from stream {self.url}: {e}") from e

        if msg.type == aiohttp.WSMsgType.TEXT:
            return msg.data
        if msg.type == aiohttp.WSMsgType.BINARY:
            try:
                return msg.data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DeserializationError(
                    f"Binary frame on {self.url} is not UTF-8: {e}"
                ) from e
        if msg.type in _END_OF_STREAM:
            raise WebSocketConnectionError(
                f"Stream closed by server (code {self._ws.close_code})", url=self.url
            )
        if msg.type == aiohttp.WSMsgType.ERROR:
            raise WebSocketConnectionError(
                f"Stream failed: {self._ws.exception()}", url=self.url
            )
        raise WebSocketMessageError(f"Unexpected message type {msg.type} on {self.url}")

    @override
    async def close(self) -> None:
        await self._ws.close()


class AiohttpWsExecutor(WsExecutor):
    """Opens stream connections on one lazily created aiohttp ClientSession.

    The session is shared by every connection of the executor and released by
    ``close``, which BinanceWSStreamClient.disconnect calls last.
    """

    def __init__(self) -> None:
        self._session: aiohttp.ClientSession | None = None

    @override
    async def connect(
        self, web_url: str, headers: dict[str, str] | None = None
    ) -> WsConnection:
        """Open a stream connection to ``web_url``.

        Raises:
            WebSocketConnectionError: If the server refuses the handshake, cannot
                be reached, or does not answer in time.
            TransportError: For any other failure while connecting.

        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()

        try:
            ws = await self._session.ws_connect(web_url, headers=headers)
        except aiohttp.WSServerHandshakeError as e:
            raise WebSocketConnectionError(
                f"Handshake rejected with status {e.status}", url=web_url
            ) from e
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            raise WebSocketConnectionError(
                f"Could not reach stream endpoint: {e!r}", url=web_url
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Failed to open stream {web_url}: {e}") from e
        return AiohttpWsConnection(ws, web_url)

    @override
    async def close(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            await session.close()
