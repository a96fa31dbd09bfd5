"""Stream transport built on the websockets asyncio client."""

from typing_extensions import override

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from binance_gateway.errors import (
    DeserializationError,
    TransportError,
    WebSocketConnectionError,
)
from binance_gateway.executors.interface import WsConnection, WsExecutor


class WebsocketsWsConnection(WsConnection):
    """One stream connection opened by WebsocketsWsExecutor."""

    def __init__(self, ws: ClientConnection, url: str):
        self._ws = ws
        self.url = url

    @override
    async def recv(self) -> str:
        """Wait for the next frame, decoding binary frames as UTF-8.

        Raises:
            WebSocketConnectionError: Once the stream is closed, by either side.
            DeserializationError: If a binary frame is not valid UTF-8.

        """
        try:
            frame = await self._ws.recv()
        except ConnectionClosed as e:
            raise WebSocketConnectionError(
                f"Stream closed: {e}", url=self.url
            ) from e
        if isinstance(frame, bytes):
            try:
                return frame.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DeserializationError(
                    f"Binary frame on {self.url} is not UTF-8: {e}"
                ) from e
        return frame

    @override
    async def close(self) -> None:
        await self._ws.close()


class WebsocketsWsExecutor(WsExecutor):
    """Opens every stream on its own websockets connection.

    There is no shared state, so the inherited ``close`` has nothing to release.
    """

    @override
    async def connect(
        self, web_url: str, headers: dict[str, str] | None = None
    ) -> WsConnection:
        """Open a stream connection to ``web_url``.

        Raises:
            WebSocketConnectionError: If the URL is not a WebSocket URL, the
                handshake is rejected, or the server cannot be reached.
            TransportError: For any other failure while connecting.

        """
        try:
            ws = await connect(web_url, additional_headers=headers)
        except InvalidURI as e:
            raise WebSocketConnectionError("Not a WebSocket URL", url=web_url) from e
        except InvalidHandshake as e:
            raise WebSocketConnectionError(
                f"Handshake rejected: {e}", url=web_url
            ) from e
        except (OSError, TimeoutError) as e:
            raise WebSocketConnectionError(
                f"Could not reach stream endpoint: {e!r}", url=web_url
            ) from e
        except Exception as e:
            raise TransportError(f"Failed to open stream {web_url}: {e}") from e
        return WebsocketsWsConnection(ws, web_url)
