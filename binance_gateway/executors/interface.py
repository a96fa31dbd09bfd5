"""Abstract interfaces for HTTP and WebSocket executors.

This module defines the abstract base classes that all HTTP and WebSocket
executor implementations must follow, enabling pluggable transport layers.
"""

from abc import ABC, abstractmethod


class HttpResponse:
    """Container for HTTP response data.

    Holds the raw body so callers decide whether and how to parse it; error
    classification must be able to skip or tolerate unparseable bodies.
    """

    status: int
    content: bytes
    headers: dict[str, str] | None

    __slots__ = ("status", "content", "headers")

    def __init__(
        self,
        *,
        status: int,
        content: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize an HTTP response object.

        Args:
            status: The HTTP status code of the response.
            content: The raw response body.
            headers: Optional HTTP response headers as key-value pairs.

        """
        self.status = status
        self.content = content
        self.headers = headers

    @property
    def is_success(self) -> bool:
        """Whether the status code is in the 2XX range."""
        return 200 <= self.status < 300


class HttpExecutor(ABC):
    """Abstract base class for HTTP request executors.

    Implementations prefix ``api_url`` to the request path and attach the
    default headers (including the API key) to every call.
    """

    api_url: str
    api_key: str | None = None
    add_default_headers: bool = True

    @abstractmethod
    def __init__(
        self,
        api_url: str,
        api_key: str | None,
        add_default_headers: bool = True,
    ):
        """Initialize the HTTP executor.

        Args:
            api_url: The base API URL for making requests.
            api_key: Optional API key sent in the request headers.
            add_default_headers: Whether to send the default headers.

        """
        ...

    @abstractmethod
    def send_request(self, method: str, path: str) -> HttpResponse:
        """Send an HTTP request.

        Args:
            method: The HTTP method (e.g., 'GET', 'POST', 'PUT', 'DELETE').
            path: The URL path for the request, including any query string.

        Returns:
            An HttpResponse object containing the status, raw body, and headers.

        """
        ...


class WsConnection(ABC):
    """Abstract base class for WebSocket connection wrappers.

    Defines the interface for WebSocket communication operations.
    """

    @abstractmethod
    async def recv(self) -> str:
        """Receive a message from the WebSocket connection.

        Returns:
            The received message as a string.

        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the WebSocket connection."""
        ...


class WsExecutor(ABC):
    """Abstract base class for WebSocket connection executors.

    Defines the interface for establishing WebSocket connections.
    """

    @abstractmethod
    async def connect(
        self,
        web_url: str,
        headers: dict[str, str] | None = None,
    ) -> WsConnection:
        """Establish a WebSocket connection.

        Args:
            web_url: The WebSocket URL to connect to.
            headers: Optional headers to include in the connection handshake.

        Returns:
            A WsConnection object representing the established connection.

        """
        ...

    async def close(self) -> None:
        """Release resources shared by the connections of this executor."""
        return None
