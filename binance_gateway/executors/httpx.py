"""HTTP executor implementation using httpx.

This module provides HTTP request handling using the httpx library and is the
default HTTP executor of the gateway.
"""

from typing_extensions import override

import httpx

from binance_gateway.errors import (
    BaseError,
    HttpConnectionError,
    TransportError,
    TransportTimeoutError,
)
from binance_gateway.executors.interface import HttpExecutor, HttpResponse
from binance_gateway.helpers import DEFAULT_API_URL, build_headers


class HttpxHttpExecutor(HttpExecutor):
    """HTTP executor implementation using httpx.

    Provides synchronous HTTP request execution using the httpx library.
    """

    @override
    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        api_key: str | None = None,
        add_default_headers: bool = True,
    ):
        """Initialize the HTTPX HTTP executor.

        Args:
            api_url: The base URL for the REST API. Defaults to DEFAULT_API_URL.
            api_key: Optional API key sent in the ``X-MBX-APIKEY`` header.
            add_default_headers: Whether to send the default headers with every call.

        """
        self.api_url = api_url
        self.api_key = api_key
        self.add_default_headers = add_default_headers
        self.client = httpx.Client()

    @override
    def send_request(self, method: str, path: str) -> HttpResponse:
        """Send a request to the API.

        Args:
            method: The HTTP method to use (e.g., 'GET', 'POST', 'PUT', 'DELETE').
            path: The API endpoint path and query (will be appended to api_url).

        Returns:
            HttpResponse containing the status code and raw response body.

        Raises:
            TransportTimeoutError: If the request times out.
            HttpConnectionError: If there is a connection or network error.
            TransportError: If any other transport-level error occurs.

        """
        url = f"{self.api_url}{path}"
        try:
            response = self.client.request(
                method,
                url,
                headers=build_headers(self.api_key, self.add_default_headers),
            )
        except BaseError:
            raise
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(
                f"{method} request to {url} timed out", timeout_seconds=None
            ) from e
        except httpx.NetworkError as e:
            raise HttpConnectionError(
                f"Network error during {method} request to {url}", url=url
            ) from e
        except Exception as e:
            raise TransportError(f"{method} request to {url} failed: {e}") from e
        return HttpResponse(
            status=response.status_code,
            content=response.content,
            headers=dict(response.headers),
        )

    def __del__(self) -> None:
        """Cleanup the httpx client when the executor is destroyed."""
        client = getattr(self, "client", None)
        if client is not None:
            client.close()
