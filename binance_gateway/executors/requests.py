"""HTTP transport built on a requests Session."""

from typing_extensions import override

import requests

from binance_gateway.errors import (
    HttpConnectionError,
    TransportError,
    TransportTimeoutError,
)
from binance_gateway.executors.interface import HttpExecutor, HttpResponse
from binance_gateway.helpers import DEFAULT_API_URL, build_headers


class RequestsHttpExecutor(HttpExecutor):
    """Sends REST calls through one pooled ``requests.Session``.

    The default headers, including the API key, are set on the session once.
    requests has no default timeout, so calls are bounded by ``timeout``.
    """

    @override
    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        api_key: str | None = None,
        add_default_headers: bool = True,
        timeout: float | None = 10.0,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.add_default_headers = add_default_headers
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(build_headers(api_key, add_default_headers))

    @override
    def send_request(self, method: str, path: str) -> HttpResponse:
        """Send one call and return its raw response, whatever the status.

        Raises:
            TransportTimeoutError: If no response arrives within ``timeout``.
            HttpConnectionError: If the API cannot be reached.
            TransportError: If the call fails for any other transport reason.

        """
        url = self.api_url + path
        try:
            response = self.session.request(method, url, timeout=self.timeout)
        except requests.Timeout as e:
            raise TransportTimeoutError(
                f"{method} {url} got no response", timeout_seconds=self.timeout
            ) from e
        except requests.ConnectionError as e:
            raise HttpConnectionError(f"Could not reach API: {e}", url=url) from e
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        return HttpResponse(
            status=response.status_code,
            content=response.content,
            headers=dict(response.headers),
        )

    def __del__(self) -> None:
        session = getattr(self, "session", None)
        if session is not None:
            session.close()
