"""HTTP API client for the Binance REST interface.

This module provides the BinanceApiClient class, which executes authenticated
and unauthenticated REST calls and classifies their outcome into a decoded
value or a typed error.
"""

import hmac
import logging
from hashlib import sha256
from time import time_ns
from typing import Any, Callable, TypeVar, overload

from binance_gateway.errors import (
    ApiError,
    BadGateway,
    BadRequest,
    Forbidden,
    GatewayTimeout,
    InternalServerError,
    MissingCredentialsError,
    NotFound,
    RateLimited,
    ServiceUnavailable,
    Unauthorized,
    ValidationError,
)
from binance_gateway.executors import DEFAULT_HTTP_EXECUTOR, HttpExecutor
from binance_gateway.executors.interface import HttpResponse
from binance_gateway.helpers import (
    DEFAULT_API_URL,
    decode_with,
    deserialize_response,
    parse_error_body,
)
from binance_gateway.types import (
    ApiMethod,
    Credentials,
    JsonValue,
    OrderBook,
    ServerTime,
    UserStreamInfo,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

_STATUS_ERRORS: dict[int, type[ApiError]] = {
    400: BadRequest,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    429: RateLimited,
    500: InternalServerError,
    502: BadGateway,
    503: ServiceUnavailable,
}


def raise_response_errors(response: HttpResponse) -> None:
    """Check HTTP response status and raise the matching error.

    A 504 raises GatewayTimeout without looking at the body. Every other
    non-2XX status raises an ApiError subclass carrying the ``code`` and
    ``msg`` parsed from the body, or ``0`` and ``""`` when they cannot be read.

    Args:
        response: The HTTP response to validate

    Raises:
        GatewayTimeout: For 504 status codes
        BadRequest: For 400 status codes
        Unauthorized: For 401 status codes
        Forbidden: For 403 status codes
        NotFound: For 404 status codes
        RateLimited: For 429 status codes
        InternalServerError: For 500 status codes
        BadGateway: For 502 status codes
        ServiceUnavailable: For 503 status codes
        ApiError: For any other non-2XX status code

    """
    status = response.status

    if response.is_success:
        return

    if status == 504:
        raise GatewayTimeout()

    code, message = parse_error_body(response.content)
    raise _STATUS_ERRORS.get(status, ApiError)(status, code, message)


def current_timestamp() -> int:
    """Milliseconds since the epoch from the local clock."""
    return time_ns() // 1_000_000


def generate_signature(api_secret: str, payload: str) -> str:
    """HMAC-SHA256 hex digest of ``payload`` keyed with ``api_secret``."""
    return hmac.new(api_secret.encode(), payload.encode(), sha256).hexdigest()


def sign_parameters(parameters: str, api_secret: str, timestamp: int) -> str:
    """Append ``timestamp`` and ``signature`` to a raw parameter string.

    The signature covers exactly ``parameters`` plus the appended timestamp
    pair, and is always the last pair of the result.

    Args:
        parameters: Caller supplied ``key=value&...`` text, possibly empty
        api_secret: Secret used as the HMAC key
        timestamp: Milliseconds since the epoch

    Returns:
        The signed parameter string

    """
    separator = "&" if parameters else ""
    payload = f"{parameters}{separator}timestamp={timestamp}"
    return f"{payload}&signature={generate_signature(api_secret, payload)}"


def build_request_path(endpoint: str, parameters: str) -> str:
    """Join an endpoint and its query string."""
    return f"{endpoint}?{parameters}" if parameters else endpoint


class BinanceApiClient:
    """Binance REST API client.

    Examples:
        .. code-block:: python

            from binance_gateway import BinanceApiClient, ApiMethod

            client = BinanceApiClient(api_key="your-key", api_secret="your-secret")

            server_time = client.get_server_time()
            account = client.call(ApiMethod.GET, "/api/v3/account", signed=True)
    """

    _http_executor: HttpExecutor

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        api_key: str | None = None,
        api_secret: str | None = None,
        executor: HttpExecutor | None = None,
        add_default_headers: bool = True,
    ):
        """Initialize the API client.

        Args:
            api_url: Base URL for the REST API (default: production URL)
            api_key: API key sent in the request headers (optional)
            api_secret: Secret used to sign requests (optional, required for signed calls)
            executor: Custom HTTP executor (optional, uses default if not provided)
            add_default_headers: Whether the default executor sends the default headers

        """
        if api_key is not None and not isinstance(api_key, str):
            raise ValidationError from TypeError(
                f"Invalid type for api_key: {type(api_key)}"
            )
        if api_secret is not None and not isinstance(api_secret, str):
            raise ValidationError from TypeError(
                f"Invalid type for api_secret: {type(api_secret)}"
            )

        self._credentials = Credentials(api_key=api_key, api_secret=api_secret)
        self._http_executor = (
            executor
            if executor is not None
            else DEFAULT_HTTP_EXECUTOR(
                api_url=api_url,
                api_key=api_key,
                add_default_headers=add_default_headers,
            )
        )

    @property
    def credentials(self) -> Credentials:
        """The immutable credentials of this client."""
        return self._credentials

    @overload
    def call(
        self,
        method: ApiMethod | str,
        endpoint: str,
        signed: bool = False,
        parameters: str | None = None,
        decoder: None = None,
    ) -> JsonValue: ...

    @overload
    def call(
        self,
        method: ApiMethod | str,
        endpoint: str,
        signed: bool = False,
        parameters: str | None = None,
        decoder: Callable[[Any], T] = ...,
    ) -> T: ...

    def call(
        self,
        method: ApiMethod | str,
        endpoint: str,
        signed: bool = False,
        parameters: str | None = None,
        decoder: Callable[[Any], T] | None = None,
    ) -> T | JsonValue:
        """Execute a REST call and decode its result.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: Endpoint path, e.g. ``/api/v3/order``
            signed: Whether to add a timestamp and signature to the parameters
            parameters: Raw ``key=value&...`` query text, used as given
            decoder: Callable turning the parsed JSON body into the result type.
                The parsed JSON is returned unchanged when omitted.

        Returns:
            The decoded response body

        Raises:
            ValidationError: If the method is not GET, POST, PUT or DELETE
            MissingCredentialsError: If a signed call is made without an API secret
            GatewayTimeout: If the server answers 504
            ApiError: If the server answers any other non-2XX status
            DeserializationError: If a 2XX body cannot be decoded
            TransportError: If the request cannot be transported

        """
        try:
            method = ApiMethod(method)
        except ValueError as e:
            raise ValidationError(f"Unsupported HTTP method {method!r}") from e
        parameters = parameters or ""

        if signed:
            if not self._credentials.api_secret:
                raise MissingCredentialsError("API secret")
            parameters = sign_parameters(
                parameters, self._credentials.api_secret, current_timestamp()
            )

        path = build_request_path(endpoint, parameters)
        log.debug("%s %s (signed=%s)", method.value, endpoint, signed)

        response = self._http_executor.send_request(method.value, path)
        raise_response_errors(response)

        body = deserialize_response(response.content, endpoint)
        if decoder is None:
            return body
        return decode_with(decoder, body, endpoint)

    """ Endpoint helpers """

    def ping(self) -> None:
        """Test connectivity to the REST API.

        Endpoint:
            GET /api/v1/ping

        """
        self.call(ApiMethod.GET, "/api/v1/ping")

    def get_server_time(self) -> ServerTime:
        """Get the server time.

        Endpoint:
            GET /api/v1/time

        """
        return self.call(ApiMethod.GET, "/api/v1/time", decoder=ServerTime.from_json)

    def get_order_book(self, symbol: str, limit: int = 100) -> OrderBook:
        """Get the order book of a symbol.

        Args:
            symbol: Trading pair, e.g. ``ETHBTC``
            limit: Number of levels per side

        Endpoint:
            GET /api/v1/depth

        """
        return self.call(
            ApiMethod.GET,
            "/api/v1/depth",
            parameters=f"symbol={symbol.upper()}&limit={limit}",
            decoder=OrderBook.from_json,
        )

    def start_user_stream(self) -> UserStreamInfo:
        """Open a user data stream and return its listen key.

        Endpoint:
            POST /api/v1/userDataStream

        """
        self.__require_api_key()
        return self.call(
            ApiMethod.POST, "/api/v1/userDataStream", decoder=UserStreamInfo.from_json
        )

    def keep_alive_user_stream(self, listen_key: str) -> None:
        """Extend the validity of a user data stream.

        Endpoint:
            PUT /api/v1/userDataStream

        """
        self.__require_api_key()
        self.call(
            ApiMethod.PUT, "/api/v1/userDataStream", parameters=f"listenKey={listen_key}"
        )

    def close_user_stream(self, listen_key: str) -> None:
        """Close a user data stream.

        Endpoint:
            DELETE /api/v1/userDataStream

        """
        self.__require_api_key()
        self.call(
            ApiMethod.DELETE,
            "/api/v1/userDataStream",
            parameters=f"listenKey={listen_key}",
        )

    """ Private helpers """

    def __require_api_key(self) -> None:
        if not self._credentials.api_key:
            raise MissingCredentialsError("API key")
