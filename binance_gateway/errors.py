"""Exception hierarchy for the Binance gateway.

This module defines the public exception hierarchy for the entire package. All
exceptions raised by this library inherit from BaseError.

Exception Hierarchy
-------------------
BaseError
├── ExchangeError - API server returned an error response
├── TransportError - Network/protocol-level errors during transmission
└── ValidationError - Client-side input validation failures
"""


class BaseError(Exception):
    """Base exception for all gateway errors.

    All exceptions raised by this library inherit from this class, allowing users
    to catch all gateway-related errors with a single except clause.

    This exception should not be raised directly. Use one of the specific subclasses
    instead (ExchangeError, TransportError, ValidationError).
    """

    pass


# ============================================================================
# EXCHANGE ERROR
# ============================================================================


class ExchangeError(BaseError):
    """Exception raised when the API server returns an error response.

    ExchangeError indicates that:
    - The network connection succeeded
    - The request was properly formatted and transmitted
    - A server processed the request and returned an error response
    """

    pass


class ApiError(ExchangeError):
    """Raised when response status from the exchange is not 2XX.

    The ``code`` and ``message`` fields are extracted on a best-effort basis
    from the ``code`` and ``msg`` members of the response body. They default
    to ``0`` and ``""`` when the body is missing or is not a JSON object.
    """

    status_code: int
    code: int
    message: str

    def __init__(self, status_code: int, code: int = 0, message: str = ""):
        """Initialize an ApiError.

        Args:
            status_code: The HTTP status code returned by the server.
            code: The exchange error code, 0 if unavailable.
            message: The exchange error message, empty if unavailable.

        """
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"Api Error Code: {code} Message: {message}")


## 4xx status errors


class BadRequest(ApiError):
    """Raised when the server returns a 400 Bad Request error."""

    pass


class Unauthorized(ApiError):
    """Raised when the server returns a 401 Unauthorized error."""

    pass


class Forbidden(ApiError):
    """Raised when the server returns a 403 Forbidden error."""

    pass


class NotFound(ApiError):
    """Raised when the server returns a 404 Not Found error."""

    pass


class RateLimited(ApiError):
    """Raised when the server returns a 429 Rate Limited error."""

    pass


## 5xx status errors - unexpected - should be reported


class InternalServerError(ApiError):
    """Raised when the server returns a 500 Internal Server Error."""

    pass


class BadGateway(ApiError):
    """Raised when the server returns a 502 Bad Gateway error."""

    pass


class ServiceUnavailable(ApiError):
    """Raised when the server returns a 503 Service Unavailable error."""

    pass


# ============================================================================
# TRANSPORT ERROR
# ============================================================================


class TransportError(BaseError):
    """Exception raised for errors in the process of transporting data to/from the API server.

    TransportError indicates that:
    - The error occurred in the process of transporting data
    - Valid application-level data was not successfully exchanged
    - The error could be transient and may succeed on a caller-initiated retry

    Common causes include:
    - DNS resolution failures and refused or dropped connections
    - Connection and read timeouts
    - WebSocket connection drops
    - Deserialization failures (malformed or corrupt data)
    """

    pass


class HttpConnectionError(TransportError):
    """Raised when a connection cannot be established or is lost."""

    def __init__(self, message: str, url: str | None = None):
        """Initialize an HttpConnectionError.

        Args:
            message: Description of the connection error.
            url: The URL that failed to connect, if available.

        """
        self.message = message
        self.url = url
        if url:
            super().__init__(f"{message} (url: {url})")
        else:
            super().__init__(message)


class TransportTimeoutError(TransportError):
    """Raised when a request or connection times out."""

    def __init__(self, message: str, timeout_seconds: float | None = None):
        """Initialize a TransportTimeoutError.

        Args:
            message: Description of the timeout error.
            timeout_seconds: The timeout duration in seconds, if available.

        """
        self.message = message
        self.timeout_seconds = timeout_seconds
        if timeout_seconds:
            super().__init__(f"{message} (timeout: {timeout_seconds}s)")
        else:
            super().__init__(message)


class GatewayTimeout(TransportTimeoutError):
    """Raised when the server returns a 504 Gateway Timeout.

    The response body is never inspected for this status.
    """

    status_code: int = 504

    def __init__(self, message: str = "Api Request Timeout."):
        """Initialize a GatewayTimeout error.

        Args:
            message: Description of the timeout.

        """
        super().__init__(message)


class WebSocketConnectionError(TransportError):
    """Raised when WebSocket connection fails or is closed unexpectedly."""

    def __init__(self, message: str, url: str | None = None):
        """Initialize a WebSocketConnectionError.

        Args:
            message: Description of the WebSocket connection error.
            url: The WebSocket URL that failed to connect, if available.

        """
        self.message = message
        self.url = url
        if url:
            super().__init__(f"{message} (url: {url})")
        else:
            super().__init__(message)


class WebSocketMessageError(TransportError):
    """Raised when there's an error processing a WebSocket message."""

    def __init__(self, message: str):
        """Initialize a WebSocketMessageError.

        Args:
            message: Description of the WebSocket message processing error.

        """
        self.message = message
        super().__init__(message)


class DeserializationError(TransportError):
    """Raised when response data cannot be deserialized/decoded."""

    def __init__(self, message: str):
        """Initialize a DeserializationError.

        Args:
            message: Description of the deserialization error.

        """
        self.message = message
        super().__init__(message)


# ============================================================================
# VALIDATION ERROR
# ============================================================================


class ValidationError(BaseError):
    """Exception raised for client-side input validation failures.

    ValidationError indicates that:
    - No network request was attempted
    - The error is due to invalid input from the caller
    - The error can be fixed by correcting the input parameters
    """

    pass


class MissingCredentialsError(ValidationError):
    """Raised when required authentication credentials are missing."""

    def __init__(self, credential_type: str = "API key"):
        """Initialize a MissingCredentialsError.

        Args:
            credential_type: The type of credential that is missing (default: "API key").

        """
        self.credential_type = credential_type
        super().__init__(f"{credential_type} is not set")


class SessionStateError(ValidationError):
    """Raised when a stream session is driven through an illegal lifecycle transition."""

    def __init__(self, session_id: str, current: str, requested: str):
        """Initialize a SessionStateError.

        Args:
            session_id: Identifier of the offending session.
            current: Name of the state the session is in.
            requested: Name of the state that was requested.

        """
        self.session_id = session_id
        super().__init__(
            f"Session {session_id} cannot move from {current} to {requested}"
        )
