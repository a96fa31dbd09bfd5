"""Helper utilities for the Binance gateway.

This module contains utility functions for serialization, deserialization,
stream frame normalisation, request headers, and display formatting.
"""

import inspect
import logging
from dataclasses import asdict, is_dataclass
from functools import lru_cache
from typing import Any, Callable, TypeVar

import orjson
from prettyprinter import cpprint

from binance_gateway.errors import DeserializationError
from binance_gateway.types import (
    AccountUpdatedMessage,
    DepthMessage,
    JsonValue,
    OrderBookOffer,
    OrderOrTradeUpdatedMessage,
    UserDataEnvelope,
    UserDataEvent,
    UserDataEventKind,
)

log = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_API_URL: str = "https://www.binance.com"
DEFAULT_STREAM_URL: str = "wss://stream.binance.com:9443/ws/"

API_KEY_HEADER: str = "X-MBX-APIKEY"


# ============================================================================
# CLIENT IDENTIFICATION
# ============================================================================


@lru_cache(maxsize=1)
def get_client_identifier() -> str:
    """Get the client identification string sent with REST calls."""
    import binance_gateway

    return f"BinanceGatewayPython/{binance_gateway.__version__}"


def build_headers(api_key: str | None, add_default_headers: bool = True) -> dict[str, str]:
    """Build the headers sent with every REST call.

    Args:
        api_key: API key placed in the ``X-MBX-APIKEY`` header when set.
        add_default_headers: When False no headers are added at all.

    Returns:
        The header mapping for the request.

    """
    if not add_default_headers:
        return {}
    headers = {
        "Accept": "application/json",
        "User-Agent": get_client_identifier(),
    }
    if api_key:
        headers[API_KEY_HEADER] = api_key
    return headers


# ============================================================================
# SERIALIZATION / DESERIALIZATION
# ============================================================================

T = TypeVar("T")


def deserialize_response(response_body: bytes, url: str) -> JsonValue:
    """Deserialize a JSON response body.

    An empty body decodes to an empty object.

    Args:
        response_body: Response bytes to deserialize
        url: URL that was requested (for error messages)

    Returns:
        Deserialized JSON value

    Raises:
        DeserializationError: If deserialization fails

    """
    if not response_body:
        return {}
    try:
        return orjson.loads(response_body)  # type: ignore
    except Exception as e:
        raise DeserializationError(
            f"Failed to parse JSON response from {url}: {e}"
        ) from e


def deserialize_frame(frame: str | bytes) -> JsonValue:
    """Deserialize a single stream frame.

    Raises:
        DeserializationError: If the frame is not valid JSON

    """
    try:
        return orjson.loads(frame)  # type: ignore
    except Exception as e:
        raise DeserializationError(f"Failed to parse stream frame: {e}") from e


def decode_with(decoder: Callable[[Any], T], data: JsonValue, source: str) -> T:
    """Apply a schema decoder, reporting schema mismatches as DeserializationError.

    Args:
        decoder: Callable turning parsed JSON into the target type
        data: Parsed JSON value
        source: Where the value came from, for error messages

    Raises:
        DeserializationError: If the value does not match the schema

    """
    try:
        return decoder(data)
    except DeserializationError:
        raise
    except (TypeError, KeyError, ValueError, ArithmeticError) as e:
        raise DeserializationError(
            f"Received invalid response from {source}: {data!r}"
        ) from e


def parse_error_body(response_body: bytes) -> tuple[int, str]:
    """Extract ``code`` and ``msg`` from an error body on a best-effort basis.

    Any failure, including a body that is not JSON at all, yields ``(0, "")``.
    """
    try:
        body = orjson.loads(response_body)
    except orjson.JSONDecodeError:
        return 0, ""
    if not isinstance(body, dict):
        return 0, ""

    code = body.get("code")
    message = body.get("msg")
    try:
        code = int(code) if code is not None and not isinstance(code, bool) else 0
    except (TypeError, ValueError):
        code = 0
    return code, message if isinstance(message, str) else ""


# ============================================================================
# STREAM FRAME NORMALISATION
# ============================================================================


def parse_depth_message(data: JsonValue) -> DepthMessage:
    """Reshape a raw depth update into a DepthMessage.

    The wire format nests each price level as ``[price, quantity, []]`` under
    the ``b`` (bids) and ``a`` (asks) keys, with single letter header fields.

    Raises:
        TypeError: If the frame is not an object or levels are not lists
        KeyError: If a required field is missing
        ValueError: If a price level is malformed

    """
    if not isinstance(data, dict):
        raise TypeError(f"Depth frame must be an object, got {type(data)}")
    bids = data["b"]
    asks = data["a"]
    if not isinstance(bids, list) or not isinstance(asks, list):
        raise TypeError("Depth frame levels must be lists")

    first_update_id = data.get("U")
    return DepthMessage(
        event_type=str(data["e"]),
        event_time=int(data["E"]),  # type: ignore
        symbol=str(data["s"]),
        update_id=int(data["u"]),  # type: ignore
        bids=[OrderBookOffer.from_level(level) for level in bids],
        asks=[OrderBookOffer.from_level(level) for level in asks],
        first_update_id=None if first_update_id is None else int(first_update_id),  # type: ignore
    )


def decode_user_data_event(data: JsonValue) -> UserDataEvent | None:
    """Decode a user-data frame in two phases.

    The frame is first read as a UserDataEnvelope to find its kind, then decoded
    into the schema for that kind. Frames of any other event type return None.

    Raises:
        TypeError: If the frame is not an object
        KeyError: If the selected schema is missing a field

    """
    if not isinstance(data, dict):
        raise TypeError(f"User data frame must be an object, got {type(data)}")

    kind = UserDataEnvelope.from_json(data).kind
    if kind is None:
        return None
    if kind is UserDataEventKind.ACCOUNT:
        return UserDataEvent(kind, AccountUpdatedMessage.from_json(data))
    return UserDataEvent(kind, OrderOrTradeUpdatedMessage.from_json(data))


# ============================================================================
# DISPLAY UTILITIES
# ============================================================================


def print_data(response: Any) -> None:
    """Pretty-print response data, handling dataclasses specially.

    Dataclass instances are converted to dictionaries before printing
    for better formatting.

    Args:
        response: Data to print

    """
    if is_dataclass(response) and not isinstance(response, type):
        cpprint(asdict(response))
    else:
        cpprint(response)


# ============================================================================
# CALLBACKS
# ============================================================================


async def invoke_callback(callback: Callable[..., Any], *args: Any) -> None:
    """Call a plain or coroutine function, awaiting the result when needed."""
    result = callback(*args)
    if inspect.isawaitable(result):
        await result
