"""Client-side gateway to the Binance REST and streaming interfaces."""

from importlib.metadata import PackageNotFoundError, version

from binance_gateway.api import BinanceApiClient
from binance_gateway.api_ws_stream import BinanceWSStreamClient
from binance_gateway.errors import (
    ApiError,
    BaseError,
    DeserializationError,
    ExchangeError,
    GatewayTimeout,
    MissingCredentialsError,
    TransportError,
    TransportTimeoutError,
    ValidationError,
)
from binance_gateway.registry import SessionRegistry
from binance_gateway.session import StreamSession
from binance_gateway.types import (
    AccountUpdatedMessage,
    AggregateTradeMessage,
    ApiMethod,
    Balance,
    Credentials,
    DepthMessage,
    KlineInterval,
    KlineMessage,
    OrderBook,
    OrderBookOffer,
    OrderOrTradeUpdatedMessage,
    ServerTime,
    SessionState,
    UserDataEventKind,
    UserStreamInfo,
)

try:
    __version__ = version("binance-gateway")
except PackageNotFoundError:
    __version__ = "unknown"


def get_version() -> str:
    """Return the installed version of the package."""
    return __version__


__all__ = [
    "AccountUpdatedMessage",
    "AggregateTradeMessage",
    "ApiError",
    "ApiMethod",
    "Balance",
    "BaseError",
    "BinanceApiClient",
    "BinanceWSStreamClient",
    "Credentials",
    "DepthMessage",
    "DeserializationError",
    "ExchangeError",
    "GatewayTimeout",
    "KlineInterval",
    "KlineMessage",
    "MissingCredentialsError",
    "OrderBook",
    "OrderBookOffer",
    "OrderOrTradeUpdatedMessage",
    "ServerTime",
    "SessionRegistry",
    "SessionState",
    "StreamSession",
    "TransportError",
    "TransportTimeoutError",
    "UserDataEventKind",
    "UserStreamInfo",
    "ValidationError",
    "get_version",
]
