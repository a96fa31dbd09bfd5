"""Type definitions for the Binance gateway.

This module contains type aliases, enums, and dataclasses used throughout the
package, organized into logical sections for clarity.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    ClassVar,
    Protocol,
    Self,
    TypeAlias,
)

# ============================================================================
# TYPE ALIASES
# ============================================================================

SessionId: TypeAlias = str

# JSON type hierarchy
JsonObject: TypeAlias = dict[str, "JsonValue"]
JsonArray: TypeAlias = list["JsonValue"]
JsonValue: TypeAlias = None | bool | int | float | str | JsonObject | JsonArray
Json: TypeAlias = JsonObject

# Stream callbacks may be plain functions or coroutine functions
MessageHandler: TypeAlias = Callable[[Any], Awaitable[None] | None]
OpenHandler: TypeAlias = Callable[[SessionId], Awaitable[None] | None]
ErrorHandler: TypeAlias = Callable[[SessionId, Exception], Awaitable[None] | None]


def to_decimal(value: Any) -> Decimal:
    """Convert a wire number (usually a string) to Decimal without float rounding."""
    return Decimal(str(value))


class StreamMessage(Protocol):
    """Any schema that can be decoded from a stream frame."""

    @classmethod
    def from_json(cls, data: JsonObject) -> Self: ...


# ============================================================================
# CORE ENUMS
# ============================================================================


class ApiMethod(Enum):
    """HTTP methods accepted by the REST API."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class KlineInterval(Enum):
    """Candlestick intervals for kline streams."""

    ONE_MINUTE = "1m"
    THREE_MINUTES = "3m"
    FIVE_MINUTES = "5m"
    FIFTEEN_MINUTES = "15m"
    THIRTY_MINUTES = "30m"
    ONE_HOUR = "1h"
    TWO_HOURS = "2h"
    FOUR_HOURS = "4h"
    SIX_HOURS = "6h"
    EIGHT_HOURS = "8h"
    TWELVE_HOURS = "12h"
    ONE_DAY = "1d"
    THREE_DAYS = "3d"
    ONE_WEEK = "1w"
    ONE_MONTH = "1M"


class SessionState(Enum):
    """Lifecycle states of a stream session."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class UserDataEventKind(Enum):
    """Routing outcome of a user-data stream frame."""

    ACCOUNT = "account"
    TRADE = "trade"
    ORDER = "order"


# ============================================================================
# CREDENTIALS
# ============================================================================


@dataclass(frozen=True)
class Credentials:
    """API key and secret used for authenticated calls.

    The secret is only ever used as an HMAC key and is excluded from ``repr``.
    """

    api_key: str | None = None
    api_secret: str | None = field(default=None, repr=False)


# ============================================================================
# REST RESPONSES
# ============================================================================


@dataclass
class ServerTime:
    serverTime: int

    @classmethod
    def from_json(cls, data: JsonObject) -> Self:
        return cls(serverTime=int(data["serverTime"]))  # type: ignore


@dataclass
class UserStreamInfo:
    listenKey: str

    @classmethod
    def from_json(cls, data: JsonObject) -> Self:
        return cls(listenKey=str(data["listenKey"]))


@dataclass
class OrderBookOffer:
    """A single price level of an order book."""

    price: Decimal
    quantity: Decimal

    @classmethod
    def from_level(cls, level: JsonValue) -> Self:
        """Build an offer from a ``[price, quantity, ...]`` wire level."""
        if not isinstance(level, list) or len(level) < 2:
            raise ValueError(f"Invalid order book level {level!r}")
        return cls(price=to_decimal(level[0]), quantity=to_decimal(level[1]))


@dataclass
class OrderBook:
    lastUpdateId: int
    bids: list[OrderBookOffer]
    asks: list[OrderBookOffer]

    @classmethod
    def from_json(cls, data: JsonObject) -> Self:
        return cls(
            lastUpdateId=int(data["lastUpdateId"]),  # type: ignore
            bids=[OrderBookOffer.from_level(level) for level in data["bids"]],  # type: ignore
            asks=[OrderBookOffer.from_level(level) for level in data["asks"]],  # type: ignore
        )


# ============================================================================
# MARKET STREAM MESSAGES
# ============================================================================


@dataclass
class DepthMessage:
    """Normalised depth update produced by the depth parser."""

    event_type: str
    event_time: int
    symbol: str
    update_id: int
    bids: list[OrderBookOffer]
    asks: list[OrderBookOffer]
    first_update_id: int | None = None


@dataclass
class Kline:
    start_time: int
    end_time: int
    symbol: str
    interval: str
    first_trade_id: int
    last_trade_id: int
    open: Decimal
    close: Decimal
    high: Decimal
    low: Decimal
    volume: Decimal
    number_of_trades: int
    is_final: bool
    quote_volume: Decimal
    active_buy_volume: Decimal
    active_buy_quote_volume: Decimal

    @classmethod
    def from_json(cls, data: JsonObject) -> Self:
        return cls(
            start_time=int(data["t"]),  # type: ignore
            end_time=int(data["T"]),  # type: ignore
            symbol=str(data["s"]),
            interval=str(data["i"]),
            first_trade_id=int(data["f"]),  # type: ignore
            last_trade_id=int(data["L"]),  # type: ignore
            open=to_decimal(data["o"]),
            close=to_decimal(data["c"]),
            high=to_decimal(data["h"]),
            low=to_decimal(data["l"]),
            volume=to_decimal(data["v"]),
            number_of_trades=int(data["n"]),  # type: ignore
            is_final=bool(data["x"]),
            quote_volume=to_decimal(data["q"]),
            active_buy_volume=to_decimal(data["V"]),
            active_buy_quote_volume=to_decimal(data["Q"]),
        )


@dataclass
class KlineMessage:
    event_type: str
    event_time: int
    symbol: str
    kline: Kline

    @classmethod
    def from_json(cls, data: JsonObject) -> Self:
        kline = data["k"]
        if not isinstance(kline, dict):
            raise TypeError(f"Expected kline object, got {type(kline)}")
        return cls(
            event_type=str(data["e"]),
            event_time=int(data["E"]),  # type: ignore
            symbol=str(data["s"]),
            kline=Kline.from_json(kline),
        )


@dataclass
class AggregateTradeMessage:
    event_type: str
    event_time: int
    symbol: str
    aggregate_trade_id: int
    price: Decimal
    quantity: Decimal
    first_break_trade_id: int
    last_break_trade_id: int
    trade_time: int
    buyer_is_maker: bool

    @classmethod
    def from_json(cls, data: JsonObject) -> Self:
        return cls(
            event_type=str(data["e"]),
            event_time=int(data["E"]),  # type: ignore
            symbol=str(data["s"]),
            aggregate_trade_id=int(data["a"]),  # type: ignore
            price=to_decimal(data["p"]),
            quantity=to_decimal(data["q"]),
            first_break_trade_id=int(data["f"]),  # type: ignore
            last_break_trade_id=int(data["l"]),  # type: ignore
            trade_time=int(data["T"]),  # type: ignore
            buyer_is_maker=bool(data["m"]),
        )


# ============================================================================
# USER DATA STREAM MESSAGES
# ============================================================================


@dataclass
class Balance:
    asset: str
    free: Decimal
    locked: Decimal

    @classmethod
    def from_json(cls, data: JsonObject) -> Self:
        return cls(
            asset=str(data["a"]),
            free=to_decimal(data["f"]),
            locked=to_decimal(data["l"]),
        )


@dataclass
class AccountUpdatedMessage:
    """Payload of an ``outboundAccountInfo`` event."""

    event_type: str
    event_time: int
    maker_commission: int
    taker_commission: int
    buyer_commission: int
    seller_commission: int
    can_trade: bool
    can_withdraw: bool
    can_deposit: bool
    balances: list[Balance]

    @classmethod
    def from_json(cls, data: JsonObject) -> Self:
        balances = data["B"]
        if not isinstance(balances, list):
            raise TypeError(f"Expected balance list, got {type(balances)}")
        return cls(
            event_type=str(data["e"]),
            event_time=int(data["E"]),  # type: ignore
            maker_commission=int(data["m"]),  # type: ignore
            taker_commission=int(data["t"]),  # type: ignore
            buyer_commission=int(data["b"]),  # type: ignore
            seller_commission=int(data["s"]),  # type: ignore
            can_trade=bool(data["T"]),
            can_withdraw=bool(data["W"]),
            can_deposit=bool(data["D"]),
            balances=[Balance.from_json(b) for b in balances],  # type: ignore
        )


@dataclass
class OrderOrTradeUpdatedMessage:
    """Payload of an ``executionReport`` event.

    The same schema describes both order state changes and trade fills; the
    ``execution_type`` field tells them apart.
    """

    event_type: str
    event_time: int
    symbol: str
    new_client_order_id: str
    side: str
    order_type: str
    time_in_force: str
    original_quantity: Decimal
    price: Decimal
    execution_type: str
    order_status: str
    reject_reason: str
    order_id: int
    last_filled_quantity: Decimal
    accumulated_quantity_of_filled_trades: Decimal
    price_of_last_filled_trade: Decimal
    commission: Decimal
    commission_asset: str | None
    trade_time: int
    trade_id: int
    is_maker: bool

    @classmethod
    def from_json(cls, data: JsonObject) -> Self:
        commission_asset = data.get("N")
        return cls(
            event_type=str(data["e"]),
            event_time=int(data["E"]),  # type: ignore
            symbol=str(data["s"]),
            new_client_order_id=str(data["c"]),
            side=str(data["S"]),
            order_type=str(data["o"]),
            time_in_force=str(data["f"]),
            original_quantity=to_decimal(data["q"]),
            price=to_decimal(data["p"]),
            execution_type=str(data["x"]),
            order_status=str(data["X"]),
            reject_reason=str(data["r"]),
            order_id=int(data["i"]),  # type: ignore
            last_filled_quantity=to_decimal(data["l"]),
            accumulated_quantity_of_filled_trades=to_decimal(data["z"]),
            price_of_last_filled_trade=to_decimal(data["L"]),
            commission=to_decimal(data["n"]),
            commission_asset=None if commission_asset is None else str(commission_asset),
            trade_time=int(data["T"]),  # type: ignore
            trade_id=int(data["t"]),  # type: ignore
            is_maker=bool(data["m"]),
        )


@dataclass
class UserDataEnvelope:
    """Minimal view of a user-data frame exposing only its discriminators."""

    ACCOUNT_EVENT: ClassVar[str] = "outboundAccountInfo"
    EXECUTION_EVENT: ClassVar[str] = "executionReport"

    event_type: str | None
    execution_type: str | None = None

    @classmethod
    def from_json(cls, data: JsonObject) -> Self:
        event_type = data.get("e")
        execution_type = data.get("x")
        return cls(
            event_type=event_type if isinstance(event_type, str) else None,
            execution_type=(
                execution_type if isinstance(execution_type, str) else None
            ),
        )

    @property
    def kind(self) -> UserDataEventKind | None:
        """Select the handler for this frame, or None when the event is not routed."""
        if self.event_type == self.ACCOUNT_EVENT:
            return UserDataEventKind.ACCOUNT
        if self.event_type == self.EXECUTION_EVENT:
            if self.execution_type is not None and self.execution_type.lower() == "trade":
                return UserDataEventKind.TRADE
            return UserDataEventKind.ORDER
        return None


@dataclass
class UserDataEvent:
    """A fully decoded user-data frame tagged with its routing kind."""

    kind: UserDataEventKind
    message: AccountUpdatedMessage | OrderOrTradeUpdatedMessage
