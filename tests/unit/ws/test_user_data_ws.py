import asyncio
from decimal import Decimal

import orjson
import pytest

from binance_gateway.api_ws_stream import BinanceWSStreamClient
from binance_gateway.types import (
    AccountUpdatedMessage,
    Balance,
    OrderOrTradeUpdatedMessage,
    UserDataEnvelope,
    UserDataEventKind,
)
from tests.mock_executors import MockSuccessfulOutput, MockWsHarness
from tests.unit.conftest import load_frame, load_json, wait_for_predicate

LISTEN_KEY = "pqia91ma19a5s61cv6a81va65sdf19v8a65a1a5s61cv6a81va65sdf19v8a65a1"


def execution_report(**overrides) -> str:
    data = load_json("stream.execution_report")
    data.update(overrides)
    return orjson.dumps(data).decode()


class Recorder:
    """Collects routed messages as (handler name, message) pairs."""

    def __init__(self):
        self.received: asyncio.Queue[tuple[str, object]] = asyncio.Queue()

    def account(self, msg: AccountUpdatedMessage) -> None:
        self.received.put_nowait(("account", msg))

    async def trade(self, msg: OrderOrTradeUpdatedMessage) -> None:
        await self.received.put(("trade", msg))

    def order(self, msg: OrderOrTradeUpdatedMessage) -> None:
        self.received.put_nowait(("order", msg))

    async def next(self) -> tuple[str, object]:
        return await asyncio.wait_for(self.received.get(), 5)


async def open_user_stream():
    harness = MockWsHarness()
    client = BinanceWSStreamClient(stream_url="wss://stream.test/ws/", executor=harness.executor)
    recorder = Recorder()

    stream_id = client.listen_user_data(
        LISTEN_KEY, recorder.account, recorder.trade, recorder.order
    )
    await wait_for_predicate(lambda: stream_id in client.registry, 5)
    assert harness.connections[0].url == "wss://stream.test/ws/" + LISTEN_KEY
    return client, harness.connections[0], recorder


@pytest.mark.asyncio
async def test_account_update_routing():
    client, connection, recorder = await open_user_stream()

    connection.stage_recv(MockSuccessfulOutput(load_frame("stream.account_info")))
    name, msg = await recorder.next()

    assert name == "account"
    assert isinstance(msg, AccountUpdatedMessage)
    assert msg.can_trade is True
    assert msg.balances == [
        Balance("LTC", Decimal("17366.18538083"), Decimal("0.00000000")),
        Balance("BTC", Decimal("10537.85314051"), Decimal("2.19464093")),
    ]

    await client.disconnect()


@pytest.mark.asyncio
async def test_new_order_routes_to_order_handler():
    client, connection, recorder = await open_user_stream()

    connection.stage_recv(MockSuccessfulOutput(load_frame("stream.execution_report")))
    name, msg = await recorder.next()

    assert name == "order"
    assert isinstance(msg, OrderOrTradeUpdatedMessage)
    assert msg.execution_type == "NEW"
    assert msg.order_id == 4293153
    assert msg.symbol == "ETHBTC"
    assert msg.commission_asset is None

    await client.disconnect()


@pytest.mark.asyncio
@pytest.mark.parametrize("execution_type", ["TRADE", "trade", "Trade"])
async def test_trade_routes_to_trade_handler(execution_type):
    client, connection, recorder = await open_user_stream()

    connection.stage_recv(
        MockSuccessfulOutput(
            execution_report(x=execution_type, X="FILLED", N="BNB", t=12)
        )
    )
    name, msg = await recorder.next()

    assert name == "trade"
    assert msg.execution_type == execution_type
    assert msg.trade_id == 12
    assert msg.commission_asset == "BNB"

    await client.disconnect()


@pytest.mark.asyncio
@pytest.mark.parametrize("execution_type", ["CANCELED", "REJECTED", "EXPIRED", "REPLACED"])
async def test_other_execution_types_route_to_order_handler(execution_type):
    client, connection, recorder = await open_user_stream()

    connection.stage_recv(MockSuccessfulOutput(execution_report(x=execution_type)))
    name, _ = await recorder.next()

    assert name == "order"
    await client.disconnect()


@pytest.mark.asyncio
async def test_unknown_events_are_dropped():
    client, connection, recorder = await open_user_stream()

    connection.stage_recv(
        [
            MockSuccessfulOutput('{"e": "balanceUpdate", "E": 1}'),
            MockSuccessfulOutput('{"E": 1}'),
            MockSuccessfulOutput(execution_report(x="TRADE")),
        ]
    )

    # frames are handled in order, so the trade arriving first proves the others were dropped
    name, _ = await recorder.next()
    assert name == "trade"
    assert recorder.received.empty()
    assert client.get_state(client.registry.ids()[0]) is not None

    await client.disconnect()


@pytest.mark.asyncio
async def test_mixed_user_data_sequence_keeps_order():
    client, connection, recorder = await open_user_stream()

    connection.stage_recv(
        [
            MockSuccessfulOutput(execution_report(x="NEW")),
            MockSuccessfulOutput(execution_report(x="TRADE")),
            MockSuccessfulOutput(load_frame("stream.account_info")),
        ]
    )

    assert [(await recorder.next())[0] for _ in range(3)] == ["order", "trade", "account"]
    await client.disconnect()


@pytest.mark.parametrize(
    "frame, expected",
    [
        ({"e": "outboundAccountInfo"}, UserDataEventKind.ACCOUNT),
        ({"e": "executionReport", "x": "TRADE"}, UserDataEventKind.TRADE),
        ({"e": "executionReport", "x": "tRaDe"}, UserDataEventKind.TRADE),
        ({"e": "executionReport", "x": "NEW"}, UserDataEventKind.ORDER),
        ({"e": "executionReport"}, UserDataEventKind.ORDER),
        ({"e": "balanceUpdate", "x": "TRADE"}, None),
        ({}, None),
    ],
)
def test_envelope_kind(frame, expected):
    assert UserDataEnvelope.from_json(frame).kind is expected
