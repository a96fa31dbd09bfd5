from decimal import Decimal

import pytest

from binance_gateway.errors import DeserializationError
from binance_gateway.helpers import (
    API_KEY_HEADER,
    build_headers,
    decode_user_data_event,
    decode_with,
    deserialize_frame,
    deserialize_response,
    get_client_identifier,
    invoke_callback,
    parse_depth_message,
    parse_error_body,
    print_data,
)
from binance_gateway.types import (
    AccountUpdatedMessage,
    OrderBookOffer,
    ServerTime,
    UserDataEventKind,
)
from tests.unit.conftest import load_json


def test_build_headers():
    headers = build_headers("my-key")
    assert headers[API_KEY_HEADER] == "my-key"
    assert headers["Accept"] == "application/json"
    assert headers["User-Agent"] == get_client_identifier()
    assert get_client_identifier().startswith("BinanceGatewayPython/")

    assert API_KEY_HEADER not in build_headers(None)
    assert API_KEY_HEADER not in build_headers("")
    assert build_headers("my-key", add_default_headers=False) == {}


def test_deserialize_response():
    assert deserialize_response(b'{"a": [1, 2]}', "/x") == {"a": [1, 2]}
    assert deserialize_response(b"", "/x") == {}

    with pytest.raises(DeserializationError) as exc_info:
        deserialize_response(b"{oops", "/api/v1/time")
    assert "/api/v1/time" in str(exc_info.value)


def test_deserialize_frame():
    assert deserialize_frame('{"e": "x"}') == {"e": "x"}
    with pytest.raises(DeserializationError):
        deserialize_frame("")


def test_decode_with_wraps_schema_errors():
    assert decode_with(ServerTime.from_json, {"serverTime": "12"}, "/t") == ServerTime(12)

    for bad in ({}, {"serverTime": "abc"}, {"serverTime": None}):
        with pytest.raises(DeserializationError) as exc_info:
            decode_with(ServerTime.from_json, bad, "/api/v1/time")
        assert "Received invalid response from /api/v1/time" in str(exc_info.value)


@pytest.mark.parametrize(
    "body, expected",
    [
        (b'{"code": -1121, "msg": "Invalid symbol."}', (-1121, "Invalid symbol.")),
        (b'{"code": "-1013", "msg": "Filter failure"}', (-1013, "Filter failure")),
        (b'{"code": true, "msg": 5}', (0, "")),
        (b'{"code": "x"}', (0, "")),
        (b"{}", (0, "")),
        (b"null", (0, "")),
        (b"", (0, "")),
        (b"\xff\xfe", (0, "")),
        (b"<html></html>", (0, "")),
    ],
)
def test_parse_error_body(body, expected):
    assert parse_error_body(body) == expected


def test_parse_depth_message_levels():
    message = parse_depth_message(load_json("stream.depth"))

    assert message.symbol == "ETHBTC"
    assert message.first_update_id == 7913452
    assert message.update_id == 7913455
    assert message.bids[0] == OrderBookOffer(Decimal("0.10376590"), Decimal("59.15767010"))
    assert len(message.asks) == 1


def test_parse_depth_message_without_first_update_id():
    data = load_json("stream.depth")
    del data["U"]
    assert parse_depth_message(data).first_update_id is None


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("b"),
        lambda d: d.update(a="not a list"),
        lambda d: d.update(b=[["1.0"]]),
        lambda d: d.update(b=[["abc", "1.0", []]]),
    ],
)
def test_parse_depth_message_rejects_malformed_frames(mutate):
    data = load_json("stream.depth")
    mutate(data)

    with pytest.raises(DeserializationError):
        decode_with(parse_depth_message, data, "ethbtc@depth")


def test_decode_user_data_event():
    event = decode_user_data_event(load_json("stream.account_info"))
    assert event is not None
    assert event.kind is UserDataEventKind.ACCOUNT
    assert isinstance(event.message, AccountUpdatedMessage)

    assert decode_user_data_event({"e": "listStatus"}) is None

    with pytest.raises(TypeError):
        decode_user_data_event([1, 2])


def test_print_data_handles_dataclasses(capsys):
    print_data(ServerTime(serverTime=1499827319559))
    print_data({"listenKey": "abc"})

    out = capsys.readouterr().out
    assert "serverTime" in out
    assert "1499827319559" in out
    assert "listenKey" in out


@pytest.mark.asyncio
async def test_invoke_callback_sync_and_async():
    calls: list[tuple] = []

    def sync_cb(*args) -> None:
        calls.append(("sync", args))

    async def async_cb(*args) -> None:
        calls.append(("async", args))

    await invoke_callback(sync_cb, 1, 2)
    await invoke_callback(async_cb, "a")

    assert calls == [("sync", (1, 2)), ("async", ("a",))]
