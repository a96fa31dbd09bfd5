import pytest

from binance_gateway.errors import (
    ApiError,
    BadGateway,
    BadRequest,
    ExchangeError,
    Forbidden,
    GatewayTimeout,
    HttpConnectionError,
    InternalServerError,
    NotFound,
    RateLimited,
    ServiceUnavailable,
    TransportTimeoutError,
    Unauthorized,
)
from binance_gateway.executors.interface import HttpResponse
from binance_gateway.types import ApiMethod
from tests.mock_executors import MockExceptionOutput, MockSuccessfulOutput


def test_gateway_timeout_never_reads_body(mock_http_client, monkeypatch):
    client, mock_http = mock_http_client

    def fail(_body: bytes) -> tuple[int, str]:
        raise AssertionError("body must not be parsed")

    monkeypatch.setattr("binance_gateway.api.parse_error_body", fail)
    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(status=504, content=b'{"code":-1007,"msg":"Timeout"}')
        )
    )

    with pytest.raises(TransportTimeoutError) as exc_info:
        client.call(ApiMethod.GET, "/api/v3/account")

    assert isinstance(exc_info.value, GatewayTimeout)
    assert exc_info.value.status_code == 504


def test_bad_request_extracts_code_and_message(mock_http_client):
    client, mock_http = mock_http_client
    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(
                status=400, content=b'{"code":-1121,"msg":"Invalid symbol."}'
            )
        )
    )

    with pytest.raises(ApiError) as exc_info:
        client.call(ApiMethod.GET, "/api/v1/depth", parameters="symbol=NOPE")

    error = exc_info.value
    assert isinstance(error, BadRequest)
    assert isinstance(error, ExchangeError)
    assert error.status_code == 400
    assert error.code == -1121
    assert error.message == "Invalid symbol."
    assert "Api Error Code: -1121 Message: Invalid symbol." in str(error)


@pytest.mark.parametrize(
    "content",
    [
        b"<html>Bad Request</html>",
        b"",
        b"[1, 2, 3]",
        b'"just a string"',
    ],
)
def test_unparseable_error_body_yields_zero_values(mock_http_client, content):
    client, mock_http = mock_http_client
    mock_http.stage_output(
        MockSuccessfulOutput(output=HttpResponse(status=400, content=content))
    )

    with pytest.raises(BadRequest) as exc_info:
        client.call(ApiMethod.GET, "/api/v1/depth")

    assert exc_info.value.code == 0
    assert exc_info.value.message == ""


def test_partial_error_body(mock_http_client):
    client, mock_http = mock_http_client
    mock_http.stage_output(
        [
            MockSuccessfulOutput(
                output=HttpResponse(status=400, content=b'{"msg":"Only a message"}')
            ),
            MockSuccessfulOutput(
                output=HttpResponse(status=400, content=b'{"code":-1100}')
            ),
        ]
    )

    with pytest.raises(BadRequest) as exc_info:
        client.call(ApiMethod.GET, "/api/v1/depth")
    assert (exc_info.value.code, exc_info.value.message) == (0, "Only a message")

    with pytest.raises(BadRequest) as exc_info:
        client.call(ApiMethod.GET, "/api/v1/depth")
    assert (exc_info.value.code, exc_info.value.message) == (-1100, "")


@pytest.mark.parametrize(
    "status, error_type",
    [
        (401, Unauthorized),
        (403, Forbidden),
        (404, NotFound),
        (429, RateLimited),
        (500, InternalServerError),
        (502, BadGateway),
        (503, ServiceUnavailable),
    ],
)
def test_status_specific_errors(mock_http_client, status, error_type):
    client, mock_http = mock_http_client
    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(status=status, content=b'{"code":-1000,"msg":"x"}')
        )
    )

    with pytest.raises(error_type) as exc_info:
        client.call(ApiMethod.GET, "/api/v3/order")

    assert exc_info.value.status_code == status
    assert exc_info.value.code == -1000


@pytest.mark.parametrize("status", [302, 418, 451, 599])
def test_other_statuses_raise_plain_api_error(mock_http_client, status):
    client, mock_http = mock_http_client
    mock_http.stage_output(
        MockSuccessfulOutput(output=HttpResponse(status=status, content=b"{}"))
    )

    with pytest.raises(ApiError) as exc_info:
        client.call(ApiMethod.GET, "/api/v3/order")

    assert type(exc_info.value) is ApiError
    assert exc_info.value.status_code == status


def test_transport_errors_propagate(mock_http_client):
    client, mock_http = mock_http_client
    mock_http.stage_output(
        MockExceptionOutput(HttpConnectionError("Failed to connect", url="api.test"))
    )

    with pytest.raises(HttpConnectionError):
        client.call(ApiMethod.GET, "/api/v1/ping")
