import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Generator

import orjson
import pytest

from binance_gateway.api import BinanceApiClient
from tests.mock_executors import MockHttpExecutor, MockOutputNotExhausted

DATA_DIR = Path(__file__).parent.joinpath("data")

log = logging.getLogger(__name__)


async def wait_for_predicate(
    condition: Callable[[], bool], timeout: float, poll_interval: float = 0.01
) -> None:
    """
    Wait for a condition to become true, polling at regular intervals.

    Args:
        condition: A callable that returns True when the condition is met
        timeout: Maximum time to wait in seconds
        poll_interval: Time between condition checks in seconds (default: 0.01)

    Raises:
        TimeoutError: If the condition doesn't become true within the timeout
    """
    start_time = asyncio.get_running_loop().time()
    end_time = start_time + timeout

    while True:
        if condition():
            return

        current_time = asyncio.get_running_loop().time()
        if current_time >= end_time:
            raise TimeoutError(f"Condition not met within {timeout}s timeout")

        await asyncio.sleep(poll_interval)


@pytest.fixture
def mock_http_client() -> Generator[
    tuple[BinanceApiClient, MockHttpExecutor], None, None
]:
    mock_http = MockHttpExecutor()
    client = BinanceApiClient(
        # not used with the mock in place
        api_url="api.gaierror.xyz",
        api_key="FOO",
        api_secret="BAR",
        # replace real network requests with our mock
        executor=mock_http,
    )

    yield (client, mock_http)

    if len(mock_http.staged_outputs) > 0:
        raise MockOutputNotExhausted(mock_http.staged_outputs)


def load_json(name: str) -> dict[str, Any]:
    path = DATA_DIR / f"{name}.json"
    with open(path, "rb") as fh:
        return orjson.loads(fh.read())


def load_frame(name: str) -> str:
    """Load a data file as the raw text of a stream frame."""
    return orjson.dumps(load_json(name)).decode()
