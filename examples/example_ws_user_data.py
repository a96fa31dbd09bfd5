"""
WebSocket User Data Example

Requests a listen key over REST, opens the user data stream and routes
account, trade and order updates to separate handlers. The listen key is
kept alive while the stream runs and closed afterwards.
"""

import asyncio

from binance_gateway import (
    AccountUpdatedMessage,
    BinanceApiClient,
    BinanceWSStreamClient,
    OrderOrTradeUpdatedMessage,
)
from binance_gateway.env_setup import setup_environment
from binance_gateway.helpers import print_data

KEEP_ALIVE_SECONDS = 30 * 60


async def example_ws_user_data(run_seconds: float = 60.0) -> None:
    api_endpoint, stream_endpoint, api_key, api_secret = setup_environment()
    rest = BinanceApiClient(api_url=api_endpoint, api_key=api_key, api_secret=api_secret)
    client = BinanceWSStreamClient(stream_url=stream_endpoint)

    listen_key = rest.start_user_stream().listenKey
    print(f"[User Stream] listen key {listen_key}")

    def on_account(msg: AccountUpdatedMessage) -> None:
        print("[Account]")
        print_data(msg)

    def on_trade(msg: OrderOrTradeUpdatedMessage) -> None:
        print(f"[Trade] {msg.symbol} {msg.side} {msg.last_filled_quantity} @ {msg.price_of_last_filled_trade}")

    def on_order(msg: OrderOrTradeUpdatedMessage) -> None:
        print(f"[Order] {msg.symbol} {msg.execution_type} status={msg.order_status}")

    client.listen_user_data(listen_key, on_account, on_trade, on_order)

    async def keep_alive() -> None:
        while True:
            await asyncio.sleep(KEEP_ALIVE_SECONDS)
            await asyncio.to_thread(rest.keep_alive_user_stream, listen_key)

    keeper = asyncio.create_task(keep_alive())
    try:
        await asyncio.sleep(run_seconds)
    finally:
        keeper.cancel()
        await client.disconnect()
        rest.close_user_stream(listen_key)
        print("[Done] User stream closed.")


if __name__ == "__main__":
    asyncio.run(example_ws_user_data())
