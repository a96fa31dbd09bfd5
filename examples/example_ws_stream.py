"""
WebSocket Market Stream Example

This example opens three concurrent market streams for ETHBTC:
- Depth updates, normalised by the depth parser
- One minute candlesticks
- Aggregated trades

After a few seconds the depth stream is restarted under the same id, then
every stream is closed.
"""

import asyncio
import logging

from binance_gateway import (
    AggregateTradeMessage,
    BinanceWSStreamClient,
    DepthMessage,
    KlineInterval,
    KlineMessage,
)
from binance_gateway.env_setup import setup_environment


async def example_ws_stream(run_seconds: float = 10.0) -> None:
    """Stream market data for ``run_seconds`` and shut down cleanly."""
    print("=" * 70)
    print("Binance WebSocket Market Stream Example")
    print("=" * 70)

    _, stream_endpoint, _, _ = setup_environment()
    client = BinanceWSStreamClient(stream_url=stream_endpoint)

    def on_depth(msg: DepthMessage) -> None:
        best_bid = msg.bids[0].price if msg.bids else None
        best_ask = msg.asks[0].price if msg.asks else None
        print(f"[Depth] {msg.symbol} u={msg.update_id} bid={best_bid} ask={best_ask}")

    async def on_kline(msg: KlineMessage) -> None:
        print(f"[Kline] {msg.symbol} close={msg.kline.close} final={msg.kline.is_final}")

    def on_trade(msg: AggregateTradeMessage) -> None:
        print(f"[Trade] {msg.symbol} {msg.quantity} @ {msg.price}")

    def on_error(stream_id: str, error: Exception) -> None:
        print(f"[Error] stream {stream_id}: {error}")

    depth_id = client.listen_depth("ETHBTC", on_depth, error_handler=on_error)
    client.listen_kline("ETHBTC", KlineInterval.ONE_MINUTE, on_kline, error_handler=on_error)
    client.listen_trades("ETHBTC", on_trade, error_handler=on_error)
    print(f"\n[Streams] opened, depth stream id {depth_id}\n")

    try:
        await asyncio.sleep(run_seconds / 2)
        print(f"\n[Restart] depth stream {depth_id}\n")
        client.restart_stream(depth_id)
        await asyncio.sleep(run_seconds / 2)
    finally:
        print("\n[Cleanup] Closing every stream...")
        await client.disconnect()
        print("[Done] Gracefully exited.")
        print("=" * 70)


if __name__ == "__main__":
    """
    Usage:
        python example_ws_stream.py

    Market streams are public and need no credentials.
    """
    logging.basicConfig(level=logging.INFO)
    try:
        asyncio.run(example_ws_stream())
    except KeyboardInterrupt:
        print("\n[Exit] Keyboard interrupt received. Shutting down cleanly.")
