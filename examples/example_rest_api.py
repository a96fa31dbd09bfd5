"""
REST API Example

This example demonstrates the Binance REST client:
- Public endpoints (ping, server time, order book)
- A raw call through ``BinanceApiClient.call``
- A signed call, when credentials are configured
- The user data stream listen key lifecycle

Credentials are read by ``setup_environment`` from a .env file or the shell,
using the ``BINANCE_API_KEY_<ENVIRONMENT>`` and ``BINANCE_API_SECRET_<ENVIRONMENT>``
variables.
"""

from binance_gateway import ApiError, ApiMethod, BinanceApiClient, get_version
from binance_gateway.env_setup import setup_environment
from binance_gateway.helpers import print_data


def example_rest_api() -> None:
    """Walk through the public and authenticated REST helpers."""

    print("=" * 70)
    print("Binance REST API Example")
    print("=" * 70)
    print(f"\n[Info] Binance Gateway Version: {get_version()}\n")

    api_endpoint, _, api_key, api_secret = setup_environment()
    client = BinanceApiClient(
        api_url=api_endpoint, api_key=api_key, api_secret=api_secret
    )

    # ==================================================================
    # PUBLIC ENDPOINTS
    # ==================================================================
    print("\n" + "=" * 70)
    print("1. PUBLIC ENDPOINTS")
    print("=" * 70)

    client.ping()
    print("\n[Ping] REST API reachable")

    print("\n[Server Time]")
    print_data(client.get_server_time())

    print("\n[Fetching] Order book for ETHBTC (limit=5)...")
    book = client.get_order_book("ETHBTC", limit=5)
    print(f"  Best Ask: {book.asks[0].price} (qty: {book.asks[0].quantity})")
    print(f"  Best Bid: {book.bids[0].price} (qty: {book.bids[0].quantity})")

    # ==================================================================
    # RAW CALLS
    # ==================================================================
    print("\n" + "=" * 70)
    print("2. RAW CALLS")
    print("=" * 70)

    print("\n[Ticker] ETHBTC")
    print_data(client.call(ApiMethod.GET, "/api/v3/ticker/price", parameters="symbol=ETHBTC"))

    try:
        client.call(ApiMethod.GET, "/api/v3/ticker/price", parameters="symbol=NOPE")
    except ApiError as e:
        print(f"\n[Expected Error] status={e.status_code} code={e.code} msg={e.message}")

    # ==================================================================
    # AUTHENTICATED ENDPOINTS
    # ==================================================================
    if api_key is None or api_secret is None:
        print("\n[Note] No credentials configured, skipping authenticated calls.\n")
        return

    print("\n" + "=" * 70)
    print("3. AUTHENTICATED ENDPOINTS")
    print("=" * 70)

    print("\n[Account]")
    print_data(client.call(ApiMethod.GET, "/api/v3/account", signed=True))

    stream = client.start_user_stream()
    print(f"\n[User Stream] listen key: {stream.listenKey}")
    client.keep_alive_user_stream(stream.listenKey)
    print("[User Stream] kept alive")
    client.close_user_stream(stream.listenKey)
    print("[User Stream] closed")

    print("\n" + "=" * 70)
    print("Example completed successfully!")
    print("=" * 70)


if __name__ == "__main__":
    example_rest_api()
