"""Default executor configurations.

This module defines the default HTTP and WebSocket executor implementations
used by the gateway when no custom executor is provided.
"""

from typing import Type

from binance_gateway.executors.aiohttp import AiohttpWsExecutor
from binance_gateway.executors.httpx import HttpxHttpExecutor
from binance_gateway.executors.interface import HttpExecutor, WsExecutor

DEFAULT_WS_EXECUTOR: Type[WsExecutor] = AiohttpWsExecutor
DEFAULT_HTTP_EXECUTOR: Type[HttpExecutor] = HttpxHttpExecutor
