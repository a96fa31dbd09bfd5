from binance_gateway.executors.aiohttp import AiohttpWsExecutor
from binance_gateway.executors.defaults import DEFAULT_HTTP_EXECUTOR, DEFAULT_WS_EXECUTOR
from binance_gateway.executors.httpx import HttpxHttpExecutor
from binance_gateway.executors.interface import (
    HttpExecutor,
    HttpResponse,
    WsConnection,
    WsExecutor,
)
from binance_gateway.executors.requests import RequestsHttpExecutor
from binance_gateway.executors.websockets import WebsocketsWsExecutor

__all__ = [
    "HttpExecutor",
    "HttpResponse",
    "HttpxHttpExecutor",
    "RequestsHttpExecutor",
    "WsConnection",
    "WsExecutor",
    "WebsocketsWsExecutor",
    "AiohttpWsExecutor",
    "DEFAULT_HTTP_EXECUTOR",
    "DEFAULT_WS_EXECUTOR",
]
