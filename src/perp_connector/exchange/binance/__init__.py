"""Binance USD-M futures integration.

Provides REST and WebSocket clients. The connector facade is imported from
`perp_connector.exchange.binance.adapter`.
"""

from perp_connector.exchange.binance.auth import BinanceAuth
from perp_connector.exchange.binance.normalizer import BinanceNormalizer
from perp_connector.exchange.binance.rest import BinanceFuturesRestClient
from perp_connector.exchange.binance.websocket import StreamConnectionManager

__all__ = [
    "BinanceAuth",
    "BinanceFuturesRestClient",
    "BinanceNormalizer",
    "StreamConnectionManager",
]
