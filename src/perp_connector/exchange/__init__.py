"""Exchange integration.

Market symbol mapping and order sizing live here; the Binance client,
stream and connector live in the binance subpackage.
"""

from perp_connector.exchange.markets import MARKET_SYMBOLS, map_market
from perp_connector.exchange.sizing import compute_quantity, side_for

__all__ = [
    "MARKET_SYMBOLS",
    "compute_quantity",
    "map_market",
    "side_for",
]
