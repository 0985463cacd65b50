"""Binance USD-M futures connector.

Prepares exchange-compliant orders from trade intents and maintains a
self-healing market data stream.
"""

__version__ = "0.1.0"
