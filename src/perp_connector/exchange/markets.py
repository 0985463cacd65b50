"""Internal market identifiers to Binance USD-M futures symbols."""

from __future__ import annotations

from collections.abc import Mapping

# Markets quoted in USD map onto the USDT-margined perpetual.
# Low-priced assets trade as 1000x contracts on Binance.
MARKET_SYMBOLS: dict[str, str] = {
    "BTC-USD": "BTCUSDT",
    "ETH-USD": "ETHUSDT",
    "SOL-USD": "SOLUSDT",
    "BNB-USD": "BNBUSDT",
    "XRP-USD": "XRPUSDT",
    "DOGE-USD": "DOGEUSDT",
    "ADA-USD": "ADAUSDT",
    "AVAX-USD": "AVAXUSDT",
    "LINK-USD": "LINKUSDT",
    "LTC-USD": "LTCUSDT",
    "DOT-USD": "DOTUSDT",
    "TRX-USD": "TRXUSDT",
    "NEAR-USD": "NEARUSDT",
    "APT-USD": "APTUSDT",
    "ARB-USD": "ARBUSDT",
    "OP-USD": "OPUSDT",
    "SUI-USD": "SUIUSDT",
    "PEPE-USD": "1000PEPEUSDT",
    "SHIB-USD": "1000SHIBUSDT",
    "BONK-USD": "1000BONKUSDT",
}


def map_market(
    market: str, table: Mapping[str, str] | None = None
) -> str | None:
    """Resolve a market identifier to its exchange symbol.

    Args:
        market: Internal market identifier (e.g. "BTC-USD")
        table: Optional lookup table, defaults to MARKET_SYMBOLS

    Returns:
        Exchange symbol, or None if the market is not listed
    """
    symbols = MARKET_SYMBOLS if table is None else table
    return symbols.get(market)


def build_symbol_table(extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return the default table merged with configured overrides."""
    table = dict(MARKET_SYMBOLS)
    if extra:
        table.update(extra)
    return table
