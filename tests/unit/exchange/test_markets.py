"""Tests for market to symbol mapping."""

from perp_connector.exchange.markets import (
    MARKET_SYMBOLS,
    build_symbol_table,
    map_market,
)


class TestMapMarket:
    """Tests for map_market."""

    def test_known_market(self) -> None:
        assert map_market("BTC-USD") == "BTCUSDT"

    def test_thousand_contract(self) -> None:
        assert map_market("PEPE-USD") == "1000PEPEUSDT"

    def test_unknown_market(self) -> None:
        assert map_market("FOO-USD") is None

    def test_custom_table(self) -> None:
        assert map_market("X", {"X": "XUSDT"}) == "XUSDT"
        assert map_market("BTC-USD", {"X": "XUSDT"}) is None


class TestBuildSymbolTable:
    """Tests for build_symbol_table."""

    def test_defaults(self) -> None:
        assert build_symbol_table() == MARKET_SYMBOLS

    def test_extra_entries_override(self) -> None:
        table = build_symbol_table({"BTC-USD": "BTCUSDC", "WIF-USD": "WIFUSDT"})
        assert table["BTC-USD"] == "BTCUSDC"
        assert table["WIF-USD"] == "WIFUSDT"
        assert MARKET_SYMBOLS["BTC-USD"] == "BTCUSDT"
