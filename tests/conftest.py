"""Pytest configuration and shared fixtures."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from perp_connector.core.config import Credentials


@pytest.fixture
def credentials() -> Credentials:
    """Test API key pair."""
    return Credentials(api_key="test-key", api_secret="test-secret")


@pytest.fixture
def sample_exchange_info() -> dict:
    """Exchange info payload from Binance futures, trimmed to two symbols."""
    return {
        "timezone": "UTC",
        "symbols": [
            {
                "symbol": "BTCUSDT",
                "quantityPrecision": 3,
                "pricePrecision": 1,
                "filters": [
                    {"filterType": "PRICE_FILTER", "tickSize": "0.10"},
                    {
                        "filterType": "LOT_SIZE",
                        "minQty": "0.001",
                        "maxQty": "1000",
                        "stepSize": "0.001",
                    },
                    {"filterType": "MIN_NOTIONAL", "notional": "100"},
                ],
            },
            {
                "symbol": "ETHUSDT",
                "quantityPrecision": 3,
                "pricePrecision": 2,
                "filters": [
                    {"filterType": "LOT_SIZE", "minQty": "0.001"},
                    {"filterType": "MIN_NOTIONAL", "notional": "20"},
                ],
            },
        ],
    }


@pytest.fixture
def sample_mark_price() -> dict:
    """Premium index payload for BTCUSDT."""
    return {
        "symbol": "BTCUSDT",
        "markPrice": "100000.00000000",
        "indexPrice": "99990.12000000",
        "lastFundingRate": "0.00010000",
    }


@pytest.fixture
def sample_symbol_config() -> list:
    """Symbol config payload already at the desired settings."""
    return [
        {
            "symbol": "BTCUSDT",
            "marginType": "ISOLATED",
            "isAutoAddMargin": "false",
            "leverage": 20,
            "maxNotionalValue": "1000000",
        }
    ]


@pytest.fixture
def sample_order_response() -> dict:
    """New order response for a filled market order."""
    return {
        "orderId": 4032100123,
        "symbol": "BTCUSDT",
        "status": "FILLED",
        "side": "BUY",
        "type": "MARKET",
        "executedQty": "0.010",
        "avgPrice": "100012.30",
    }


@pytest.fixture
def mock_rest(
    sample_exchange_info: dict,
    sample_mark_price: dict,
    sample_symbol_config: list,
    sample_order_response: dict,
) -> MagicMock:
    """REST client double returning the sample payloads."""
    rest = MagicMock()
    rest.start = AsyncMock()
    rest.stop = AsyncMock()
    rest.get_exchange_info = AsyncMock(return_value=sample_exchange_info)
    rest.get_mark_price = AsyncMock(return_value=sample_mark_price)
    rest.get_symbol_config = AsyncMock(return_value=sample_symbol_config)
    rest.set_leverage = AsyncMock(return_value={"leverage": 20})
    rest.set_margin_type = AsyncMock(return_value={"code": 200, "msg": "success"})
    rest.submit_new_order = AsyncMock(return_value=sample_order_response)
    rest.get_account_info = AsyncMock(
        return_value={"canTrade": True, "permissions": ["TRADING"]}
    )
    rest.get_positions = AsyncMock(return_value=[])
    return rest


@pytest.fixture
def btc_intent_size() -> Decimal:
    """Notional that sizes to 0.02 BTC at a 100k mark price."""
    return Decimal("2000")
