"""Binance data normalizer.

Converts Binance API responses to domain models.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from perp_connector.domain.types import (
    MarginType,
    OrderAck,
    SymbolConfig,
    SymbolMetadata,
)

LOT_SIZE = "LOT_SIZE"
MIN_NOTIONAL = "MIN_NOTIONAL"


class BinanceNormalizer:
    """Converts Binance data formats to domain models.

    Binance uses:
    - Decimal strings for prices and quantities
    - Filter lists on each symbol for trading constraints
    - Upper-case enums for sides and margin types
    """

    @staticmethod
    def find_symbol(exchange_info: dict[str, Any], symbol: str) -> dict[str, Any] | None:
        """Return the raw entry for a symbol from exchange info, if listed."""
        for entry in exchange_info.get("symbols", []):
            if entry.get("symbol") == symbol:
                return entry
        return None

    @staticmethod
    def normalize_symbol(data: dict[str, Any]) -> SymbolMetadata:
        """Convert an exchange-info symbol entry to SymbolMetadata.

        Missing filters are permissive: their minimum becomes zero.

        Args:
            data: Symbol entry from exchange info

        Returns:
            SymbolMetadata
        """
        filters = {f.get("filterType"): f for f in data.get("filters") or []}

        lot_size = filters.get(LOT_SIZE)
        min_qty = Decimal(str(lot_size.get("minQty", "0"))) if lot_size else Decimal("0")

        min_notional = Decimal("0")
        notional_filter = filters.get(MIN_NOTIONAL)
        if notional_filter:
            value = notional_filter.get("notional") or notional_filter.get("minNotional")
            min_notional = Decimal(str(value or "0"))

        return SymbolMetadata(
            symbol=data["symbol"],
            quantity_precision=int(data["quantityPrecision"]),
            min_qty=min_qty,
            min_notional=min_notional,
        )

    @staticmethod
    def normalize_mark_price(data: dict[str, Any]) -> Decimal:
        """Extract the mark price from a premium index payload."""
        return Decimal(str(data["markPrice"]))

    @staticmethod
    def normalize_symbol_config(
        data: list[dict[str, Any]] | dict[str, Any], symbol: str
    ) -> SymbolConfig:
        """Convert a symbol config response to SymbolConfig.

        Args:
            data: Symbol config list (first entry is used) or a single entry
            symbol: Symbol the config was requested for

        Returns:
            SymbolConfig
        """
        entry = data[0] if isinstance(data, list) else data
        return SymbolConfig(
            symbol=entry.get("symbol", symbol),
            leverage=int(entry["leverage"]),
            margin_type=MarginType.parse(entry["marginType"]),
        )

    @staticmethod
    def normalize_order(data: dict[str, Any]) -> OrderAck:
        """Convert an order response to OrderAck."""
        return OrderAck(
            order_id=int(data["orderId"]),
            symbol=data.get("symbol", ""),
            status=data.get("status", ""),
            executed_qty=Decimal(str(data.get("executedQty") or "0")),
            avg_price=Decimal(str(data.get("avgPrice") or "0")),
        )
