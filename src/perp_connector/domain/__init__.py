"""Domain models and error types for the connector."""

from perp_connector.domain.errors import (
    AuthenticationError,
    BinanceAPIError,
    ConfigurationError,
    ExchangeError,
    OrderError,
    OrderSubmissionError,
    TradingError,
)
from perp_connector.domain.outcomes import PreparationOutcome, PreparationStatus
from perp_connector.domain.types import (
    ConnectionState,
    MarginType,
    OrderAck,
    OrderDescriptor,
    OrderSide,
    SavedSymbolConfig,
    SymbolConfig,
    SymbolMetadata,
    TradeIntent,
)

__all__ = [
    "AuthenticationError",
    "BinanceAPIError",
    "ConfigurationError",
    "ConnectionState",
    "ExchangeError",
    "MarginType",
    "OrderAck",
    "OrderDescriptor",
    "OrderError",
    "OrderSide",
    "OrderSubmissionError",
    "PreparationOutcome",
    "PreparationStatus",
    "SavedSymbolConfig",
    "SymbolConfig",
    "SymbolMetadata",
    "TradeIntent",
    "TradingError",
]
