"""Core value objects for the connector.

These types form the domain model shared by the order pipeline and the
exchange client. Value objects are immutable; quantities and prices are
held as Decimal because the exchange reports them as strings.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import field_validator
from pydantic.dataclasses import dataclass


class OrderSide(str, Enum):
    """Order direction as the exchange spells it."""

    BUY = "BUY"
    SELL = "SELL"


class MarginType(str, Enum):
    """Per-symbol margin mode.

    ISOLATED ring-fences collateral per symbol, CROSSED shares the
    account balance across positions.
    """

    ISOLATED = "ISOLATED"
    CROSSED = "CROSSED"

    @classmethod
    def parse(cls, value: str) -> MarginType:
        """Parse the exchange spelling (it reports "cross" as well as "CROSSED")."""
        normalized = value.upper()
        if normalized in ("CROSS", "CROSSED"):
            return cls.CROSSED
        return cls(normalized)


class ConnectionState(str, Enum):
    """Streaming connection lifecycle.

    State transitions:
    - IDLE -> CONNECTING (connect)
    - CONNECTING -> OPEN (handshake complete)
    - CONNECTING -> CLOSED (handshake failed or timed out)
    - OPEN -> CLOSED (socket closed or errored)
    - CLOSED -> CONNECTING (backoff elapsed)
    - CLOSED -> FAILED (reconnect attempts exhausted)
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    FAILED = "failed"


@dataclass(frozen=True)
class TradeIntent:
    """A request to open or close exposure on a market.

    Attributes:
        is_long: True for a long position, False for short
        market: Internal market identifier (e.g. "BTC-USD")
        size: Notional size in quote currency
        is_closed: True when the intent closes an existing position
    """

    is_long: bool
    market: str
    size: Decimal
    is_closed: bool = False

    @field_validator("size")
    @classmethod
    def validate_positive(cls, v: Decimal) -> Decimal:
        """Ensure notional size is positive."""
        if v <= 0:
            raise ValueError("Size must be positive")
        return v


@dataclass(frozen=True)
class SymbolMetadata:
    """Trading constraints the exchange publishes for a symbol."""

    symbol: str
    quantity_precision: int
    min_qty: Decimal = Decimal("0")
    min_notional: Decimal = Decimal("0")

    @field_validator("quantity_precision")
    @classmethod
    def validate_precision(cls, v: int) -> int:
        """Ensure precision is a non-negative number of decimals."""
        if v < 0:
            raise ValueError("Quantity precision must be non-negative")
        return v

    @field_validator("min_qty", "min_notional")
    @classmethod
    def validate_non_negative(cls, v: Decimal) -> Decimal:
        """Ensure filter minimums are non-negative."""
        if v < 0:
            raise ValueError("Filter minimums must be non-negative")
        return v


@dataclass(frozen=True)
class OrderDescriptor:
    """A ready-to-submit order produced by the preparation pipeline."""

    side: OrderSide
    symbol: str
    quantity: Decimal

    @field_validator("quantity")
    @classmethod
    def validate_positive(cls, v: Decimal) -> Decimal:
        """Ensure quantity is positive."""
        if v <= 0:
            raise ValueError("Quantity must be positive")
        return v


@dataclass(frozen=True)
class SymbolConfig:
    """Account-level leverage and margin mode for one symbol."""

    symbol: str
    leverage: int
    margin_type: MarginType


@dataclass
class SavedSymbolConfig:
    """Records which settings the connector has rewritten for a symbol.

    Only the fact that a correction was issued is kept, not the value.
    """

    leverage: bool = False
    margin_type: bool = False


@dataclass(frozen=True)
class OrderAck:
    """Exchange acknowledgement of a submitted order.

    `order_id` is None when the exchange accepted the order but its
    response could not be read.
    """

    order_id: int | None
    symbol: str
    status: str
    executed_qty: Decimal = Decimal("0")
    avg_price: Decimal = Decimal("0")
