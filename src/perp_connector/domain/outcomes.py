"""Result type for order preparation.

Separates "this trade cannot be placed" from "we could not find out",
so callers can choose their own retry policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from perp_connector.domain.types import OrderDescriptor


class PreparationStatus(str, Enum):
    """Why a preparation ended the way it did."""

    READY = "ready"  # Order descriptor produced
    BLACKLISTED = "blacklisted"  # Market already in the unsupported set
    UNSUPPORTED_MARKET = "unsupported_market"  # No symbol mapping or not listed
    SIZING_REJECTED = "sizing_rejected"  # Collateral or price invalid/too small
    BELOW_MINIMUM = "below_minimum"  # Under the symbol's min qty / notional
    FETCH_FAILED = "fetch_failed"  # Exchange call raised

    @property
    def is_retryable(self) -> bool:
        """Return True if a later attempt could succeed unchanged."""
        return self == PreparationStatus.FETCH_FAILED


@dataclass(frozen=True)
class PreparationOutcome:
    """Outcome of preparing a trade intent.

    Attributes:
        status: Terminal status of the pipeline run
        market: Internal market identifier of the intent
        symbol: Exchange symbol, when the market could be mapped
        order: The order descriptor (only set for READY)
        reason: Human-readable explanation for non-READY outcomes
        error: Exception caught for FETCH_FAILED outcomes
    """

    status: PreparationStatus
    market: str
    symbol: str | None = None
    order: OrderDescriptor | None = None
    reason: str | None = None
    error: Exception | None = None

    @property
    def is_ready(self) -> bool:
        """Return True if an order descriptor was produced."""
        return self.status == PreparationStatus.READY

    @property
    def is_retryable(self) -> bool:
        """Return True if the failure may be transient."""
        return self.status.is_retryable
