"""Tests for the preparation outcome type."""

from decimal import Decimal

from perp_connector.domain.outcomes import PreparationOutcome, PreparationStatus
from perp_connector.domain.types import OrderDescriptor, OrderSide


class TestPreparationOutcome:
    """Tests for PreparationOutcome."""

    def test_ready(self) -> None:
        order = OrderDescriptor(side=OrderSide.BUY, symbol="BTCUSDT", quantity=Decimal("0.01"))
        outcome = PreparationOutcome(
            status=PreparationStatus.READY, market="BTC-USD", symbol="BTCUSDT", order=order
        )
        assert outcome.is_ready
        assert not outcome.is_retryable

    def test_only_fetch_failures_are_retryable(self) -> None:
        retryable = {s for s in PreparationStatus if s.is_retryable}
        assert retryable == {PreparationStatus.FETCH_FAILED}

    def test_fetch_failed_carries_error(self) -> None:
        error = TimeoutError("read timeout")
        outcome = PreparationOutcome(
            status=PreparationStatus.FETCH_FAILED, market="BTC-USD", error=error
        )
        assert outcome.is_retryable
        assert outcome.order is None
        assert outcome.error is error
