"""Order side and quantity arithmetic.

Pure functions with no exchange access. Sizing works only for
stablecoin-quoted contracts: collateral and price share the quote unit.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import ROUND_FLOOR, Decimal, InvalidOperation, localcontext
from typing import Any

from perp_connector.domain.types import OrderSide

logger = logging.getLogger(__name__)

DEFAULT_LEVERAGE = 20
MIN_COLLATERAL = Decimal("50")

ZERO = Decimal("0")


def default_leverage(exchange: str, leverages: Mapping[str, int] | None = None) -> int:
    """Look up the configured leverage for an exchange.

    Args:
        exchange: Exchange name (e.g. "binance")
        leverages: Leverage table keyed by exchange name

    Returns:
        Configured leverage, or DEFAULT_LEVERAGE when unset
    """
    if leverages and leverages.get(exchange):
        return int(leverages[exchange])
    return DEFAULT_LEVERAGE


def side_for(is_long: bool, is_closed: bool) -> OrderSide:
    """Return the order side for a position direction.

    Closing a long sells and closing a short buys; opening does the reverse.
    """
    if is_closed:
        return OrderSide.SELL if is_long else OrderSide.BUY
    return OrderSide.BUY if is_long else OrderSide.SELL


def _to_decimal(value: Any) -> Decimal | None:
    """Convert a numeric-looking value to a finite Decimal, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            return None
    if not result.is_finite():
        return None
    return result


def compute_quantity(
    collateral: Any,
    price: Any,
    precision: int,
    leverage: int = DEFAULT_LEVERAGE,
    min_collateral: Decimal = MIN_COLLATERAL,
) -> Decimal:
    """Compute the base-asset quantity a collateral amount can fund.

    quantity = floor(collateral * leverage / price * 10^precision) / 10^precision

    The result is truncated, never rounded up, so the position never needs
    more margin than the collateral provides.

    Args:
        collateral: Margin to commit, in quote currency
        price: Current price of one unit of the base asset
        precision: Number of decimals the exchange accepts for quantity
        leverage: Leverage multiplier applied to collateral
        min_collateral: Smallest collateral worth trading

    Returns:
        Quantity in base-asset units, or Decimal(0) if the inputs are rejected
    """
    amount = _to_decimal(collateral)
    if amount is None or amount <= 0:
        logger.info(f"Invalid collateral value: {collateral}")
        return ZERO

    unit_price = _to_decimal(price)
    if unit_price is None or unit_price <= 0:
        logger.info(f"Invalid price value: {price}")
        return ZERO

    if amount < min_collateral:
        logger.info(
            f"Collateral too small: {amount:.2f} (min: {min_collateral}), "
            f"short by {min_collateral - amount:.2f}"
        )
        return ZERO

    step = Decimal(1).scaleb(-precision)
    with localcontext() as ctx:
        # Room for every integer digit of the quotient plus `precision` decimals
        integer_digits = max(amount.adjusted() - unit_price.adjusted(), 0)
        integer_digits += len(str(leverage))
        ctx.prec = max(ctx.prec, 28 + integer_digits + precision + 2)
        total_size = amount * leverage
        quantity = (total_size / unit_price).quantize(step, rounding=ROUND_FLOOR)

    logger.debug(
        f"Calculated position: collateral={amount:.2f} leverage={leverage}x "
        f"total={total_size:.2f} price={unit_price} quantity={quantity}"
    )

    return quantity
