"""Order preparation pipeline.

Turns a trade intent into an exchange-compliant order descriptor:
resolves the symbol, sizes the order from the symbol's precision and
mark price, checks the exchange minimums, and brings the symbol's
leverage and margin type in line with the configured defaults.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal

from perp_connector.domain.errors import BinanceAPIError
from perp_connector.domain.outcomes import PreparationOutcome, PreparationStatus
from perp_connector.domain.types import MarginType, OrderDescriptor, TradeIntent
from perp_connector.exchange.binance.normalizer import BinanceNormalizer
from perp_connector.exchange.binance.rest import BinanceFuturesRestClient
from perp_connector.exchange.markets import map_market
from perp_connector.exchange.sizing import (
    DEFAULT_LEVERAGE,
    MIN_COLLATERAL,
    compute_quantity,
    side_for,
)
from perp_connector.execution.context import PipelineContext

logger = logging.getLogger(__name__)


class OrderPreparationPipeline:
    """Prepares orders for one exchange.

    Every run re-fetches exchange metadata, the mark price and the symbol
    configuration; nothing is cached except the unsupported-market set and
    the config memo held by the context.

    Failure handling:
    - Unknown or unlisted markets are added to the unsupported set
    - Sizing and minimum-size rejections are not
    - Exchange errors are logged and, when `blacklist_on_fetch_error`
      is set, add the market to the unsupported set
    """

    def __init__(
        self,
        rest: BinanceFuturesRestClient,
        context: PipelineContext,
        leverage: int = DEFAULT_LEVERAGE,
        margin_type: MarginType = MarginType.ISOLATED,
        min_collateral: Decimal = MIN_COLLATERAL,
        symbol_table: Mapping[str, str] | None = None,
        blacklist_on_fetch_error: bool = True,
    ) -> None:
        """Initialize the pipeline.

        Args:
            rest: Exchange REST client
            context: Shared unsupported-market and config state
            leverage: Leverage every traded symbol is set to
            margin_type: Margin mode every traded symbol is set to
            min_collateral: Smallest collateral worth trading
            symbol_table: Market to symbol table, defaults to the built-in one
            blacklist_on_fetch_error: Blacklist markets whose fetches fail
        """
        self._rest = rest
        self._context = context
        self._leverage = leverage
        self._margin_type = margin_type
        self._min_collateral = min_collateral
        self._symbol_table = symbol_table
        self._blacklist_on_fetch_error = blacklist_on_fetch_error
        self._normalizer = BinanceNormalizer()

    @property
    def context(self) -> PipelineContext:
        """Return the shared pipeline state."""
        return self._context

    @property
    def leverage(self) -> int:
        """Return the target leverage."""
        return self._leverage

    async def prepare(self, intent: TradeIntent) -> OrderDescriptor | None:
        """Prepare an order, or return None if it cannot be placed.

        Never raises.
        """
        outcome = await self.evaluate(intent)
        return outcome.order

    async def evaluate(self, intent: TradeIntent) -> PreparationOutcome:
        """Run the pipeline and report how it ended.

        Args:
            intent: Trade intent to prepare

        Returns:
            PreparationOutcome, with `order` set when status is READY
        """
        market = intent.market

        if self._context.is_unsupported(market):
            return PreparationOutcome(
                status=PreparationStatus.BLACKLISTED,
                market=market,
                reason="market is in the unsupported set",
            )

        symbol = map_market(market, self._symbol_table)
        if symbol is None:
            self._context.mark_unsupported(market)
            return PreparationOutcome(
                status=PreparationStatus.UNSUPPORTED_MARKET,
                market=market,
                reason="no symbol mapping",
            )

        try:
            return await self._prepare_symbol(intent, symbol)
        except Exception as e:
            logger.error(
                f"Error preparing order for {symbol} ({market}): {_describe_error(e)}"
            )
            if self._blacklist_on_fetch_error:
                self._context.mark_unsupported(market)
            return PreparationOutcome(
                status=PreparationStatus.FETCH_FAILED,
                market=market,
                symbol=symbol,
                reason=str(e),
                error=e,
            )

    async def _prepare_symbol(
        self, intent: TradeIntent, symbol: str
    ) -> PreparationOutcome:
        """Pipeline steps that touch the exchange."""
        market = intent.market

        exchange_info = await self._rest.get_exchange_info()
        symbol_data = self._normalizer.find_symbol(exchange_info, symbol)
        if symbol_data is None:
            self._context.mark_unsupported(market)
            return PreparationOutcome(
                status=PreparationStatus.UNSUPPORTED_MARKET,
                market=market,
                symbol=symbol,
                reason="symbol not listed on exchange",
            )

        metadata = self._normalizer.normalize_symbol(symbol_data)

        price = self._normalizer.normalize_mark_price(
            await self._rest.get_mark_price(symbol, isolated=True)
        )

        side = side_for(intent.is_long, intent.is_closed)
        collateral = intent.size / self._leverage
        quantity = compute_quantity(
            collateral,
            price,
            metadata.quantity_precision,
            leverage=self._leverage,
            min_collateral=self._min_collateral,
        )

        if quantity <= 0:
            return PreparationOutcome(
                status=PreparationStatus.SIZING_REJECTED,
                market=market,
                symbol=symbol,
                reason=f"collateral {collateral} at price {price} sizes to zero",
            )

        if metadata.min_qty > 0 and quantity < metadata.min_qty:
            logger.info(
                f"Quantity {quantity} is less than minimum {metadata.min_qty} for {symbol}"
            )
            return PreparationOutcome(
                status=PreparationStatus.BELOW_MINIMUM,
                market=market,
                symbol=symbol,
                reason=f"quantity {quantity} below min qty {metadata.min_qty}",
            )

        notional = quantity * price
        if metadata.min_notional > 0 and notional < metadata.min_notional:
            logger.info(
                f"Notional value {notional} is less than minimum "
                f"{metadata.min_notional} for {symbol}"
            )
            return PreparationOutcome(
                status=PreparationStatus.BELOW_MINIMUM,
                market=market,
                symbol=symbol,
                reason=f"notional {notional} below min notional {metadata.min_notional}",
            )

        await self._reconcile_symbol_config(symbol)

        return PreparationOutcome(
            status=PreparationStatus.READY,
            market=market,
            symbol=symbol,
            order=OrderDescriptor(side=side, symbol=symbol, quantity=quantity),
        )

    async def _reconcile_symbol_config(self, symbol: str) -> None:
        """Rewrite leverage and margin type if they drifted from the defaults."""
        config = self._normalizer.normalize_symbol_config(
            await self._rest.get_symbol_config(symbol), symbol
        )

        if config.leverage != self._leverage:
            await self._rest.set_leverage(symbol, self._leverage)
            self._context.save_config(symbol, leverage=True)

        if config.margin_type != self._margin_type:
            await self._rest.set_margin_type(symbol, self._margin_type)
            self._context.save_config(symbol, margin_type=True)


def _describe_error(error: Exception) -> str:
    """Format an exception with the exchange diagnostics it carries."""
    if isinstance(error, BinanceAPIError):
        return (
            f"code={error.code} message={error} "
            f"body={error.body} request_url={error.request_url}"
        )
    return f"{type(error).__name__}: {error}"
