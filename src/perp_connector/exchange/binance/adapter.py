"""Binance USD-M futures connector.

Single entry point combining the REST client, the order preparation
pipeline, the order audit log and the market data stream.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from typing import Any

from perp_connector.core.config import ConnectorConfig, Credentials
from perp_connector.domain.errors import (
    AuthenticationError,
    BinanceAPIError,
    OrderSubmissionError,
)
from perp_connector.domain.outcomes import PreparationOutcome
from perp_connector.domain.types import OrderAck, OrderDescriptor, TradeIntent
from perp_connector.exchange.binance.auth import BinanceAuth
from perp_connector.exchange.binance.normalizer import BinanceNormalizer
from perp_connector.exchange.binance.rest import BinanceFuturesRestClient
from perp_connector.exchange.binance.websocket import StreamConnectionManager
from perp_connector.exchange.markets import build_symbol_table
from perp_connector.execution.context import PipelineContext
from perp_connector.execution.pipeline import OrderPreparationPipeline
from perp_connector.recording.audit import OrderAuditLog

logger = logging.getLogger(__name__)


class BinanceFuturesConnector:
    """Binance futures connector.

    Features:
    - Credential validation on start
    - Order preparation with leverage/margin reconciliation
    - Market order submission with an audit trail
    - Market data stream with auto-reconnect
    """

    def __init__(
        self,
        config: ConnectorConfig,
        credentials: Credentials,
        rest: BinanceFuturesRestClient | None = None,
        stream: StreamConnectionManager | None = None,
        audit_log: OrderAuditLog | None = None,
        context: PipelineContext | None = None,
    ) -> None:
        """Initialize the connector.

        Args:
            config: Connector configuration
            credentials: Binance API key pair
            rest: Optional REST client (built from config if omitted)
            stream: Optional stream manager (built from config if omitted)
            audit_log: Optional audit log (built from config if omitted)
            context: Optional pipeline state (built from config if omitted)
        """
        self._config = config
        exchange = config.exchange

        self._rest = rest or BinanceFuturesRestClient(
            BinanceAuth(credentials, recv_window=exchange.recv_window),
            base_url=exchange.base_url,
            timeout=exchange.request_timeout_seconds,
        )

        self._context = context or PipelineContext(
            reset_interval_seconds=config.pipeline.unsupported_reset_hours * 3600
        )
        self._pipeline = OrderPreparationPipeline(
            self._rest,
            self._context,
            leverage=config.leverage,
            margin_type=config.pipeline.margin_type,
            min_collateral=config.pipeline.min_collateral,
            symbol_table=build_symbol_table(config.markets),
            blacklist_on_fetch_error=config.pipeline.blacklist_on_fetch_error,
        )

        stream_config = config.stream
        self._stream = stream or StreamConnectionManager(
            url=exchange.ws_url,
            reconnect_delay=stream_config.reconnect_delay_seconds,
            max_reconnect_attempts=stream_config.max_reconnect_attempts,
            ping_interval=stream_config.ping_interval_seconds,
            connect_timeout=stream_config.connect_timeout_seconds,
            on_message=self._handle_ws_message,
            on_open=self._handle_ws_open,
            on_close=self._handle_ws_close,
        )

        self._audit = audit_log or OrderAuditLog(config.audit_log_path)
        self._normalizer = BinanceNormalizer()
        self._message_handler: Callable[[dict[str, Any]], None] | None = None
        self._channels: list[str] = list(stream_config.channels)

    @property
    def pipeline(self) -> OrderPreparationPipeline:
        """Return the order preparation pipeline."""
        return self._pipeline

    @property
    def context(self) -> PipelineContext:
        """Return the shared pipeline state."""
        return self._context

    @property
    def stream(self) -> StreamConnectionManager:
        """Return the market data stream manager."""
        return self._stream

    async def start(self) -> None:
        """Start the connector.

        Raises:
            AuthenticationError: If the exchange rejects the credentials
        """
        logger.info(f"Connecting to Binance futures ({self._config.exchange.base_url})")

        await self._rest.start()
        await self.validate_credentials()

        self._context.start_reset_timer()
        await self._stream.connect()

        logger.info("Binance connector started")

    async def stop(self) -> None:
        """Stop the connector."""
        logger.info("Closing Binance connector")

        await self._stream.close()
        await self._context.stop_reset_timer()
        await self._rest.stop()

    async def validate_credentials(self) -> dict[str, Any]:
        """Check that the API key can reach the account.

        Returns:
            Account information

        Raises:
            AuthenticationError: If the account request fails
        """
        try:
            account = await self._rest.get_account_info()
        except BinanceAPIError as e:
            logger.error(
                f"API key validation failed: code={e.code} message={e} "
                f"body={e.body} request_url={e.request_url}"
            )
            raise AuthenticationError(
                f"API key validation failed: {e}",
                exchange="binance",
                context=e.context,
            ) from e

        logger.info(
            f"API key validation successful: canTrade={account.get('canTrade')} "
            f"permissions={account.get('permissions')}"
        )
        return account

    # Orders

    async def prepare_order(self, intent: TradeIntent) -> OrderDescriptor | None:
        """Prepare an order for a trade intent, or None if infeasible."""
        return await self._pipeline.prepare(intent)

    async def evaluate(self, intent: TradeIntent) -> PreparationOutcome:
        """Prepare an order and report why preparation ended."""
        return await self._pipeline.evaluate(intent)

    async def place_order(self, order: OrderDescriptor) -> OrderAck:
        """Submit a market order.

        Args:
            order: Prepared order descriptor

        Returns:
            Exchange acknowledgement, with `order_id` None if the exchange
            accepted the order but its response could not be read

        Raises:
            OrderSubmissionError: If the exchange rejects the order
        """
        params: dict[str, Any] = {
            "symbol": order.symbol,
            "side": order.side.value,
            "type": "MARKET",
            "quantity": format(order.quantity, "f"),
            "reduceOnly": False,
            "workingType": "MARK_PRICE",
        }
        logger.info(f"Attempting to place order: {params}")

        try:
            response = await self._rest.submit_new_order(
                symbol=order.symbol,
                side=order.side,
                quantity=order.quantity,
            )
        except BinanceAPIError as e:
            logger.error(
                f"Error placing order: params={params} error={e} details={e.body}"
            )
            raise OrderSubmissionError(
                f"Order rejected for {order.symbol}: {e}",
                symbol=order.symbol,
                context={"params": params, **e.context},
            ) from e

        # The order is live from here on; nothing below may raise
        try:
            ack = self._normalizer.normalize_order(response)
        except Exception as e:
            logger.error(
                f"Order accepted but response unreadable: params={params} "
                f"response={response} error={e!r}"
            )
            ack = OrderAck(order_id=None, symbol=order.symbol, status="UNKNOWN")

        result = {
            **params,
            "orderId": ack.order_id,
            "status": ack.status,
            "executedQty": ack.executed_qty,
            "avgPrice": ack.avg_price,
        }
        logger.info(f"Order placed successfully: {result}")

        try:
            self._audit.record(result)
        except Exception as e:
            logger.error(f"Failed to record order to audit log: {result} error={e!r}")

        return ack

    # Account / market queries

    async def get_positions(self, symbol: str | None = None) -> list[dict[str, Any]]:
        """Get open positions, optionally for one symbol."""
        return await self._rest.get_positions(symbol)

    async def get_price(self, symbol: str) -> Decimal | None:
        """Get the mark price for a symbol, or None if it cannot be fetched."""
        try:
            response = await self._rest.get_mark_price(symbol, isolated=True)
            return self._normalizer.normalize_mark_price(response)
        except (BinanceAPIError, KeyError, InvalidOperation) as e:
            logger.error(f"Error getting price from Binance: {e}")
            return None

    # Market data

    async def subscribe(self, channels: list[str]) -> bool:
        """Subscribe to stream channels.

        Channels are also resubscribed every time the stream reopens.

        Returns:
            True if the request was sent now
        """
        for channel in channels:
            if channel not in self._channels:
                self._channels.append(channel)
        return await self._stream.subscribe(channels)

    def set_message_handler(self, handler: Callable[[dict[str, Any]], None]) -> None:
        """Set the callback for stream messages."""
        self._message_handler = handler

    def _handle_ws_message(self, message: dict[str, Any]) -> None:
        """Forward stream messages to the handler."""
        if "result" in message and "id" in message:
            logger.debug(f"Subscription acknowledged: {message}")
            return

        if self._message_handler:
            self._message_handler(message)

    async def _handle_ws_open(self) -> None:
        """Reissue subscriptions after (re)connect."""
        if self._channels:
            await self._stream.subscribe(self._channels)
            logger.info(f"Subscribed to {len(self._channels)} channels")

    def _handle_ws_close(self) -> None:
        """Handle stream disconnect."""
        logger.warning("Binance WebSocket disconnected")
