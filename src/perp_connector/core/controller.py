"""Connector controller - process lifecycle.

Starts the connector, keeps the market data stream subscribed, and shuts
down cleanly on SIGTERM/SIGINT.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Any

from perp_connector.core.config import ConnectorConfig, Credentials
from perp_connector.exchange.binance.adapter import BinanceFuturesConnector

logger = logging.getLogger(__name__)


class ConnectorController:
    """Runs a connector until a termination signal arrives.

    Lifecycle:
    1. Validate credentials and open the market data stream
    2. Subscribe configured channels (reissued on every reconnect)
    3. Wait for shutdown
    4. Close the stream and the REST client
    """

    def __init__(
        self,
        config: ConnectorConfig,
        credentials: Credentials,
        connector: BinanceFuturesConnector | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            config: Connector configuration
            credentials: Binance API key pair
            connector: Optional pre-built connector
        """
        self._config = config
        self._connector = connector or BinanceFuturesConnector(config, credentials)
        self._shutdown_event = asyncio.Event()
        self._running = False
        self._message_count = 0

    @property
    def connector(self) -> BinanceFuturesConnector:
        """Return the connector."""
        return self._connector

    @property
    def is_running(self) -> bool:
        """Check if the controller is running."""
        return self._running

    async def start(self) -> None:
        """Start the connector and block until shutdown."""
        logger.info("Starting connector controller")

        self._setup_signal_handlers()
        self._connector.set_message_handler(self._handle_message)

        try:
            try:
                await self._connector.start()
            except Exception:
                await self._connector.stop()
                raise
            self._running = True

            await self._shutdown_event.wait()
            await self._shutdown()
        finally:
            self._remove_signal_handlers()

    async def stop(self) -> None:
        """Request a graceful stop."""
        logger.info("Stopping connector controller")
        self._shutdown_event.set()

    async def _shutdown(self) -> None:
        """Close the connector."""
        await self._connector.stop()
        self._running = False
        logger.info(f"Connector stopped ({self._message_count} stream messages)")

    def _handle_message(self, message: dict[str, Any]) -> None:
        self._message_count += 1
        logger.debug(f"Stream message: {message.get('e', 'unknown')}")

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._handle_signal, sig)

    def _handle_signal(self, sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received {sig.name}, closing Binance WebSocket connection...")
        self._shutdown_event.set()

    def _remove_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)
