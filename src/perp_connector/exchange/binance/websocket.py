"""Binance market data WebSocket connection manager.

Owns a single socket to the futures market stream, keeps it alive with
periodic pings, and reconnects with linear backoff when it drops.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import websockets
from websockets.asyncio.client import ClientConnection, connect

from perp_connector.core.config import BINANCE_FUTURES_WS
from perp_connector.domain.types import ConnectionState

logger = logging.getLogger(__name__)

Callback = Callable[[], Awaitable[None] | None]


class StreamConnectionManager:
    """Self-healing WebSocket connection.

    Features:
    - Explicit connection state machine (see ConnectionState)
    - Bounded connect timeout
    - Linear reconnect backoff, giving up after max_reconnect_attempts
    - Liveness pings on a fixed interval
    - SUBSCRIBE / UNSUBSCRIBE while open

    Subscriptions are not remembered across reconnects; use on_open to
    reissue them.
    """

    def __init__(
        self,
        url: str = BINANCE_FUTURES_WS,
        reconnect_delay: float = 1.0,
        max_reconnect_attempts: int = 5,
        ping_interval: float = 30.0,
        connect_timeout: float = 5.0,
        on_message: Callable[[dict[str, Any]], None] | None = None,
        on_open: Callback | None = None,
        on_close: Callback | None = None,
        connector: Callable[..., Awaitable[ClientConnection]] | None = None,
    ) -> None:
        """Initialize the connection manager.

        Args:
            url: Stream endpoint
            reconnect_delay: Base delay in seconds, multiplied by the attempt number
            max_reconnect_attempts: Consecutive failed reconnects before giving up
            ping_interval: Seconds between liveness pings
            connect_timeout: Seconds allowed for the opening handshake
            on_message: Callback for decoded messages
            on_open: Callback when the connection opens
            on_close: Callback when the connection drops
            connector: Coroutine factory opening the socket, defaults to
                websockets' connect
        """
        self._url = url
        self._reconnect_delay = reconnect_delay
        self._max_reconnect_attempts = max_reconnect_attempts
        self._ping_interval = ping_interval
        self._connect_timeout = connect_timeout
        self._on_message = on_message
        self._on_open = on_open
        self._on_close = on_close
        self._connector = connector or connect

        self._ws: ClientConnection | None = None
        self._state = ConnectionState.IDLE
        self._reconnect_attempts = 0
        self._should_run = False

        self._ping_task: asyncio.Task[None] | None = None
        self._receive_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> ConnectionState:
        """Return the current connection state."""
        return self._state

    @property
    def reconnect_attempts(self) -> int:
        """Return consecutive reconnects since the last successful open."""
        return self._reconnect_attempts

    def is_open(self) -> bool:
        """Return True if the socket is open."""
        return self._state == ConnectionState.OPEN and self._ws is not None

    async def connect(self) -> None:
        """Open the connection.

        No-op while a connection attempt is in flight or already open.
        A manual connect starts a fresh run of reconnect attempts, which is
        how the manager resumes after giving up.
        """
        if self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN):
            return

        self._reconnect_attempts = 0
        self._should_run = True
        self._cancel_reconnect()
        await self._connect()

    async def _connect(self) -> None:
        """Single connection attempt."""
        if self._state == ConnectionState.CONNECTING:
            return
        self._set_state(ConnectionState.CONNECTING)

        try:
            ws = await asyncio.wait_for(
                self._connector(self._url, ping_interval=None),
                timeout=self._connect_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("WebSocket connection timeout. Forcing reconnect...")
            await self._handle_disconnect()
            return
        except Exception as e:
            logger.error(f"Failed to create WebSocket connection: {e}")
            await self._handle_disconnect()
            return

        if not self._should_run:
            # close() was called during the handshake
            await ws.close()
            return

        self._ws = ws
        self._reconnect_attempts = 0
        self._set_state(ConnectionState.OPEN)
        logger.info("Binance WebSocket connected")

        self._ping_task = asyncio.create_task(self._ping_loop(ws))
        self._receive_task = asyncio.create_task(self._receive_loop(ws))

        await self._notify(self._on_open)

    def reconnect(self) -> float | None:
        """Schedule the next connection attempt.

        Returns:
            Delay in seconds before the attempt, or None if attempts are
            exhausted and the manager has given up
        """
        if self._reconnect_attempts >= self._max_reconnect_attempts:
            logger.error(
                "Max reconnection attempts reached. Please check your connection."
            )
            self._set_state(ConnectionState.FAILED)
            return None

        self._reconnect_attempts += 1
        delay = self._reconnect_delay * self._reconnect_attempts
        logger.info(
            f"Attempting to reconnect ({self._reconnect_attempts}/"
            f"{self._max_reconnect_attempts}) in {delay:.1f}s"
        )

        self._cancel_reconnect()
        self._reconnect_task = asyncio.create_task(self._delayed_connect(delay))
        return delay

    async def subscribe(self, channels: list[str]) -> bool:
        """Subscribe to stream channels (e.g. "btcusdt@markPrice").

        Returns:
            True if the request was sent, False if the socket is not open
        """
        return await self._send_method("SUBSCRIBE", channels)

    async def unsubscribe(self, channels: list[str]) -> bool:
        """Unsubscribe from stream channels.

        Returns:
            True if the request was sent, False if the socket is not open
        """
        return await self._send_method("UNSUBSCRIBE", channels)

    async def close(self) -> None:
        """Close the connection without reconnecting."""
        self._should_run = False
        self._cancel_reconnect()

        ws = self._ws
        self._ws = None
        await self._cancel_tasks()

        if ws is not None:
            await ws.close()

        self._set_state(ConnectionState.CLOSED)
        logger.info("Binance WebSocket closed")

    # --- Internals ---

    def _set_state(self, state: ConnectionState) -> None:
        if state != self._state:
            logger.debug(f"WebSocket state {self._state.value} -> {state.value}")
            self._state = state

    async def _send_method(self, method: str, channels: list[str]) -> bool:
        if not self.is_open() or self._ws is None:
            return False

        message = {
            "method": method,
            "params": list(channels),
            "id": int(time.time() * 1000),
        }
        try:
            await self._ws.send(json.dumps(message))
        except websockets.ConnectionClosed as e:
            logger.warning(f"Could not send {method}, connection closed: {e}")
            return False

        logger.debug(f"Sent {method} for {channels}")
        return True

    async def _delayed_connect(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._reconnect_task = None
        if self._should_run:
            await self._connect()

    def _cancel_reconnect(self) -> None:
        if self._reconnect_task and not self._reconnect_task.done():
            self._reconnect_task.cancel()
        self._reconnect_task = None

    async def _cancel_tasks(self) -> None:
        """Cancel the ping and receive tasks."""
        current = asyncio.current_task()
        for task in (self._ping_task, self._receive_task):
            if task is None or task is current or task.done():
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._ping_task = None
        self._receive_task = None

    async def _handle_disconnect(self) -> None:
        """Tear down after a close or error, then reconnect if still wanted."""
        self._ws = None
        await self._cancel_tasks()
        self._set_state(ConnectionState.CLOSED)
        await self._notify(self._on_close)

        if self._should_run:
            self.reconnect()

    async def _ping_loop(self, ws: ClientConnection) -> None:
        """Send liveness pings while the connection is open."""
        while True:
            await asyncio.sleep(self._ping_interval)
            if self._ws is not ws:
                return
            try:
                await ws.ping()
            except websockets.ConnectionClosed:
                # The receive loop sees the close and drives the reconnect
                return

    async def _receive_loop(self, ws: ClientConnection) -> None:
        """Process incoming messages until the socket closes."""
        try:
            async for raw_message in ws:
                try:
                    message = json.loads(raw_message)
                except json.JSONDecodeError as e:
                    logger.warning(f"Failed to parse message: {e}")
                    continue
                self._dispatch(message)

        except websockets.ConnectionClosed as e:
            logger.warning(f"Binance WebSocket closed: {e}")

        except Exception as e:
            logger.error(f"Binance WebSocket error: {e}")

        else:
            logger.info("Binance WebSocket closed by server")

        if self._ws is ws:
            await self._handle_disconnect()

    def _dispatch(self, message: dict[str, Any]) -> None:
        if self._on_message is None:
            return
        try:
            self._on_message(message)
        except Exception as e:
            logger.error(f"Error handling WebSocket message: {e}")

    async def _notify(self, callback: Callback | None) -> None:
        if callback is None:
            return
        try:
            result = callback()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"WebSocket callback failed: {e}")
